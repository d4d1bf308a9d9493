"""
In-process stand-in for the remote transaction API.

Serves the same endpoints as the real API through ``httpx.MockTransport``
so the transaction client can run without network access in development
and tests.
"""

import itertools
import json
import logging
import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

import httpx

from ..domain.entities import Transaction
from .transaction_api_client import transaction_from_json, transaction_to_json

logger = logging.getLogger(__name__)

ACCOUNT_TRANSACTIONS_PATH = re.compile(r"^/api/accounts/(\d+)/transactions/?$")
TRANSACTION_PATH = re.compile(r"^/api/transactions/(\d+)/?$")
TRANSACTIONS_PATH = re.compile(r"^/api/transactions/?$")

# (account_id, type, amount, description, days_ago)
SAMPLE_TRANSACTIONS = (
    (1, "Deposit", "1000.00", "Initial deposit", 30),
    (1, "Withdrawal", "-250.00", "ATM Withdrawal", 25),
    (1, "Deposit", "2500.00", "Salary payment", 15),
    (1, "Payment", "-129.99", "Utility bill", 10),
    (1, "Transfer", "-500.00", "Transfer to savings", 5),
    (2, "Deposit", "5000.00", "Initial deposit", 60),
    (2, "Withdrawal", "-1500.00", "Car repair", 45),
    (2, "Deposit", "3000.00", "Bonus payment", 30),
    (2, "Payment", "-899.99", "Electronics purchase", 20),
    (2, "Deposit", "500.00", "Refund", 2),
)


class MockTransactionApi:
    """
    Mock transaction API backed by a dictionary.

    Ids are sequential, references are ``REF{id:06d}`` and the post-transaction
    balance is the running sum of the account's amounts. Listing an account
    that has no transactions answers 404, like the real API.
    """

    def __init__(self, seed: bool = True):
        self._transactions: Dict[int, Transaction] = {}
        self._by_account: Dict[int, List[int]] = {}
        self._ids = itertools.count(1)
        self.requests: List[httpx.Request] = []
        if seed:
            now = datetime.utcnow()
            for account_id, kind, amount, description, days_ago in SAMPLE_TRANSACTIONS:
                self.add(
                    Transaction(
                        account_id=account_id,
                        transaction_type=kind,
                        amount=Decimal(amount),
                        description=description,
                        timestamp=now - timedelta(days=days_ago),
                    )
                )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def add(self, transaction: Transaction) -> Transaction:
        """Store a transaction, assigning id, reference and balance snapshot."""
        transaction_id = next(self._ids)
        account_ids = self._by_account.setdefault(transaction.account_id, [])
        balance = sum(
            (self._transactions[existing].amount for existing in account_ids), Decimal("0")
        )
        transaction.id = transaction_id
        transaction.reference = f"REF{transaction_id:06d}"
        transaction.balance_after_transaction = balance + transaction.amount
        transaction.timestamp = transaction.timestamp or datetime.utcnow()
        self._transactions[transaction_id] = transaction
        account_ids.append(transaction_id)
        return transaction

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        match = ACCOUNT_TRANSACTIONS_PATH.match(path)
        if match and request.method == "GET":
            start = request.url.params.get("startDate")
            end = request.url.params.get("endDate")
            return self._list_for_account(
                int(match.group(1)),
                date.fromisoformat(start) if start else None,
                date.fromisoformat(end) if end else None,
            )

        match = TRANSACTION_PATH.match(path)
        if match and request.method == "GET":
            transaction = self._transactions.get(int(match.group(1)))
            if transaction is None:
                return httpx.Response(404)
            return httpx.Response(200, json=transaction_to_json(transaction))

        if TRANSACTIONS_PATH.match(path) and request.method == "POST":
            created = self.add(transaction_from_json({"id": 0, **json.loads(request.content)}))
            logger.debug(f"Mock API created transaction {created.id}")
            return httpx.Response(201, json=transaction_to_json(created))

        return httpx.Response(404)

    def _list_for_account(
        self, account_id: int, start: Optional[date], end: Optional[date]
    ) -> httpx.Response:
        transaction_ids = self._by_account.get(account_id)
        if not transaction_ids:
            return httpx.Response(404)

        transactions = [self._transactions[transaction_id] for transaction_id in transaction_ids]
        if start is not None and end is not None:
            transactions = [t for t in transactions if start <= t.timestamp.date() <= end]
        transactions.sort(key=lambda t: t.timestamp, reverse=True)
        return httpx.Response(200, json=[transaction_to_json(t) for t in transactions])
