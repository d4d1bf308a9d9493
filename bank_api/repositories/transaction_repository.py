"""
Remote-API implementation of the transaction repository.
"""

import logging
from datetime import date
from typing import List, Optional

from ..cache.memory_cache import MemoryCache
from ..domain.entities import Transaction
from ..domain.exceptions import DataAccessException
from ..infrastructure.transaction_api_client import (
    TransactionApiClient,
    transaction_from_json,
    transaction_to_json,
)
from .interfaces import ITransactionRepository

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class ApiTransactionRepository(ITransactionRepository):
    """
    Transaction repository backed by the remote transaction API.

    Account listings and single transactions are cached for a short time;
    date-range queries always go to the API. Retries happen inside the client.
    """

    cache_namespace = "transactions"

    def __init__(
        self,
        client: TransactionApiClient,
        cache: MemoryCache,
        cache_ttl_minutes: float = 5,
    ):
        self.client = client
        self.cache = cache
        self.cache_ttl_minutes = cache_ttl_minutes

    async def get_by_account_id(self, account_id: int) -> List[Transaction]:
        key = f"{self.cache_namespace}:account:{account_id}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        generation = self.cache.generation(key)
        payload = await self.client.request("GET", f"api/accounts/{account_id}/transactions")
        transactions = [transaction_from_json(item) for item in payload or []]
        self.cache.set(key, transactions, self.cache_ttl_minutes, generation=generation)
        return transactions

    async def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        key = f"{self.cache_namespace}:id:{transaction_id}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        generation = self.cache.generation(key)
        payload = await self.client.request("GET", f"api/transactions/{transaction_id}")
        if payload is None:
            return None
        transaction = transaction_from_json(payload)
        self.cache.set(key, transaction, self.cache_ttl_minutes, generation=generation)
        return transaction

    async def get_by_date_range(
        self, account_id: int, start_date: date, end_date: date
    ) -> List[Transaction]:
        payload = await self.client.request(
            "GET",
            f"api/accounts/{account_id}/transactions",
            params={
                "startDate": start_date.strftime(DATE_FORMAT),
                "endDate": end_date.strftime(DATE_FORMAT),
            },
        )
        return [transaction_from_json(item) for item in payload or []]

    async def create(self, transaction: Transaction) -> Transaction:
        payload = await self.client.request(
            "POST", "api/transactions", json=transaction_to_json(transaction)
        )
        if payload is None:
            raise DataAccessException("Transaction API did not return the created transaction")

        created = transaction_from_json(payload)
        self.cache.invalidate_prefix(f"{self.cache_namespace}:")
        logger.info(f"Created transaction {created.id} on account {created.account_id}")
        return created
