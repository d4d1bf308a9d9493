"""
Transaction service.

Records transactions through the remote API and applies them to the
account balance.
"""

import logging
from datetime import date, datetime
from typing import List

from ..domain.entities import BankAccount, Transaction
from ..domain.exceptions import (
    BusinessValidationException,
    DataAccessException,
    ResourceNotFoundException,
)
from ..repositories.interfaces import IBankAccountRepository, ITransactionRepository
from .validation import require_text

logger = logging.getLogger(__name__)


class TransactionService:
    """
    Transaction operations.

    Creating a transaction performs two separate writes: the transaction is
    stored first, then the account balance is updated. A failure between the
    two leaves a recorded transaction that is not reflected in the balance;
    that case is logged and reported as a data access error.
    """

    def __init__(
        self,
        transaction_repo: ITransactionRepository,
        account_repo: IBankAccountRepository,
    ):
        self.transaction_repo = transaction_repo
        self.account_repo = account_repo

    async def get_transactions_by_account_id(self, account_id: int) -> List[Transaction]:
        await self._require_account(account_id)
        return await self.transaction_repo.get_by_account_id(account_id)

    async def get_transaction_by_id(self, transaction_id: int) -> Transaction:
        transaction = await self.transaction_repo.get_by_id(transaction_id)
        if transaction is None:
            raise ResourceNotFoundException("Transaction", transaction_id)
        return transaction

    async def get_transactions_by_date_range(
        self, account_id: int, start_date: date, end_date: date
    ) -> List[Transaction]:
        """
        Get an account's transactions between two dates, inclusive.

        Raises:
            BusinessValidationException: If start_date is after end_date
            ResourceNotFoundException: If the account does not exist
        """
        if start_date > end_date:
            raise BusinessValidationException(
                "Start date must be before or equal to end date", field="startDate"
            )
        await self._require_account(account_id)
        return await self.transaction_repo.get_by_date_range(account_id, start_date, end_date)

    async def create_transaction(self, transaction: Transaction) -> Transaction:
        """
        Record a transaction and apply its amount to the account balance.

        Withdrawals and transfers whose amount exceeds the current balance
        are rejected before anything is written.

        Raises:
            BusinessValidationException: Invalid input or insufficient funds
            ResourceNotFoundException: If the account does not exist
            DataAccessException: The balance update failed after the transaction was stored
        """
        if transaction.account_id is None or transaction.account_id <= 0:
            raise BusinessValidationException("Account ID is required", field="accountId")
        if transaction.amount == 0:
            raise BusinessValidationException(
                "Transaction amount cannot be zero", field="amount"
            )
        require_text(
            transaction.transaction_type, "Transaction type is required", "transactionType"
        )

        account = await self._require_account(transaction.account_id)
        if transaction.is_debit_type and abs(transaction.amount) > account.balance:
            raise BusinessValidationException(
                "Insufficient funds for this transaction", field="amount"
            )

        transaction.timestamp = datetime.utcnow()
        created = await self.transaction_repo.create(transaction)

        account.balance = account.balance + transaction.amount
        if not await self.account_repo.update(account):
            logger.error(
                f"Transaction {created.id} recorded but balance of account "
                f"{account.id} was not updated"
            )
            raise DataAccessException(
                f"Failed to update balance of account {account.id} "
                f"after transaction {created.id}"
            )

        logger.info(
            f"Transaction {created.id} ({created.transaction_type} {created.amount}) "
            f"applied to account {account.id}, new balance {account.balance}"
        )
        return created

    async def _require_account(self, account_id: int) -> BankAccount:
        account = await self.account_repo.get_by_id(account_id)
        if account is None:
            raise ResourceNotFoundException("Bank Account", account_id)
        return account
