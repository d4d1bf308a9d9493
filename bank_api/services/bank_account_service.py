"""
Bank account service.

Validates account writes, keeps each account's bank id consistent with its
branch, and enriches accounts read back from storage.
"""

import logging
from datetime import datetime
from typing import List

from ..domain.entities import BankAccount, BankBranch
from ..domain.exceptions import DataAccessException, ResourceNotFoundException
from ..repositories.interfaces import IBankAccountRepository, IBankBranchRepository
from .validation import require_non_negative, require_text

logger = logging.getLogger(__name__)


class BankAccountService:
    """
    Bank account operations spanning the account and branch stores.

    ``bank_id`` is stamped from the branch on create and on branch changes.
    Reads heal a stale ``bank_id`` by overwriting it with the branch's value.
    """

    def __init__(
        self,
        account_repo: IBankAccountRepository,
        branch_repo: IBankBranchRepository,
    ):
        """
        Initialize bank account service.

        Args:
            account_repo: Bank account repository
            branch_repo: Branch repository used for validation and enrichment
        """
        self.account_repo = account_repo
        self.branch_repo = branch_repo

    async def get_all_accounts(self) -> List[BankAccount]:
        accounts = await self.account_repo.get_all()
        return [await self._enrich(account) for account in accounts]

    async def get_account_by_id(self, account_id: int) -> BankAccount:
        """
        Get one account, enriched with its branch's bank id.

        Raises:
            ResourceNotFoundException: If the account does not exist
        """
        account = await self.account_repo.get_by_id(account_id)
        if account is None:
            raise ResourceNotFoundException("Bank Account", account_id)
        return await self._enrich(account)

    async def create_account(self, account: BankAccount) -> BankAccount:
        """
        Create an account.

        Args:
            account: New account; id, created_date and is_active are assigned here

        Returns:
            The stored, enriched account

        Raises:
            BusinessValidationException: Blank number/owner or negative balance
            ResourceNotFoundException: If the referenced branch does not exist
        """
        self._validate(account)
        require_non_negative(account.balance, "Initial balance cannot be negative", "balance")

        if account.has_branch:
            branch = await self._require_branch(account.branch_id)
            account.bank_id = branch.bank_id

        account.created_date = datetime.utcnow()
        account.is_active = True

        created = await self.account_repo.create(account)
        logger.info(f"Bank account {created.id} created for {created.owner_name}")
        return await self._enrich(created)

    async def update_account(self, account_id: int, account: BankAccount) -> None:
        """
        Replace an existing account.

        The creation timestamp is preserved. The branch is re-validated only
        when it changes.

        Raises:
            BusinessValidationException: Blank account number or owner name
            ResourceNotFoundException: Account or new branch does not exist
            DataAccessException: The store reported no row updated
        """
        self._validate(account)

        existing = await self.account_repo.get_by_id(account_id)
        if existing is None:
            raise ResourceNotFoundException("Bank Account", account_id)

        if account.branch_id != existing.branch_id:
            if account.has_branch:
                branch = await self._require_branch(account.branch_id)
                account.bank_id = branch.bank_id
        elif account.bank_id is None:
            account.bank_id = existing.bank_id

        account.id = account_id
        account.created_date = existing.created_date

        if not await self.account_repo.update(account):
            raise DataAccessException(f"Failed to update bank account with ID {account_id}")
        logger.info(f"Bank account {account_id} updated")

    async def delete_account(self, account_id: int) -> None:
        if not await self.account_repo.delete(account_id):
            raise ResourceNotFoundException("Bank Account", account_id)
        logger.info(f"Bank account {account_id} deleted")

    @staticmethod
    def _validate(account: BankAccount) -> None:
        require_text(account.account_number, "Account number cannot be empty", "accountNumber")
        require_text(account.owner_name, "Owner name cannot be empty", "ownerName")

    async def _require_branch(self, branch_id: int) -> BankBranch:
        branch = await self.branch_repo.get_by_id(branch_id)
        if branch is None:
            raise ResourceNotFoundException("Branch", branch_id)
        return branch

    async def _enrich(self, account: BankAccount) -> BankAccount:
        if not account.has_branch:
            return account

        try:
            branch = await self.branch_repo.get_by_id(account.branch_id)
        except Exception as e:
            logger.warning(
                f"Could not enrich bank account {account.id} with branch {account.branch_id}: {e}",
                exc_info=True,
            )
            return account

        if branch is None:
            logger.warning(
                f"Branch {account.branch_id} referenced by bank account {account.id} not found"
            )
        elif branch.bank_id != account.bank_id:
            logger.warning(
                f"Bank ID mismatch for account {account.id}: account has {account.bank_id}, "
                f"branch {branch.id} belongs to bank {branch.bank_id}. Using the branch's bank ID."
            )
            account.bank_id = branch.bank_id
        return account
