"""
Customer account service.
"""

import logging
from datetime import datetime
from typing import List

from ..domain.entities import CustomerAccount
from ..domain.exceptions import DataAccessException, ResourceNotFoundException
from ..repositories.interfaces import ICustomerAccountRepository, ICustomerRepository
from .validation import require_non_negative, require_text

logger = logging.getLogger(__name__)


class CustomerAccountService:
    """Customer account operations; every account must reference an existing customer."""

    def __init__(
        self,
        account_repo: ICustomerAccountRepository,
        customer_repo: ICustomerRepository,
    ):
        self.account_repo = account_repo
        self.customer_repo = customer_repo

    async def get_all_accounts(self) -> List[CustomerAccount]:
        return await self.account_repo.get_all()

    async def get_account_by_id(self, account_id: int) -> CustomerAccount:
        account = await self.account_repo.get_by_id(account_id)
        if account is None:
            raise ResourceNotFoundException("Customer Account", account_id)
        return account

    async def get_accounts_by_customer_id(self, customer_id: int) -> List[CustomerAccount]:
        """
        Get the accounts of one customer.

        Raises:
            ResourceNotFoundException: If the customer does not exist
        """
        await self._require_customer(customer_id)
        return await self.account_repo.get_by_customer_id(customer_id)

    async def create_account(self, account: CustomerAccount) -> CustomerAccount:
        require_text(account.account_number, "Account number cannot be empty", "accountNumber")
        require_non_negative(account.balance, "Initial balance cannot be negative", "balance")
        await self._require_customer(account.customer_id)

        account.created_date = datetime.utcnow()
        account.is_active = True
        created = await self.account_repo.create(account)
        logger.info(f"Customer account {created.id} created for customer {created.customer_id}")
        return created

    async def update_account(self, account_id: int, account: CustomerAccount) -> None:
        """
        Replace an existing customer account.

        The owning customer is re-checked only when it changes.
        """
        require_text(account.account_number, "Account number cannot be empty", "accountNumber")
        existing = await self.get_account_by_id(account_id)
        if account.customer_id != existing.customer_id:
            await self._require_customer(account.customer_id)

        account.id = account_id
        account.created_date = existing.created_date
        if not await self.account_repo.update(account):
            raise DataAccessException(f"Failed to update customer account with ID {account_id}")

    async def delete_account(self, account_id: int) -> None:
        if not await self.account_repo.delete(account_id):
            raise ResourceNotFoundException("Customer Account", account_id)

    async def _require_customer(self, customer_id: int) -> None:
        if await self.customer_repo.get_by_id(customer_id) is None:
            raise ResourceNotFoundException("Customer", customer_id)
