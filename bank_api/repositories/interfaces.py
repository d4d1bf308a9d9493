"""
Repository interfaces (Abstract Base Classes).

Define the contract for each entity's persistence independent of the
underlying store. Lookups return None for an absent entity; update and
delete return False when the target does not exist.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from ..domain.entities import BankAccount, BankBranch, Customer, CustomerAccount, Transaction


class IBankAccountRepository(ABC):
    """Abstract repository for bank accounts."""

    @abstractmethod
    async def get_all(self) -> List[BankAccount]:
        """
        Get all bank accounts.

        Returns:
            List of accounts ordered by id
        """
        pass

    @abstractmethod
    async def get_by_id(self, account_id: int) -> Optional[BankAccount]:
        """
        Find a bank account by id.

        Args:
            account_id: Account identifier

        Returns:
            BankAccount if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, account: BankAccount) -> BankAccount:
        """
        Persist a new bank account.

        Args:
            account: Account to create; its id is ignored

        Returns:
            The stored account with its assigned id
        """
        pass

    @abstractmethod
    async def update(self, account: BankAccount) -> bool:
        """
        Replace an existing bank account.

        Args:
            account: Account with the id of the row to replace

        Returns:
            True if updated, False if no such account exists
        """
        pass

    @abstractmethod
    async def delete(self, account_id: int) -> bool:
        """
        Delete a bank account.

        Returns:
            True if deleted, False if no such account exists
        """
        pass


class IBankBranchRepository(ABC):
    """Abstract repository for bank branches."""

    @abstractmethod
    async def get_all(self) -> List[BankBranch]:
        pass

    @abstractmethod
    async def get_by_id(self, branch_id: int) -> Optional[BankBranch]:
        """
        Find a branch by id.

        Returns:
            BankBranch if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_bank_id(self, bank_id: int) -> List[BankBranch]:
        """
        Get all branches of a bank.

        Args:
            bank_id: Owning bank identifier

        Returns:
            Branches ordered by id, empty if the bank has none
        """
        pass

    @abstractmethod
    async def create(self, branch: BankBranch) -> BankBranch:
        pass

    @abstractmethod
    async def update(self, branch: BankBranch) -> bool:
        pass

    @abstractmethod
    async def delete(self, branch_id: int) -> bool:
        pass

    async def close(self) -> None:
        """Release store connections."""


class ICustomerRepository(ABC):
    """Abstract repository for customers."""

    @abstractmethod
    async def get_all(self) -> List[Customer]:
        pass

    @abstractmethod
    async def get_by_id(self, customer_id: int) -> Optional[Customer]:
        pass

    @abstractmethod
    async def create(self, customer: Customer) -> Customer:
        pass

    @abstractmethod
    async def update(self, customer: Customer) -> bool:
        pass

    @abstractmethod
    async def delete(self, customer_id: int) -> bool:
        pass


class ICustomerAccountRepository(ABC):
    """Abstract repository for customer accounts."""

    @abstractmethod
    async def get_all(self) -> List[CustomerAccount]:
        pass

    @abstractmethod
    async def get_by_id(self, account_id: int) -> Optional[CustomerAccount]:
        pass

    @abstractmethod
    async def get_by_customer_id(self, customer_id: int) -> List[CustomerAccount]:
        """
        Get all accounts owned by a customer.

        Args:
            customer_id: Owning customer identifier

        Returns:
            Accounts ordered by id, empty if the customer has none
        """
        pass

    @abstractmethod
    async def create(self, account: CustomerAccount) -> CustomerAccount:
        pass

    @abstractmethod
    async def update(self, account: CustomerAccount) -> bool:
        pass

    @abstractmethod
    async def delete(self, account_id: int) -> bool:
        pass


class ITransactionRepository(ABC):
    """
    Abstract repository for account transactions.

    Transactions are append-only: there is no update or delete.
    """

    @abstractmethod
    async def get_by_account_id(self, account_id: int) -> List[Transaction]:
        """
        Get the transactions of an account, newest first.

        Returns:
            Transactions, empty if the account has none
        """
        pass

    @abstractmethod
    async def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        pass

    @abstractmethod
    async def get_by_date_range(
        self, account_id: int, start_date: date, end_date: date
    ) -> List[Transaction]:
        """
        Get an account's transactions between two dates, inclusive.

        Args:
            account_id: Account identifier
            start_date: First day included
            end_date: Last day included

        Returns:
            Matching transactions, newest first
        """
        pass

    @abstractmethod
    async def create(self, transaction: Transaction) -> Transaction:
        pass
