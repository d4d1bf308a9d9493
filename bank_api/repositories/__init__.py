"""Repository interfaces and their storage-specific implementations."""

from .bank_account_repository import SqlBankAccountRepository
from .bank_branch_repository import RedisBankBranchRepository
from .customer_account_repository import SqlCustomerAccountRepository
from .customer_repository import SqlCustomerRepository
from .in_memory_branch_repository import InMemoryBankBranchRepository
from .interfaces import (
    IBankAccountRepository,
    IBankBranchRepository,
    ICustomerAccountRepository,
    ICustomerRepository,
    ITransactionRepository,
)
from .transaction_repository import ApiTransactionRepository

__all__ = [
    "ApiTransactionRepository",
    "IBankAccountRepository",
    "IBankBranchRepository",
    "ICustomerAccountRepository",
    "ICustomerRepository",
    "ITransactionRepository",
    "InMemoryBankBranchRepository",
    "RedisBankBranchRepository",
    "SqlBankAccountRepository",
    "SqlCustomerAccountRepository",
    "SqlCustomerRepository",
]
