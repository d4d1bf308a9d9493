"""Business services: validation, orchestration and enrichment."""

from .bank_account_service import BankAccountService
from .bank_branch_service import BankBranchService
from .customer_account_service import CustomerAccountService
from .customer_service import CustomerService
from .transaction_service import TransactionService

__all__ = [
    "BankAccountService",
    "BankBranchService",
    "CustomerAccountService",
    "CustomerService",
    "TransactionService",
]
