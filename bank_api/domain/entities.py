"""
Domain entities for the banking service.

Plain records shared by repositories, services and routers.
Storage-specific shapes live in the repositories that own them.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from .exceptions import DataMappingException


class AccountType(str, Enum):
    """Account product types."""

    CHECKING = "Checking"
    SAVINGS = "Savings"
    INVESTMENT = "Investment"
    LOAN = "Loan"
    CREDIT_CARD = "CreditCard"


# Storage codes are part of the persisted schema; do not renumber.
ACCOUNT_TYPE_CODES: Dict[AccountType, int] = {
    AccountType.CHECKING: 0,
    AccountType.SAVINGS: 1,
    AccountType.INVESTMENT: 2,
    AccountType.LOAN: 3,
    AccountType.CREDIT_CARD: 4,
}

_ACCOUNT_TYPES_BY_CODE: Dict[int, AccountType] = {
    code: account_type for account_type, code in ACCOUNT_TYPE_CODES.items()
}


def account_type_to_code(account_type: AccountType) -> int:
    """Map an account type to its storage code."""
    return ACCOUNT_TYPE_CODES[AccountType(account_type)]


def account_type_from_code(code: int) -> AccountType:
    """
    Map a storage code to an account type.

    Raises:
        DataMappingException: If the code is outside the known range
    """
    try:
        return _ACCOUNT_TYPES_BY_CODE[code]
    except KeyError:
        raise DataMappingException("type", code, "unknown account type code") from None


WITHDRAWAL_TYPES = frozenset({"withdrawal", "transfer"})


@dataclass
class Customer:
    first_name: str
    last_name: str
    email: str
    id: int = 0
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    created_date: Optional[datetime] = None
    is_active: bool = True


@dataclass
class CustomerAccount:
    customer_id: int
    account_number: str
    balance: Decimal = Decimal("0")
    type: AccountType = AccountType.CHECKING
    id: int = 0
    created_date: Optional[datetime] = None
    is_active: bool = True


@dataclass
class BankAccount:
    """
    Account held at a bank branch.

    ``bank_id`` must match the bank of ``branch_id`` when a branch is set.
    The account service enforces this on writes and heals it on reads.
    """

    account_number: str
    owner_name: str
    balance: Decimal = Decimal("0")
    type: AccountType = AccountType.CHECKING
    id: int = 0
    created_date: Optional[datetime] = None
    is_active: bool = True
    bank_id: Optional[int] = None
    branch_id: Optional[int] = None

    @property
    def has_branch(self) -> bool:
        return bool(self.branch_id and self.branch_id > 0)


@dataclass
class BankBranch:
    bank_id: int
    branch_name: str
    id: int = 0
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: bool = True
    created_date: Optional[datetime] = None


@dataclass
class Transaction:
    """A ledger movement on a bank account. Negative amounts debit the account."""

    account_id: int
    transaction_type: str
    amount: Decimal
    id: int = 0
    description: Optional[str] = None
    timestamp: Optional[datetime] = None
    balance_after_transaction: Decimal = Decimal("0")
    reference: Optional[str] = None

    @property
    def is_debit_type(self) -> bool:
        return (self.transaction_type or "").strip().lower() in WITHDRAWAL_TYPES

