"""
Request and response models for the REST API.

JSON bodies use camelCase names; Python code uses snake_case. Money is
serialized as a JSON number.
"""

from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from ..domain.entities import (
    ACCOUNT_TYPE_CODES,
    AccountType,
    BankAccount,
    BankBranch,
    Customer,
    CustomerAccount,
    Transaction,
)


def _account_type_from_code(value: Any) -> Any:
    """Accept the numeric storage codes as well as the type names."""
    if isinstance(value, int) and not isinstance(value, bool):
        for account_type, code in ACCOUNT_TYPE_CODES.items():
            if code == value:
                return account_type
    return value


Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
AccountTypeField = Annotated[AccountType, BeforeValidator(_account_type_from_code)]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_entity(cls, entity: Any):
        return cls.model_validate(asdict(entity))


class CustomerRequest(ApiModel):
    id: Optional[int] = None
    first_name: str = Field(..., max_length=100, examples=["John"])
    last_name: str = Field(..., max_length=100, examples=["Doe"])
    email: str = Field(..., max_length=255, examples=["john.doe@example.com"])
    phone_number: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)
    is_active: bool = True

    def to_entity(self) -> Customer:
        return Customer(**self.model_dump(exclude={"id"}), id=self.id or 0)


class CustomerResponse(ApiModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    created_date: Optional[datetime] = None
    is_active: bool


class CustomerAccountRequest(ApiModel):
    id: Optional[int] = None
    customer_id: int
    account_number: str = Field(..., max_length=50, examples=["CA-1001"])
    balance: Decimal = Decimal("0")
    type: AccountTypeField = AccountType.CHECKING
    is_active: bool = True

    def to_entity(self) -> CustomerAccount:
        return CustomerAccount(**self.model_dump(exclude={"id"}), id=self.id or 0)


class CustomerAccountResponse(ApiModel):
    id: int
    customer_id: int
    account_number: str
    balance: Money
    type: AccountType
    created_date: Optional[datetime] = None
    is_active: bool


class BankAccountRequest(ApiModel):
    id: Optional[int] = None
    account_number: str = Field(..., max_length=50, examples=["ACC-003"])
    owner_name: str = Field(..., max_length=100, examples=["Jane Smith"])
    balance: Decimal = Decimal("0")
    type: AccountTypeField = AccountType.CHECKING
    is_active: bool = True
    bank_id: Optional[int] = None
    branch_id: Optional[int] = None

    def to_entity(self) -> BankAccount:
        return BankAccount(**self.model_dump(exclude={"id"}), id=self.id or 0)


class BankAccountResponse(ApiModel):
    id: int
    account_number: str
    owner_name: str
    balance: Money
    type: AccountType
    created_date: Optional[datetime] = None
    is_active: bool
    bank_id: Optional[int] = None
    branch_id: Optional[int] = None


class BankBranchRequest(ApiModel):
    id: Optional[int] = None
    bank_id: int
    branch_name: str = Field(..., max_length=100, examples=["Downtown Branch"])
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: bool = True

    def to_entity(self) -> BankBranch:
        return BankBranch(**self.model_dump(exclude={"id"}), id=self.id or 0)


class BankBranchResponse(ApiModel):
    id: int
    bank_id: int
    branch_name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: bool
    created_date: Optional[datetime] = None


class TransactionRequest(ApiModel):
    account_id: int = 0
    transaction_type: str = Field("", examples=["Deposit"])
    amount: Decimal
    description: Optional[str] = Field(None, max_length=500)

    def to_entity(self) -> Transaction:
        return Transaction(**self.model_dump())


class TransactionResponse(ApiModel):
    id: int
    account_id: int
    transaction_type: str
    amount: Money
    description: Optional[str] = None
    timestamp: Optional[datetime] = None
    balance_after_transaction: Money
    reference: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""

    model_config = ConfigDict(populate_by_name=True)

    status: int
    title: str
    detail: str
    error_code: str = Field(..., alias="errorCode")
    path: str
    timestamp: str
    request_id: str = Field(..., alias="requestId")
    errors: Optional[dict] = None
