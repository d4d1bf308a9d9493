"""
Database models for the Bank API.

Two independent relational stores are used, each with its own declarative
base so their schemas can be created on separate engines:

- ``AccountsBase``: bank accounts (table ``Account``)
- ``CustomersBase``: customers and customer accounts
  (tables ``CUSTOMERS`` and ``CUSTOMER_ACCOUNTS``, upper-case columns)
"""

from typing import Any

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

AccountsBase: Any = declarative_base()
CustomersBase: Any = declarative_base()

MONEY = Numeric(18, 2)


class BankAccountRecord(AccountsBase):
    """
    Bank account row.

    Attributes:
        id: Auto-increment primary key
        account_number: Account number (max 50 characters)
        owner_name: Account holder (max 100 characters)
        balance: Current balance, decimal(18,2)
        type: Account type storage code (0-4)
        created_date: Creation timestamp (UTC)
        is_active: Active flag
        bank_id: Owning bank, copied from the branch on write
        branch_id: Branch holding the account
    """

    __tablename__ = "Account"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    account_number = Column(String(50), nullable=False, index=True)
    owner_name = Column(String(100), nullable=False)
    balance = Column(MONEY, nullable=False, default=0)
    type = Column(Integer, nullable=False, default=0)
    created_date = Column(DateTime, nullable=False, default=func.now())
    is_active = Column(Boolean, nullable=False, default=True)
    bank_id = Column(Integer, nullable=True)
    branch_id = Column(Integer, nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<BankAccountRecord(id={self.id}, account_number={self.account_number})>"


class CustomerRecord(CustomersBase):
    """Customer row."""

    __tablename__ = "CUSTOMERS"

    id = Column("ID", Integer, primary_key=True, autoincrement=True)
    first_name = Column("FIRST_NAME", String(100), nullable=False)
    last_name = Column("LAST_NAME", String(100), nullable=False)
    email = Column("EMAIL", String(255), nullable=False)
    phone_number = Column("PHONE_NUMBER", String(50))
    address = Column("ADDRESS", String(255))
    city = Column("CITY", String(100))
    state = Column("STATE", String(50))
    zip_code = Column("ZIP_CODE", String(20))
    created_date = Column("CREATED_DATE", DateTime, nullable=False, default=func.now())
    is_active = Column("IS_ACTIVE", Boolean, nullable=False, default=True)

    __table_args__ = (Index("IX_CUSTOMERS_EMAIL", "EMAIL"),)

    def __repr__(self) -> str:
        return f"<CustomerRecord(id={self.id}, email={self.email})>"


class CustomerAccountRecord(CustomersBase):
    """Customer account row; CUSTOMER_ID is a soft reference without cascade."""

    __tablename__ = "CUSTOMER_ACCOUNTS"

    id = Column("ID", Integer, primary_key=True, autoincrement=True)
    customer_id = Column("CUSTOMER_ID", Integer, nullable=False)
    account_number = Column("ACCOUNT_NUMBER", String(50), nullable=False)
    balance = Column("BALANCE", MONEY, nullable=False, default=0)
    type = Column("TYPE", Integer, nullable=False, default=0)
    created_date = Column("CREATED_DATE", DateTime, nullable=False, default=func.now())
    is_active = Column("IS_ACTIVE", Boolean, nullable=False, default=True)

    __table_args__ = (Index("IX_CUSTOMER_ACCOUNTS_CUSTOMER_ID", "CUSTOMER_ID"),)

    def __repr__(self) -> str:
        return f"<CustomerAccountRecord(id={self.id}, customer_id={self.customer_id})>"
