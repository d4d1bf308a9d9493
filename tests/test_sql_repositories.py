"""
Tests for the relational repositories (bank accounts, customers, customer accounts).
"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from bank_api.domain.entities import AccountType, BankAccount, Customer, CustomerAccount
from bank_api.domain.exceptions import DataMappingException, StorageUnavailableException
from bank_api.models import BankAccountRecord
from bank_api.repositories.bank_account_repository import SqlBankAccountRepository
from bank_api.repositories.customer_account_repository import SqlCustomerAccountRepository
from bank_api.repositories.customer_repository import SqlCustomerRepository


@pytest.fixture
def account_repo(database, cache, retry_policy):
    return SqlBankAccountRepository(database.AccountsSession, cache, retry_policy)


@pytest.fixture
def customer_repo(database, cache, retry_policy):
    return SqlCustomerRepository(database.CustomersSession, cache, retry_policy)


@pytest.fixture
def customer_account_repo(database, cache, retry_policy):
    return SqlCustomerAccountRepository(database.CustomersSession, cache, retry_policy)


def new_account(**overrides) -> BankAccount:
    fields = dict(
        account_number="ACC-100",
        owner_name="John Doe",
        balance=Decimal("250.75"),
        type=AccountType.SAVINGS,
        created_date=datetime(2024, 1, 15, 9, 30),
        bank_id=1,
        branch_id=2,
    )
    fields.update(overrides)
    return BankAccount(**fields)


class TestSqlBankAccountRepository:
    """Tests for the bank account repository."""

    @pytest.mark.asyncio
    async def test_create_then_get_by_id(self, account_repo):
        created = await account_repo.create(new_account())

        assert created.id > 0
        fetched = await account_repo.get_by_id(created.id)
        assert fetched == created
        assert fetched.balance == Decimal("250.75")
        assert fetched.type == AccountType.SAVINGS
        assert fetched.created_date == datetime(2024, 1, 15, 9, 30)

    @pytest.mark.asyncio
    async def test_get_by_id_missing_returns_none(self, account_repo):
        assert await account_repo.get_by_id(999) is None

    @pytest.mark.asyncio
    async def test_get_all_ordered_by_id(self, account_repo):
        first = await account_repo.create(new_account(account_number="ACC-1"))
        second = await account_repo.create(new_account(account_number="ACC-2"))

        accounts = await account_repo.get_all()

        assert [a.id for a in accounts] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_update_replaces_fields_and_keeps_created_date(self, account_repo):
        created = await account_repo.create(new_account())
        replacement = new_account(
            id=created.id,
            account_number="ACC-200",
            owner_name="Jane Doe",
            balance=Decimal("10.00"),
            type=AccountType.LOAN,
            created_date=datetime(2030, 1, 1),
        )

        assert await account_repo.update(replacement) is True

        fetched = await account_repo.get_by_id(created.id)
        assert fetched.account_number == "ACC-200"
        assert fetched.owner_name == "Jane Doe"
        assert fetched.type == AccountType.LOAN
        assert fetched.created_date == datetime(2024, 1, 15, 9, 30)

    @pytest.mark.asyncio
    async def test_update_missing_returns_false(self, account_repo):
        assert await account_repo.update(new_account(id=42)) is False

    @pytest.mark.asyncio
    async def test_delete(self, account_repo):
        created = await account_repo.create(new_account())

        assert await account_repo.delete(created.id) is True
        assert await account_repo.get_by_id(created.id) is None
        assert await account_repo.delete(created.id) is False

    @pytest.mark.asyncio
    async def test_reads_are_cached(self, account_repo, cache):
        created = await account_repo.create(new_account())
        await account_repo.get_all()
        hits_before = cache.hits

        await account_repo.get_all()
        await account_repo.get_by_id(created.id)

        assert cache.hits == hits_before + 2

    @pytest.mark.asyncio
    async def test_writes_invalidate_cached_reads(self, account_repo):
        created = await account_repo.create(new_account(owner_name="Before"))
        assert len(await account_repo.get_all()) == 1
        assert (await account_repo.get_by_id(created.id)).owner_name == "Before"

        await account_repo.update(new_account(id=created.id, owner_name="After"))
        assert (await account_repo.get_by_id(created.id)).owner_name == "After"
        assert (await account_repo.get_all())[0].owner_name == "After"

        await account_repo.create(new_account(account_number="ACC-2"))
        assert len(await account_repo.get_all()) == 2

        await account_repo.delete(created.id)
        assert await account_repo.get_by_id(created.id) is None
        assert len(await account_repo.get_all()) == 1

    @pytest.mark.asyncio
    async def test_unknown_type_code_fails_without_retry(self, database, cache, retry_policy):
        with database.AccountsSession() as session:
            session.add(
                BankAccountRecord(account_number="BAD", owner_name="X", balance=0, type=9)
            )
            session.commit()

        session_factory = MagicMock(wraps=database.AccountsSession)
        repo = SqlBankAccountRepository(session_factory, cache, retry_policy)

        with pytest.raises(DataMappingException):
            await repo.get_all()
        assert session_factory.call_count == 1

    @pytest.mark.asyncio
    async def test_storage_failure_is_retried_then_reported(self, cache, retry_policy):
        session_factory = MagicMock(side_effect=ConnectionError("db down"))
        repo = SqlBankAccountRepository(session_factory, cache, retry_policy)

        with pytest.raises(StorageUnavailableException):
            await repo.get_by_id(1)
        assert session_factory.call_count == 3


class TestSqlCustomerRepository:
    """Tests for the customer repository."""

    @pytest.mark.asyncio
    async def test_create_then_get_by_id(self, customer_repo):
        customer = Customer(
            first_name="John",
            last_name="Doe",
            email="j@x.com",
            city="New York",
            created_date=datetime(2024, 2, 1),
        )

        created = await customer_repo.create(customer)

        assert created.id > 0
        assert await customer_repo.get_by_id(created.id) == created

    @pytest.mark.asyncio
    async def test_update_and_delete(self, customer_repo):
        created = await customer_repo.create(
            Customer(first_name="John", last_name="Doe", email="j@x.com")
        )
        created.email = "john@example.com"

        assert await customer_repo.update(created) is True
        assert (await customer_repo.get_by_id(created.id)).email == "john@example.com"
        assert await customer_repo.delete(created.id) is True
        assert await customer_repo.get_all() == []

    @pytest.mark.asyncio
    async def test_delete_missing_returns_false(self, customer_repo):
        assert await customer_repo.delete(123) is False


class TestSqlCustomerAccountRepository:
    """Tests for the customer account repository."""

    @pytest.mark.asyncio
    async def test_get_by_customer_id(self, customer_account_repo):
        await customer_account_repo.create(CustomerAccount(customer_id=1, account_number="A-1"))
        await customer_account_repo.create(CustomerAccount(customer_id=2, account_number="B-1"))
        await customer_account_repo.create(
            CustomerAccount(customer_id=1, account_number="A-2", type=AccountType.CREDIT_CARD)
        )

        accounts = await customer_account_repo.get_by_customer_id(1)

        assert [a.account_number for a in accounts] == ["A-1", "A-2"]
        assert accounts[1].type == AccountType.CREDIT_CARD
        assert await customer_account_repo.get_by_customer_id(3) == []

    @pytest.mark.asyncio
    async def test_create_invalidates_customer_listing(self, customer_account_repo):
        assert await customer_account_repo.get_by_customer_id(1) == []

        await customer_account_repo.create(CustomerAccount(customer_id=1, account_number="A-1"))

        assert len(await customer_account_repo.get_by_customer_id(1)) == 1

    @pytest.mark.asyncio
    async def test_update_missing_returns_false(self, customer_account_repo):
        account = CustomerAccount(id=77, customer_id=1, account_number="A-1")
        assert await customer_account_repo.update(account) is False
