"""
Tests for the business services, with repositories replaced by AsyncMocks.
"""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from bank_api.domain.entities import (
    AccountType,
    BankAccount,
    BankBranch,
    Customer,
    CustomerAccount,
    Transaction,
)
from bank_api.domain.exceptions import (
    BusinessValidationException,
    DataAccessException,
    ResourceNotFoundException,
)
from bank_api.repositories.interfaces import (
    IBankAccountRepository,
    IBankBranchRepository,
    ICustomerAccountRepository,
    ICustomerRepository,
    ITransactionRepository,
)
from bank_api.services import (
    BankAccountService,
    BankBranchService,
    CustomerAccountService,
    CustomerService,
    TransactionService,
)

CREATED = datetime(2024, 1, 15, 9, 30)


@pytest.fixture
def account_repo():
    return AsyncMock(spec=IBankAccountRepository)


@pytest.fixture
def branch_repo():
    repo = AsyncMock(spec=IBankBranchRepository)
    repo.get_by_id.return_value = BankBranch(id=2, bank_id=7, branch_name="Uptown Branch")
    return repo


@pytest.fixture
def customer_repo():
    return AsyncMock(spec=ICustomerRepository)


@pytest.fixture
def customer_account_repo():
    return AsyncMock(spec=ICustomerAccountRepository)


@pytest.fixture
def transaction_repo():
    return AsyncMock(spec=ITransactionRepository)


def bank_account(**overrides) -> BankAccount:
    fields = dict(
        id=1,
        account_number="ACC-001",
        owner_name="John Doe",
        balance=Decimal("100.00"),
        type=AccountType.CHECKING,
        created_date=CREATED,
        bank_id=7,
        branch_id=2,
    )
    fields.update(overrides)
    return BankAccount(**fields)


class TestBankAccountService:
    """Tests for BankAccountService."""

    @pytest.mark.asyncio
    async def test_get_by_id_heals_bank_id_from_branch(self, account_repo, branch_repo):
        account_repo.get_by_id.return_value = bank_account(bank_id=99)
        service = BankAccountService(account_repo, branch_repo)

        account = await service.get_account_by_id(1)

        assert account.bank_id == 7
        account_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, account_repo, branch_repo):
        account_repo.get_by_id.return_value = None
        service = BankAccountService(account_repo, branch_repo)

        with pytest.raises(ResourceNotFoundException) as exc_info:
            await service.get_account_by_id(5)

        assert exc_info.value.message == "Bank Account with ID 5 not found"

    @pytest.mark.asyncio
    async def test_enrichment_failure_returns_account_unchanged(self, account_repo, branch_repo):
        account_repo.get_all.return_value = [bank_account(bank_id=99)]
        branch_repo.get_by_id.side_effect = ConnectionError("redis down")
        service = BankAccountService(account_repo, branch_repo)

        accounts = await service.get_all_accounts()

        assert accounts[0].bank_id == 99

    @pytest.mark.asyncio
    async def test_account_without_branch_not_enriched(self, account_repo, branch_repo):
        account_repo.get_by_id.return_value = bank_account(branch_id=None, bank_id=None)
        service = BankAccountService(account_repo, branch_repo)

        account = await service.get_account_by_id(1)

        assert account.bank_id is None
        branch_repo.get_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_stamps_bank_id_from_branch(self, account_repo, branch_repo):
        account_repo.create.side_effect = lambda account: account
        service = BankAccountService(account_repo, branch_repo)

        created = await service.create_account(
            bank_account(id=0, bank_id=None, created_date=None, is_active=False)
        )

        assert created.bank_id == 7
        assert created.is_active is True
        assert created.created_date is not None

    @pytest.mark.asyncio
    async def test_create_rejects_negative_balance(self, account_repo, branch_repo):
        service = BankAccountService(account_repo, branch_repo)

        with pytest.raises(BusinessValidationException) as exc_info:
            await service.create_account(bank_account(balance=Decimal("-10")))

        assert exc_info.value.message == "Initial balance cannot be negative"
        account_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_with_unknown_branch(self, account_repo, branch_repo):
        branch_repo.get_by_id.return_value = None
        service = BankAccountService(account_repo, branch_repo)

        with pytest.raises(ResourceNotFoundException) as exc_info:
            await service.create_account(bank_account(branch_id=999))

        assert exc_info.value.message == "Branch with ID 999 not found"
        account_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_preserves_created_date(self, account_repo, branch_repo):
        account_repo.get_by_id.return_value = bank_account()
        account_repo.update.return_value = True
        service = BankAccountService(account_repo, branch_repo)

        await service.update_account(
            1, bank_account(id=0, owner_name="Jane Doe", created_date=datetime(2030, 1, 1))
        )

        stored = account_repo.update.call_args.args[0]
        assert stored.id == 1
        assert stored.owner_name == "Jane Doe"
        assert stored.created_date == CREATED
        branch_repo.get_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_rejects_blank_owner(self, account_repo, branch_repo):
        service = BankAccountService(account_repo, branch_repo)

        with pytest.raises(BusinessValidationException) as exc_info:
            await service.update_account(1, bank_account(owner_name="   "))

        assert exc_info.value.message == "Owner name cannot be empty"
        account_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_rejects_blank_account_number(self, account_repo, branch_repo):
        service = BankAccountService(account_repo, branch_repo)

        with pytest.raises(BusinessValidationException) as exc_info:
            await service.create_account(bank_account(account_number=""))

        assert exc_info.value.message == "Account number cannot be empty"
        account_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_rejects_blank_account_number(self, account_repo, branch_repo):
        service = BankAccountService(account_repo, branch_repo)

        with pytest.raises(BusinessValidationException) as exc_info:
            await service.update_account(1, bank_account(account_number="  "))

        assert exc_info.value.message == "Account number cannot be empty"
        account_repo.get_by_id.assert_not_called()
        account_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_revalidates_changed_branch(self, account_repo, branch_repo):
        account_repo.get_by_id.return_value = bank_account(branch_id=1, bank_id=1)
        account_repo.update.return_value = True
        service = BankAccountService(account_repo, branch_repo)

        await service.update_account(1, bank_account(branch_id=2, bank_id=None))

        branch_repo.get_by_id.assert_awaited_once_with(2)
        assert account_repo.update.call_args.args[0].bank_id == 7

    @pytest.mark.asyncio
    async def test_update_missing_account(self, account_repo, branch_repo):
        account_repo.get_by_id.return_value = None
        service = BankAccountService(account_repo, branch_repo)

        with pytest.raises(ResourceNotFoundException):
            await service.update_account(3, bank_account())

    @pytest.mark.asyncio
    async def test_delete_missing_account(self, account_repo, branch_repo):
        account_repo.delete.return_value = False
        service = BankAccountService(account_repo, branch_repo)

        with pytest.raises(ResourceNotFoundException):
            await service.delete_account(3)


class TestCustomerService:
    """Tests for CustomerService."""

    @pytest.mark.asyncio
    async def test_create_customer(self, customer_repo):
        customer_repo.create.side_effect = lambda customer: Customer(
            **{**customer.__dict__, "id": 1}
        )
        service = CustomerService(customer_repo)

        created = await service.create_customer(
            Customer(first_name="John", last_name="Doe", email="j@x.com", is_active=False)
        )

        assert created.id == 1
        assert created.is_active is True
        assert created.created_date is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields,message",
        [
            (dict(first_name="", last_name="Doe", email="j@x.com"), "First name cannot be empty"),
            (dict(first_name="John", last_name=" ", email="j@x.com"), "Last name cannot be empty"),
            (dict(first_name="John", last_name="Doe", email=""), "Email cannot be empty"),
        ],
    )
    async def test_create_requires_names_and_email(self, customer_repo, fields, message):
        service = CustomerService(customer_repo)

        with pytest.raises(BusinessValidationException) as exc_info:
            await service.create_customer(Customer(**fields))

        assert exc_info.value.message == message
        customer_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_preserves_created_date(self, customer_repo):
        customer_repo.get_by_id.return_value = Customer(
            id=4, first_name="John", last_name="Doe", email="j@x.com", created_date=CREATED
        )
        customer_repo.update.return_value = True
        service = CustomerService(customer_repo)

        await service.update_customer(
            4, Customer(first_name="John", last_name="Doe", email="new@x.com")
        )

        stored = customer_repo.update.call_args.args[0]
        assert (stored.id, stored.created_date, stored.email) == (4, CREATED, "new@x.com")

    @pytest.mark.asyncio
    async def test_update_store_failure(self, customer_repo):
        customer_repo.get_by_id.return_value = Customer(
            id=4, first_name="John", last_name="Doe", email="j@x.com"
        )
        customer_repo.update.return_value = False
        service = CustomerService(customer_repo)

        with pytest.raises(DataAccessException):
            await service.update_customer(
                4, Customer(first_name="John", last_name="Doe", email="j@x.com")
            )

    @pytest.mark.asyncio
    async def test_get_missing_customer(self, customer_repo):
        customer_repo.get_by_id.return_value = None
        service = CustomerService(customer_repo)

        with pytest.raises(ResourceNotFoundException) as exc_info:
            await service.get_customer_by_id(9)

        assert exc_info.value.message == "Customer with ID 9 not found"


class TestCustomerAccountService:
    """Tests for CustomerAccountService."""

    @pytest.mark.asyncio
    async def test_create_requires_existing_customer(self, customer_account_repo, customer_repo):
        customer_repo.get_by_id.return_value = None
        service = CustomerAccountService(customer_account_repo, customer_repo)

        with pytest.raises(ResourceNotFoundException):
            await service.create_account(CustomerAccount(customer_id=5, account_number="A-1"))

        customer_account_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_account(self, customer_account_repo, customer_repo):
        customer_repo.get_by_id.return_value = Customer(
            id=5, first_name="John", last_name="Doe", email="j@x.com"
        )
        customer_account_repo.create.side_effect = lambda account: account
        service = CustomerAccountService(customer_account_repo, customer_repo)

        created = await service.create_account(
            CustomerAccount(customer_id=5, account_number="A-1", balance=Decimal("20"))
        )

        assert created.is_active is True
        assert created.created_date is not None

    @pytest.mark.asyncio
    async def test_create_rejects_blank_account_number(
        self, customer_account_repo, customer_repo
    ):
        service = CustomerAccountService(customer_account_repo, customer_repo)

        with pytest.raises(BusinessValidationException) as exc_info:
            await service.create_account(CustomerAccount(customer_id=5, account_number=" "))

        assert exc_info.value.message == "Account number cannot be empty"
        customer_account_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_validates_before_lookup(self, customer_account_repo, customer_repo):
        customer_account_repo.get_by_id.return_value = None
        service = CustomerAccountService(customer_account_repo, customer_repo)

        with pytest.raises(BusinessValidationException) as exc_info:
            await service.update_account(
                404, CustomerAccount(customer_id=5, account_number="")
            )

        assert exc_info.value.message == "Account number cannot be empty"
        customer_account_repo.get_by_id.assert_not_called()
        customer_account_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_by_customer_id_requires_customer(
        self, customer_account_repo, customer_repo
    ):
        customer_repo.get_by_id.return_value = None
        service = CustomerAccountService(customer_account_repo, customer_repo)

        with pytest.raises(ResourceNotFoundException):
            await service.get_accounts_by_customer_id(5)

        customer_account_repo.get_by_customer_id.assert_not_called()


class TestBankBranchService:
    """Tests for BankBranchService."""

    @pytest.mark.asyncio
    async def test_create_rejects_blank_name(self, branch_repo):
        service = BankBranchService(branch_repo)

        with pytest.raises(BusinessValidationException) as exc_info:
            await service.create_branch(BankBranch(bank_id=1, branch_name=""))

        assert exc_info.value.message == "Branch name cannot be empty"

    @pytest.mark.asyncio
    async def test_missing_branch(self, branch_repo):
        branch_repo.get_by_id.return_value = None
        branch_repo.update.return_value = False
        service = BankBranchService(branch_repo)

        with pytest.raises(ResourceNotFoundException):
            await service.get_branch_by_id(999)
        with pytest.raises(ResourceNotFoundException):
            await service.update_branch(999, BankBranch(bank_id=1, branch_name="X"))


class TestTransactionService:
    """Tests for TransactionService."""

    @pytest.fixture
    def service(self, transaction_repo, account_repo):
        account_repo.get_by_id.return_value = bank_account(balance=Decimal("100.00"))
        account_repo.update.return_value = True
        transaction_repo.create.side_effect = lambda transaction: Transaction(
            **{**transaction.__dict__, "id": 11}
        )
        return TransactionService(transaction_repo, account_repo)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ["Withdrawal", "TRANSFER", "withdrawal"])
    async def test_insufficient_funds_writes_nothing(
        self, service, transaction_repo, account_repo, kind
    ):
        with pytest.raises(BusinessValidationException) as exc_info:
            await service.create_transaction(
                Transaction(account_id=1, transaction_type=kind, amount=Decimal("-9999"))
            )

        assert exc_info.value.message == "Insufficient funds for this transaction"
        transaction_repo.create.assert_not_called()
        account_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_withdrawal_updates_balance(self, service, account_repo):
        created = await service.create_transaction(
            Transaction(account_id=1, transaction_type="Withdrawal", amount=Decimal("-40.00"))
        )

        assert created.id == 11
        assert created.timestamp is not None
        assert account_repo.update.call_args.args[0].balance == Decimal("60.00")

    @pytest.mark.asyncio
    async def test_payment_is_not_checked_against_balance(self, service, account_repo):
        await service.create_transaction(
            Transaction(account_id=1, transaction_type="Payment", amount=Decimal("-500.00"))
        )

        assert account_repo.update.call_args.args[0].balance == Decimal("-400.00")

    @pytest.mark.asyncio
    async def test_zero_amount_rejected(self, service):
        with pytest.raises(BusinessValidationException) as exc_info:
            await service.create_transaction(
                Transaction(account_id=1, transaction_type="Deposit", amount=Decimal("0"))
            )

        assert exc_info.value.message == "Transaction amount cannot be zero"

    @pytest.mark.asyncio
    async def test_type_required(self, service):
        with pytest.raises(BusinessValidationException) as exc_info:
            await service.create_transaction(
                Transaction(account_id=1, transaction_type=" ", amount=Decimal("5"))
            )

        assert exc_info.value.message == "Transaction type is required"

    @pytest.mark.asyncio
    async def test_balance_update_failure_reported(self, service, account_repo):
        account_repo.update.return_value = False

        with pytest.raises(DataAccessException):
            await service.create_transaction(
                Transaction(account_id=1, transaction_type="Deposit", amount=Decimal("5"))
            )

    @pytest.mark.asyncio
    async def test_unknown_account(self, service, account_repo, transaction_repo):
        account_repo.get_by_id.return_value = None

        with pytest.raises(ResourceNotFoundException):
            await service.get_transactions_by_account_id(8)

        transaction_repo.get_by_account_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_date_range(self, service, transaction_repo):
        with pytest.raises(BusinessValidationException) as exc_info:
            await service.get_transactions_by_date_range(1, date(2024, 2, 1), date(2024, 1, 1))

        assert exc_info.value.message == "Start date must be before or equal to end date"
        transaction_repo.get_by_date_range.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_transaction(self, service, transaction_repo):
        transaction_repo.get_by_id.return_value = None

        with pytest.raises(ResourceNotFoundException) as exc_info:
            await service.get_transaction_by_id(999)

        assert exc_info.value.message == "Transaction with ID 999 not found"
