"""
Relational implementation of the bank account repository.

Persists accounts in the accounts database. Reads go through the shared
cache; every storage call runs under the database retry policy.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from ..cache.memory_cache import MemoryCache
from ..domain.entities import BankAccount, account_type_from_code, account_type_to_code
from ..infrastructure.retry_policy import RetryPolicy
from ..models import BankAccountRecord
from .cached_repository import CachedRepositoryMixin
from .interfaces import IBankAccountRepository

logger = logging.getLogger(__name__)


class SqlBankAccountRepository(CachedRepositoryMixin, IBankAccountRepository):
    """SQLAlchemy implementation for bank account persistence."""

    cache_namespace = "bank_accounts"

    def __init__(
        self,
        session_factory: sessionmaker,
        cache: MemoryCache,
        retry_policy: RetryPolicy,
        cache_ttl_minutes: float = 10,
    ):
        """
        Initialize repository.

        Args:
            session_factory: Session factory bound to the accounts database
            cache: Shared cache instance
            retry_policy: Policy wrapping every storage call
            cache_ttl_minutes: Sliding lifetime of cached reads
        """
        self.session_factory = session_factory
        self.cache = cache
        self.retry_policy = retry_policy
        self.cache_ttl_minutes = cache_ttl_minutes

    async def get_all(self) -> List[BankAccount]:
        async def load() -> List[BankAccount]:
            with self.session_factory() as session:
                records = session.query(BankAccountRecord).order_by(BankAccountRecord.id).all()
                return [self._map_to_entity(record) for record in records]

        return await self._cached_read(self._key("all"), load, "get_all_bank_accounts") or []

    async def get_by_id(self, account_id: int) -> Optional[BankAccount]:
        async def load() -> Optional[BankAccount]:
            with self.session_factory() as session:
                record = session.get(BankAccountRecord, account_id)
                return self._map_to_entity(record) if record else None

        return await self._cached_read(self._key("id", account_id), load, "get_bank_account")

    async def create(self, account: BankAccount) -> BankAccount:
        async def insert() -> BankAccount:
            with self.session_factory() as session:
                record = BankAccountRecord()
                self._apply(record, account)
                if account.created_date is not None:
                    record.created_date = account.created_date
                session.add(record)
                self._commit(session)
                session.refresh(record)
                return self._map_to_entity(record)

        created = await self.retry_policy.execute(insert, "create_bank_account")
        self._invalidate_all()
        self.cache.set(self._key("id", created.id), created, self.cache_ttl_minutes)
        logger.info(f"Created bank account {created.id} ({created.account_number})")
        return created

    async def update(self, account: BankAccount) -> bool:
        async def overwrite() -> bool:
            with self.session_factory() as session:
                record = session.get(BankAccountRecord, account.id)
                if record is None:
                    return False
                self._apply(record, account)
                self._commit(session)
                return True

        updated = await self.retry_policy.execute(overwrite, "update_bank_account")
        if updated:
            self._invalidate_all()
        return updated

    async def delete(self, account_id: int) -> bool:
        async def remove() -> bool:
            with self.session_factory() as session:
                record = session.get(BankAccountRecord, account_id)
                if record is None:
                    return False
                session.delete(record)
                self._commit(session)
                return True

        deleted = await self.retry_policy.execute(remove, "delete_bank_account")
        if deleted:
            self._invalidate_all()
        return deleted

    @staticmethod
    def _apply(record: BankAccountRecord, account: BankAccount) -> None:
        """Copy replaceable fields; id and created_date are never overwritten."""
        record.account_number = account.account_number
        record.owner_name = account.owner_name
        record.balance = account.balance
        record.type = account_type_to_code(account.type)
        record.is_active = account.is_active
        record.bank_id = account.bank_id
        record.branch_id = account.branch_id

    @staticmethod
    def _map_to_entity(record: BankAccountRecord) -> BankAccount:
        return BankAccount(
            id=record.id,
            account_number=record.account_number,
            owner_name=record.owner_name,
            balance=record.balance,
            type=account_type_from_code(record.type),
            created_date=record.created_date,
            is_active=record.is_active,
            bank_id=record.bank_id,
            branch_id=record.branch_id,
        )
