"""
Relational implementation of the customer account repository (customers database).
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from ..cache.memory_cache import MemoryCache
from ..domain.entities import CustomerAccount, account_type_from_code, account_type_to_code
from ..infrastructure.retry_policy import RetryPolicy
from ..models import CustomerAccountRecord
from .cached_repository import CachedRepositoryMixin
from .interfaces import ICustomerAccountRepository

logger = logging.getLogger(__name__)


class SqlCustomerAccountRepository(CachedRepositoryMixin, ICustomerAccountRepository):
    """SQLAlchemy implementation for customer account persistence."""

    cache_namespace = "customer_accounts"

    def __init__(
        self,
        session_factory: sessionmaker,
        cache: MemoryCache,
        retry_policy: RetryPolicy,
        cache_ttl_minutes: float = 10,
    ):
        self.session_factory = session_factory
        self.cache = cache
        self.retry_policy = retry_policy
        self.cache_ttl_minutes = cache_ttl_minutes

    async def get_all(self) -> List[CustomerAccount]:
        async def load() -> List[CustomerAccount]:
            with self.session_factory() as session:
                records = (
                    session.query(CustomerAccountRecord).order_by(CustomerAccountRecord.id).all()
                )
                return [self._map_to_entity(record) for record in records]

        return (
            await self._cached_read(self._key("all"), load, "get_all_customer_accounts") or []
        )

    async def get_by_id(self, account_id: int) -> Optional[CustomerAccount]:
        async def load() -> Optional[CustomerAccount]:
            with self.session_factory() as session:
                record = session.get(CustomerAccountRecord, account_id)
                return self._map_to_entity(record) if record else None

        return await self._cached_read(self._key("id", account_id), load, "get_customer_account")

    async def get_by_customer_id(self, customer_id: int) -> List[CustomerAccount]:
        async def load() -> List[CustomerAccount]:
            with self.session_factory() as session:
                records = (
                    session.query(CustomerAccountRecord)
                    .filter(CustomerAccountRecord.customer_id == customer_id)
                    .order_by(CustomerAccountRecord.id)
                    .all()
                )
                return [self._map_to_entity(record) for record in records]

        key = self._key("customer", customer_id)
        return await self._cached_read(key, load, "get_customer_accounts_by_customer") or []

    async def create(self, account: CustomerAccount) -> CustomerAccount:
        async def insert() -> CustomerAccount:
            with self.session_factory() as session:
                record = CustomerAccountRecord()
                self._apply(record, account)
                if account.created_date is not None:
                    record.created_date = account.created_date
                session.add(record)
                self._commit(session)
                session.refresh(record)
                return self._map_to_entity(record)

        created = await self.retry_policy.execute(insert, "create_customer_account")
        self._invalidate_all()
        logger.info(f"Created customer account {created.id} for customer {created.customer_id}")
        return created

    async def update(self, account: CustomerAccount) -> bool:
        async def overwrite() -> bool:
            with self.session_factory() as session:
                record = session.get(CustomerAccountRecord, account.id)
                if record is None:
                    return False
                self._apply(record, account)
                self._commit(session)
                return True

        updated = await self.retry_policy.execute(overwrite, "update_customer_account")
        if updated:
            self._invalidate_all()
        return updated

    async def delete(self, account_id: int) -> bool:
        async def remove() -> bool:
            with self.session_factory() as session:
                deleted = (
                    session.query(CustomerAccountRecord)
                    .filter(CustomerAccountRecord.id == account_id)
                    .delete(synchronize_session=False)
                )
                self._commit(session)
                return deleted > 0

        deleted = await self.retry_policy.execute(remove, "delete_customer_account")
        if deleted:
            self._invalidate_all()
        return deleted

    @staticmethod
    def _apply(record: CustomerAccountRecord, account: CustomerAccount) -> None:
        record.customer_id = account.customer_id
        record.account_number = account.account_number
        record.balance = account.balance
        record.type = account_type_to_code(account.type)
        record.is_active = account.is_active

    @staticmethod
    def _map_to_entity(record: CustomerAccountRecord) -> CustomerAccount:
        return CustomerAccount(
            id=record.id,
            customer_id=record.customer_id,
            account_number=record.account_number,
            balance=record.balance,
            type=account_type_from_code(record.type),
            created_date=record.created_date,
            is_active=record.is_active,
        )
