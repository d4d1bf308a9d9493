"""
Relational implementation of the customer repository (customers database).
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from ..cache.memory_cache import MemoryCache
from ..domain.entities import Customer
from ..infrastructure.retry_policy import RetryPolicy
from ..models import CustomerRecord
from .cached_repository import CachedRepositoryMixin
from .interfaces import ICustomerRepository

logger = logging.getLogger(__name__)


class SqlCustomerRepository(CachedRepositoryMixin, ICustomerRepository):
    """SQLAlchemy implementation for customer persistence."""

    cache_namespace = "customers"

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

    async def get_all(self) -> List[Customer]:
        async def load() -> List[Customer]:
            with self.session_factory() as session:
                records = session.query(CustomerRecord).order_by(CustomerRecord.id).all()
                return [self._map_to_entity(record) for record in records]

        return await self._cached_read(self._key("all"), load, "get_all_customers") or []

    async def get_by_id(self, customer_id: int) -> Optional[Customer]:
        async def load() -> Optional[Customer]:
            with self.session_factory() as session:
                record = session.get(CustomerRecord, customer_id)
                return self._map_to_entity(record) if record else None

        return await self._cached_read(self._key("id", customer_id), load, "get_customer")

    async def create(self, customer: Customer) -> Customer:
        async def insert() -> Customer:
            with self.session_factory() as session:
                record = CustomerRecord()
                self._apply(record, customer)
                if customer.created_date is not None:
                    record.created_date = customer.created_date
                session.add(record)
                self._commit(session)
                session.refresh(record)
                return self._map_to_entity(record)

        created = await self.retry_policy.execute(insert, "create_customer")
        self._invalidate_all()
        logger.info(f"Created customer {created.id}")
        return created

    async def update(self, customer: Customer) -> bool:
        async def overwrite() -> bool:
            with self.session_factory() as session:
                record = session.get(CustomerRecord, customer.id)
                if record is None:
                    return False
                self._apply(record, customer)
                self._commit(session)
                return True

        updated = await self.retry_policy.execute(overwrite, "update_customer")
        if updated:
            self._invalidate_all()
        return updated

    async def delete(self, customer_id: int) -> bool:
        async def remove() -> bool:
            with self.session_factory() as session:
                deleted = (
                    session.query(CustomerRecord)
                    .filter(CustomerRecord.id == customer_id)
                    .delete(synchronize_session=False)
                )
                self._commit(session)
                return deleted > 0

        deleted = await self.retry_policy.execute(remove, "delete_customer")
        if deleted:
            self._invalidate_all()
        return deleted

    @staticmethod
    def _apply(record: CustomerRecord, customer: Customer) -> None:
        record.first_name = customer.first_name
        record.last_name = customer.last_name
        record.email = customer.email
        record.phone_number = customer.phone_number
        record.address = customer.address
        record.city = customer.city
        record.state = customer.state
        record.zip_code = customer.zip_code
        record.is_active = customer.is_active

    @staticmethod
    def _map_to_entity(record: CustomerRecord) -> Customer:
        return Customer(
            id=record.id,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            phone_number=record.phone_number,
            address=record.address,
            city=record.city,
            state=record.state,
            zip_code=record.zip_code,
            created_date=record.created_date,
            is_active=record.is_active,
        )
