"""
Redis implementation of the bank branch repository.

Each branch is a JSON document with camelCase field names:

- ``branch:{id}``: the document
- ``branches:ids``: sorted set of all branch ids (score = id)
- ``branches:bank:{bank_id}``: set of branch ids per bank
- ``branches:next_id``: counter incremented atomically to assign ids
"""

import json
import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import redis.asyncio as redis

from ..cache.memory_cache import MemoryCache
from ..domain.entities import BankBranch
from ..domain.exceptions import DataMappingException
from ..infrastructure.retry_policy import RetryPolicy
from .cached_repository import CachedRepositoryMixin
from .interfaces import IBankBranchRepository

logger = logging.getLogger(__name__)

IDS_KEY = "branches:ids"
COUNTER_KEY = "branches:next_id"


def branch_key(branch_id: int) -> str:
    return f"branch:{branch_id}"


def bank_index_key(bank_id: int) -> str:
    return f"branches:bank:{bank_id}"


def serialize_branch(branch: BankBranch) -> Dict[str, Any]:
    """Convert a branch to its document shape."""
    return {
        "id": branch.id,
        "bankId": branch.bank_id,
        "branchName": branch.branch_name,
        "address": branch.address,
        "city": branch.city,
        "state": branch.state,
        "zipCode": branch.zip_code,
        "phoneNumber": branch.phone_number,
        "isActive": branch.is_active,
        "createdDate": branch.created_date.isoformat() if branch.created_date else None,
    }


def deserialize_branch(raw: Any) -> BankBranch:
    """
    Convert a stored document to a branch.

    Raises:
        DataMappingException: If the document is not valid branch JSON
    """
    try:
        data = json.loads(raw)
        created = data.get("createdDate")
        return BankBranch(
            id=int(data["id"]),
            bank_id=int(data["bankId"]),
            branch_name=data["branchName"],
            address=data.get("address"),
            city=data.get("city"),
            state=data.get("state"),
            zip_code=data.get("zipCode"),
            phone_number=data.get("phoneNumber"),
            is_active=bool(data.get("isActive", True)),
            created_date=datetime.fromisoformat(created) if created else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DataMappingException("branch", str(raw)[:100], str(e)) from e


class RedisBankBranchRepository(CachedRepositoryMixin, IBankBranchRepository):
    """
    Redis document store for bank branches.

    Reads are cached in the shared memory cache; every Redis call runs
    under the retry policy.
    """

    cache_namespace = "bank_branches"

    def __init__(
        self,
        redis_client: redis.Redis,
        cache: MemoryCache,
        retry_policy: RetryPolicy,
        cache_ttl_minutes: float = 10,
    ):
        """
        Initialize Redis repository.

        Args:
            redis_client: Async Redis client
            cache: Shared cache instance
            retry_policy: Policy wrapping every Redis call
            cache_ttl_minutes: Sliding lifetime of cached reads
        """
        self.redis = redis_client
        self.cache = cache
        self.retry_policy = retry_policy
        self.cache_ttl_minutes = cache_ttl_minutes

    async def _load_many(self, ids: Iterable[Any]) -> List[BankBranch]:
        branch_ids = sorted(int(branch_id) for branch_id in ids)
        if not branch_ids:
            return []
        documents = await self.redis.mget([branch_key(branch_id) for branch_id in branch_ids])
        return [deserialize_branch(doc) for doc in documents if doc is not None]

    async def get_all(self) -> List[BankBranch]:
        async def load() -> List[BankBranch]:
            return await self._load_many(await self.redis.zrange(IDS_KEY, 0, -1))

        return await self._cached_read(self._key("all"), load, "get_all_branches") or []

    async def get_by_id(self, branch_id: int) -> Optional[BankBranch]:
        async def load() -> Optional[BankBranch]:
            raw = await self.redis.get(branch_key(branch_id))
            return deserialize_branch(raw) if raw is not None else None

        return await self._cached_read(self._key("id", branch_id), load, "get_branch")

    async def get_by_bank_id(self, bank_id: int) -> List[BankBranch]:
        async def load() -> List[BankBranch]:
            return await self._load_many(await self.redis.smembers(bank_index_key(bank_id)))

        key = self._key("bank", bank_id)
        return await self._cached_read(key, load, "get_branches_by_bank") or []

    async def create(self, branch: BankBranch) -> BankBranch:
        async def insert() -> BankBranch:
            branch_id = int(await self.redis.incr(COUNTER_KEY))
            stored = replace(branch, id=branch_id)
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.set(branch_key(branch_id), json.dumps(serialize_branch(stored)))
                pipe.zadd(IDS_KEY, {str(branch_id): branch_id})
                pipe.sadd(bank_index_key(stored.bank_id), str(branch_id))
                await pipe.execute()
            return stored

        created = await self.retry_policy.execute(insert, "create_branch")
        self._invalidate_all()
        self.cache.set(self._key("id", created.id), created, self.cache_ttl_minutes)
        logger.info(f"Created branch {created.id} for bank {created.bank_id}")
        return created

    async def update(self, branch: BankBranch) -> bool:
        async def overwrite() -> bool:
            raw = await self.redis.get(branch_key(branch.id))
            if raw is None:
                return False
            existing = deserialize_branch(raw)
            stored = replace(branch, created_date=existing.created_date)
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.set(branch_key(branch.id), json.dumps(serialize_branch(stored)))
                if existing.bank_id != stored.bank_id:
                    pipe.srem(bank_index_key(existing.bank_id), str(branch.id))
                    pipe.sadd(bank_index_key(stored.bank_id), str(branch.id))
                await pipe.execute()
            return True

        updated = await self.retry_policy.execute(overwrite, "update_branch")
        if updated:
            self._invalidate_all()
        return updated

    async def delete(self, branch_id: int) -> bool:
        async def remove() -> bool:
            raw = await self.redis.get(branch_key(branch_id))
            if raw is None:
                return False
            existing = deserialize_branch(raw)
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.delete(branch_key(branch_id))
                pipe.zrem(IDS_KEY, str(branch_id))
                pipe.srem(bank_index_key(existing.bank_id), str(branch_id))
                await pipe.execute()
            return True

        deleted = await self.retry_policy.execute(remove, "delete_branch")
        if deleted:
            self._invalidate_all()
        return deleted

    async def close(self) -> None:
        await self.redis.aclose()
