"""
Test configuration and fixtures
"""

import asyncio
from collections import defaultdict
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from bank_api.app import app
from bank_api.cache.memory_cache import MemoryCache
from bank_api.config import Settings
from bank_api.container import ServiceContainer
from bank_api.database import DatabaseManager
from bank_api.dependencies import set_container
from bank_api.infrastructure.mock_transaction_api import MockTransactionApi
from bank_api.infrastructure.retry_policy import RetryPolicy
from bank_api.infrastructure.transaction_api_client import TransactionApiClient
from bank_api.repositories.in_memory_branch_repository import InMemoryBankBranchRepository


def _memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakePipeline:
    def __init__(self, redis: "FakeRedis"):
        self._redis = redis
        self._commands: List[tuple] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def __getattr__(self, name):
        def queue(*args, **kwargs):
            self._commands.append((name, args, kwargs))
            return self

        return queue

    async def execute(self):
        return [
            await getattr(self._redis, name)(*args, **kwargs)
            for name, args, kwargs in self._commands
        ]


class FakeRedis:
    """Dictionary-backed stand-in for the subset of redis.asyncio used by the branch store."""

    def __init__(self):
        self.values: Dict[str, bytes] = {}
        self.sorted_sets: Dict[str, Dict[bytes, float]] = defaultdict(dict)
        self.sets: Dict[str, set] = defaultdict(set)
        self.calls: List[str] = []
        self.closed = False

    @staticmethod
    def _encode(value: Any) -> bytes:
        return value if isinstance(value, bytes) else str(value).encode()

    async def ping(self):
        return True

    async def get(self, key: str) -> Optional[bytes]:
        self.calls.append("get")
        return self.values.get(key)

    async def mget(self, keys: List[str]) -> List[Optional[bytes]]:
        self.calls.append("mget")
        return [self.values.get(key) for key in keys]

    async def set(self, key: str, value: Any):
        self.values[key] = self._encode(value)
        return True

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.values.pop(key, None) is not None)

    async def incr(self, key: str) -> int:
        value = int(self.values.get(key, b"0")) + 1
        self.values[key] = str(value).encode()
        return value

    async def zadd(self, key: str, mapping: Dict[Any, float]) -> int:
        for member, score in mapping.items():
            self.sorted_sets[key][self._encode(member)] = score
        return len(mapping)

    async def zrange(self, key: str, start: int, end: int) -> List[bytes]:
        self.calls.append("zrange")
        members = sorted(self.sorted_sets[key].items(), key=lambda item: item[1])
        members = [member for member, _ in members]
        return members[start:] if end == -1 else members[start : end + 1]

    async def zrem(self, key: str, *members: Any) -> int:
        return sum(
            1
            for member in members
            if self.sorted_sets[key].pop(self._encode(member), None) is not None
        )

    async def sadd(self, key: str, *members: Any) -> int:
        before = len(self.sets[key])
        self.sets[key].update(self._encode(member) for member in members)
        return len(self.sets[key]) - before

    async def srem(self, key: str, *members: Any) -> int:
        before = len(self.sets[key])
        self.sets[key].difference_update(self._encode(member) for member in members)
        return before - len(self.sets[key])

    async def smembers(self, key: str) -> set:
        self.calls.append("smembers")
        return set(self.sets[key])

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    async def aclose(self):
        self.closed = True


class GatedRedis(FakeRedis):
    """FakeRedis whose next ``get`` returns only after ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.hold_next_get = False
        self.fetched = asyncio.Event()
        self.release = asyncio.Event()

    async def get(self, key: str) -> Optional[bytes]:
        value = await super().get(key)
        if self.hold_next_get:
            self.hold_next_get = False
            self.fetched.set()
            await self.release.wait()
        return value


@pytest.fixture
def test_settings():
    return Settings(
        ENVIRONMENT="testing",
        ACCOUNTS_DATABASE_URL="sqlite://",
        CUSTOMERS_DATABASE_URL="sqlite://",
        RETRY_DELAY_MS=1,
        TRANSACTION_API_KEY="test-key",
        TRANSACTION_API_BASE_URL="https://transactions.test",
    )


@pytest.fixture
def database():
    """Fresh in-memory accounts and customers databases for each test"""
    manager = DatabaseManager(_memory_engine(), _memory_engine())
    manager.init_db()
    yield manager
    manager.dispose()


@pytest.fixture
def cache():
    return MemoryCache(default_ttl_minutes=10)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def retry_policy(recording_sleep):
    return RetryPolicy("test_db", max_attempts=3, base_delay_ms=500, sleep=recording_sleep)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def gated_redis():
    return GatedRedis()


@pytest.fixture
def mock_api():
    return MockTransactionApi()


@pytest.fixture
def transaction_client(mock_api, recording_sleep):
    return TransactionApiClient(
        retry_policy=RetryPolicy.for_http("test_api", base_delay_ms=500, sleep=recording_sleep),
        base_url="https://transactions.test",
        api_key="test-key",
        transport=mock_api.transport(),
    )


@pytest.fixture
def container(test_settings, database, cache, transaction_client):
    return ServiceContainer(
        test_settings,
        database,
        cache,
        InMemoryBankBranchRepository.with_sample_data(),
        transaction_client,
    )


@pytest.fixture
def client(container):
    """Test client wired to in-memory stores; the app lifespan is not run"""
    set_container(container)
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        set_container(None)
        app.dependency_overrides.clear()
