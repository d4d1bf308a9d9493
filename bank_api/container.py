"""
Application object graph.

Builds the shared cache, retry policies, storage clients, repositories and
services from settings, and owns their shutdown.
"""

from typing import Dict, Optional

import redis.asyncio as redis
import structlog

from .cache.memory_cache import MemoryCache
from .config import Settings
from .database import DatabaseManager
from .infrastructure.mock_transaction_api import MockTransactionApi
from .infrastructure.retry_policy import RetryPolicy
from .infrastructure.transaction_api_client import TransactionApiClient
from .repositories import (
    ApiTransactionRepository,
    IBankBranchRepository,
    InMemoryBankBranchRepository,
    RedisBankBranchRepository,
    SqlBankAccountRepository,
    SqlCustomerAccountRepository,
    SqlCustomerRepository,
)
from .services import (
    BankAccountService,
    BankBranchService,
    CustomerAccountService,
    CustomerService,
    TransactionService,
)

logger = structlog.get_logger(__name__)


def create_retry_policy(name: str, settings: Settings, http: bool = False) -> RetryPolicy:
    """Build a retry policy from the configured attempts, delay and timeout."""
    if http:
        return RetryPolicy.for_http(
            name,
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            base_delay_ms=settings.RETRY_DELAY_MS,
            timeout_seconds=settings.RETRY_TIMEOUT_SECONDS,
        )
    return RetryPolicy(
        name, max_attempts=settings.RETRY_MAX_ATTEMPTS, base_delay_ms=settings.RETRY_DELAY_MS
    )


def create_transaction_client(settings: Settings) -> TransactionApiClient:
    transport = None
    if settings.TRANSACTION_API_USE_MOCK:
        logger.info("Using in-process mock transaction API")
        transport = MockTransactionApi().transport()
    return TransactionApiClient(
        retry_policy=create_retry_policy("transaction_api", settings, http=True),
        base_url=settings.TRANSACTION_API_BASE_URL,
        api_key=settings.TRANSACTION_API_KEY,
        timeout_seconds=settings.RETRY_TIMEOUT_SECONDS,
        transport=transport,
    )


async def create_branch_repository(
    settings: Settings, cache: MemoryCache
) -> IBankBranchRepository:
    """
    Connect to the branch document store.

    Falls back to an in-memory store with sample branches when Redis is
    unreachable and the fallback is enabled.
    """
    redis_client = redis.from_url(settings.REDIS_URL, decode_responses=False)
    try:
        await redis_client.ping()
        logger.info("Redis connected successfully", url=settings.REDIS_URL)
    except (redis.RedisError, OSError) as e:
        await redis_client.aclose()
        if not settings.BRANCH_STORE_FALLBACK_ENABLED:
            logger.error("Redis not available", error=str(e))
            raise
        logger.warning("Redis not available, using in-memory branch store", error=str(e))
        return InMemoryBankBranchRepository.with_sample_data()

    return RedisBankBranchRepository(
        redis_client,
        cache,
        create_retry_policy("branch_store", settings),
        cache_ttl_minutes=settings.CACHE_TTL_MINUTES,
    )


class ServiceContainer:
    """
    Holds every long-lived component of the application.

    Attributes:
        cache: Shared repository cache
        database: Relational engines and session factories
        branch_repo: Branch repository (Redis or in-memory fallback)
        transaction_client: Remote transaction API client
    """

    def __init__(
        self,
        settings: Settings,
        database: DatabaseManager,
        cache: MemoryCache,
        branch_repo: IBankBranchRepository,
        transaction_client: TransactionApiClient,
    ):
        self.settings = settings
        self.database = database
        self.cache = cache
        self.branch_repo = branch_repo
        self.transaction_client = transaction_client

        ttl = settings.CACHE_TTL_MINUTES
        self.bank_account_repo = SqlBankAccountRepository(
            database.AccountsSession, cache, create_retry_policy("accounts_db", settings), ttl
        )
        self.customer_repo = SqlCustomerRepository(
            database.CustomersSession, cache, create_retry_policy("customers_db", settings), ttl
        )
        self.customer_account_repo = SqlCustomerAccountRepository(
            database.CustomersSession, cache, create_retry_policy("customers_db", settings), ttl
        )
        self.transaction_repo = ApiTransactionRepository(
            transaction_client, cache, settings.TRANSACTION_CACHE_TTL_MINUTES
        )

        self.customer_service = CustomerService(self.customer_repo)
        self.customer_account_service = CustomerAccountService(
            self.customer_account_repo, self.customer_repo
        )
        self.bank_account_service = BankAccountService(self.bank_account_repo, branch_repo)
        self.bank_branch_service = BankBranchService(branch_repo)
        self.transaction_service = TransactionService(
            self.transaction_repo, self.bank_account_repo
        )

    @classmethod
    async def create(cls, settings: Settings, database: Optional[DatabaseManager] = None):
        """Connect to every backend and build the container."""
        database = database or DatabaseManager.from_settings(settings)
        database.init_db()
        cache = MemoryCache(default_ttl_minutes=settings.CACHE_TTL_MINUTES)
        branch_repo = await create_branch_repository(settings, cache)
        return cls(settings, database, cache, branch_repo, create_transaction_client(settings))

    async def check_health(self) -> Dict[str, str]:
        checks = self.database.check_connection()
        if isinstance(self.branch_repo, RedisBankBranchRepository):
            try:
                await self.branch_repo.redis.ping()
                checks["branch_store"] = "healthy"
            except (redis.RedisError, OSError) as e:
                logger.warning("Branch store health check failed", error=str(e))
                checks["branch_store"] = "unhealthy"
        else:
            checks["branch_store"] = "fallback"
        return checks

    async def close(self) -> None:
        await self.transaction_client.close()
        await self.branch_repo.close()
        self.database.dispose()
        logger.info("Service container closed")
