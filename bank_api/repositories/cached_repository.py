"""
Cache-aside and retry plumbing shared by the repository implementations.
"""

from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.orm import Session

from ..cache.memory_cache import MemoryCache
from ..infrastructure.retry_policy import RetryPolicy

T = TypeVar("T")


class CachedRepositoryMixin:
    """
    Wraps storage calls in a retry policy and read paths in the cache.

    Subclasses set ``cache_namespace`` and provide ``cache``, ``retry_policy``
    and ``cache_ttl_minutes`` attributes.
    """

    cache_namespace: str = ""
    cache: MemoryCache
    retry_policy: RetryPolicy
    cache_ttl_minutes: float

    def _key(self, *parts: object) -> str:
        return ":".join([self.cache_namespace, *(str(part) for part in parts)])

    async def _cached_read(
        self,
        key: str,
        loader: Callable[[], Awaitable[Optional[T]]],
        operation_name: str,
    ) -> Optional[T]:
        """
        Return the cached value for ``key`` or load it through the retry policy.

        Only non-None results are cached, and only if no write invalidated the
        namespace while the loader was running.
        """
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        generation = self.cache.generation(key)
        result = await self.retry_policy.execute(loader, operation_name)
        self.cache.set(key, result, self.cache_ttl_minutes, generation=generation)
        return result

    def _invalidate_all(self) -> None:
        """Drop list and item entries of this repository together."""
        self.cache.invalidate_prefix(f"{self.cache_namespace}:")

    @staticmethod
    def _commit(session: Session) -> None:
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise
