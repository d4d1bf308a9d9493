"""In-process caching for repository reads."""

from .memory_cache import MemoryCache

__all__ = ["MemoryCache"]
