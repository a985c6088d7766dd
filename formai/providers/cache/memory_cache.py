"""In-memory cache provider using cachetools.TTLCache.

Holds short-lived provider health results for a single process.  Entries
expire ``ttl`` seconds after they were written.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import structlog
from cachetools import TTLCache

from formai.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Time-to-live in seconds applied to every entry.
    timer:
        Clock used for expiry; tests pass a fake clock to step time forward.
    """

    def __init__(
        self,
        max_size: int = 256,
        ttl: float = 120,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)

    @property
    def ttl(self) -> float:
        return self._ttl

    async def get(self, key: str) -> Any | None:
        value = self._cache.get(key)
        logger.debug("cache_hit" if value is not None else "cache_miss", key=key)
        return value

    async def set(self, key: str, value: Any) -> None:
        self._cache[key] = value
        logger.debug("cache_set", key=key, ttl=self._ttl)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)
