"""Abstract base class for cache providers.

The availability prober keeps recent :class:`ProviderHealth` results here so
that liveness round-trips are paid at most once per TTL window.  The
in-memory implementation is enough for a single process; a shared backend
(e.g. Redis) can be dropped in behind the same contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async so network-backed stores do not block the
    event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* for the cache's configured TTL."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*; a no-op if it is absent."""
