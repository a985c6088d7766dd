"""Cached liveness checks for the upstream AI providers.

Each provider's ``is_available()`` costs a real round-trip to the vendor,
so results are held in an :class:`ICacheProvider` for a short TTL.  The
orchestrator asks the prober before committing a retry budget to a
provider; the API exposes the same data as a health map.

A probe failure is never an exception here: the floor value is ``False``.
"""

from __future__ import annotations

import asyncio
import time

from formai.interfaces.ai_provider import IAIProvider
from formai.interfaces.cache_provider import ICacheProvider
from formai.models.provider import ProviderHealth
from formai.utils.logging import get_logger

_CACHE_PREFIX = "provider_health:"


class AvailabilityProber:
    """Answers "is this provider worth calling right now?" with caching."""

    def __init__(self, providers: list[IAIProvider], cache: ICacheProvider) -> None:
        self._providers = {p.get_provider_name(): p for p in providers}
        self._cache = cache
        self._logger = get_logger(__name__)

    async def is_available(self, provider_name: str) -> bool:
        health = await self.get_health(provider_name)
        return health.available

    async def get_health(self, provider_name: str) -> ProviderHealth:
        """Return the cached probe for *provider_name*, probing on a miss."""
        cached = await self._cache.get(_cache_key(provider_name))
        if isinstance(cached, ProviderHealth):
            return cached
        return await self._probe(provider_name)

    async def refresh(self, provider_name: str) -> ProviderHealth:
        """Drop any cached result and probe *provider_name* again."""
        await self._cache.delete(_cache_key(provider_name))
        return await self._probe(provider_name)

    async def check_all(self, refresh: bool = False) -> dict[str, ProviderHealth]:
        """Probe every known provider concurrently."""
        check = self.refresh if refresh else self.get_health
        names = list(self._providers)
        results = await asyncio.gather(*(check(name) for name in names))
        return dict(zip(names, results))

    async def _probe(self, provider_name: str) -> ProviderHealth:
        provider = self._providers.get(provider_name)
        if provider is None:
            self._logger.warning("probe_unknown_provider", provider=provider_name)
            return ProviderHealth(provider_name=provider_name, available=False)

        start = time.perf_counter()
        try:
            available = bool(await provider.is_available())
        except Exception as exc:  # noqa: BLE001 - a probe never raises to the caller
            self._logger.warning("provider_probe_error", provider=provider_name, error=str(exc))
            available = False
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        health = ProviderHealth(
            provider_name=provider_name,
            available=available,
            response_time_ms=elapsed_ms,
        )
        await self._cache.set(_cache_key(provider_name), health)
        self._logger.info(
            "provider_probed",
            provider=provider_name,
            available=available,
            response_time_ms=elapsed_ms,
        )
        return health


def _cache_key(provider_name: str) -> str:
    return f"{_CACHE_PREFIX}{provider_name}"
