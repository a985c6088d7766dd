"""Unit tests for MemoryCacheProvider and AvailabilityProber."""

from __future__ import annotations

import pytest

from formai.models.provider import ProviderHealth
from formai.providers.cache.memory_cache import MemoryCacheProvider
from formai.services.availability_prober import AvailabilityProber
from tests.conftest import FakeProvider


class ExplodingProvider(FakeProvider):
    async def is_available(self) -> bool:
        self.probe_calls += 1
        raise RuntimeError("probe exploded")


# ======================================================================
# MemoryCacheProvider
# ======================================================================


class TestMemoryCacheProvider:
    @pytest.mark.asyncio
    async def test_set_get_delete(self) -> None:
        cache = MemoryCacheProvider()
        await cache.set("k", "v")
        assert await cache.get("k") == "v"

        await cache.delete("k")
        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self) -> None:
        await MemoryCacheProvider().delete("missing")

    @pytest.mark.asyncio
    async def test_entries_expire(self, fake_clock) -> None:
        cache = MemoryCacheProvider(ttl=10, timer=fake_clock)
        await cache.set("k", "v")

        fake_clock.advance(9)
        assert await cache.get("k") == "v"

        fake_clock.advance(2)
        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_max_size_evicts(self) -> None:
        cache = MemoryCacheProvider(max_size=2)
        for key in ("a", "b", "c"):
            await cache.set(key, key)
        assert await cache.get("a") is None
        assert await cache.get("c") == "c"

    def test_ttl_property(self) -> None:
        assert MemoryCacheProvider(ttl=42).ttl == 42


# ======================================================================
# AvailabilityProber
# ======================================================================


class TestAvailabilityProber:
    @pytest.mark.asyncio
    async def test_probe_is_cached(self) -> None:
        provider = FakeProvider("a")
        prober = AvailabilityProber([provider], MemoryCacheProvider(ttl=60))

        assert await prober.is_available("a") is True
        assert await prober.is_available("a") is True
        assert provider.probe_calls == 1

    @pytest.mark.asyncio
    async def test_probe_repeats_after_ttl(self, fake_clock) -> None:
        provider = FakeProvider("a")
        prober = AvailabilityProber([provider], MemoryCacheProvider(ttl=60, timer=fake_clock))

        await prober.is_available("a")
        fake_clock.advance(61)
        await prober.is_available("a")

        assert provider.probe_calls == 2

    @pytest.mark.asyncio
    async def test_down_result_is_cached_too(self) -> None:
        provider = FakeProvider("a", available=False)
        prober = AvailabilityProber([provider], MemoryCacheProvider())

        assert await prober.is_available("a") is False
        assert await prober.is_available("a") is False
        assert provider.probe_calls == 1

    @pytest.mark.asyncio
    async def test_exception_floors_to_false(self) -> None:
        provider = ExplodingProvider("boom")
        prober = AvailabilityProber([provider], MemoryCacheProvider())

        assert await prober.is_available("boom") is False

    @pytest.mark.asyncio
    async def test_unknown_provider_is_unavailable(self) -> None:
        prober = AvailabilityProber([], MemoryCacheProvider())
        assert await prober.is_available("ghost") is False

    @pytest.mark.asyncio
    async def test_health_detail(self) -> None:
        prober = AvailabilityProber([FakeProvider("a")], MemoryCacheProvider())

        health = await prober.get_health("a")

        assert isinstance(health, ProviderHealth)
        assert health.provider_name == "a"
        assert health.available is True
        assert health.response_time_ms >= 0
        assert health.checked_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_refresh_bypasses_cache(self) -> None:
        provider = FakeProvider("a")
        prober = AvailabilityProber([provider], MemoryCacheProvider())

        await prober.is_available("a")
        await prober.refresh("a")

        assert provider.probe_calls == 2

    @pytest.mark.asyncio
    async def test_check_all(self) -> None:
        providers = [FakeProvider("a"), FakeProvider("b", available=False)]
        prober = AvailabilityProber(providers, MemoryCacheProvider())

        result = await prober.check_all()

        assert {name: h.available for name, h in result.items()} == {"a": True, "b": False}
        assert list(result) == ["a", "b"]
