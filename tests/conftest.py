"""Shared pytest fixtures for the formai test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest
from pydantic import SecretStr

from formai.interfaces.ai_provider import IAnalysisCapable, IOCRCapable
from formai.models.provider import Capability, ProviderDescriptor
from formai.models.results import AnalysisResult, OCRResult
from formai.providers.cache.memory_cache import MemoryCacheProvider
from formai.services.availability_prober import AvailabilityProber
from formai.services.fallback_orchestrator import FallbackOrchestrator

# 1x1 transparent PNG
PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
PNG_DATA_URI = f"data:image/png;base64,{PNG_BASE64}"

BOTH = (Capability.OCR, Capability.ANALYSIS)


# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------


class FakeProvider(IOCRCapable, IAnalysisCapable):
    """Scriptable in-memory provider.

    ``outcomes`` is consumed one entry per call; the last entry repeats.
    An entry that is an exception is raised, anything else is returned.
    ``handler`` (if given) computes the result from the call input instead.
    """

    def __init__(
        self,
        name: str,
        outcomes: list[Any] | None = None,
        capabilities: tuple[Capability, ...] = BOTH,
        api_key: str = "test-key",
        available: bool = True,
        delay: float = 0.0,
        handler: Callable[[str], Any] | None = None,
    ) -> None:
        self._descriptor = ProviderDescriptor(
            name=name,
            capabilities=frozenset(capabilities),
            credential=SecretStr(api_key),
        )
        self._outcomes = list(outcomes or [])
        self._available = available
        self._delay = delay
        self._handler = handler
        self.calls: list[str] = []
        self.probe_calls = 0

    @property
    def descriptor(self) -> ProviderDescriptor:
        return self._descriptor

    def is_configured(self) -> bool:
        return self._descriptor.has_credential

    async def is_available(self) -> bool:
        self.probe_calls += 1
        return self._available

    async def extract_text(self, image_data: str) -> OCRResult:
        return await self._next(image_data)

    async def analyze_document(self, text: str) -> AnalysisResult:
        return await self._next(text)

    async def _next(self, payload: str) -> Any:
        self.calls.append(payload)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._handler is not None:
            return self._handler(payload)
        if not self._outcomes:
            raise AssertionError(f"{self._descriptor.name} has no scripted outcome")
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def ocr_result(text: str = "Hello", confidence: float = 0.9) -> OCRResult:
    return OCRResult(text=text, confidence=confidence, processing_time_ms=12)


def analysis_result(**overrides: Any) -> AnalysisResult:
    data: dict[str, Any] = {
        "document_type": "passport",
        "confidence": 0.8,
        "suggested_form": "visa_application",
        "extracted_data": {"full_name": "Jane Doe"},
    }
    data.update(overrides)
    return AnalysisResult(**data)


def build_orchestrator(
    providers: list[FakeProvider],
    **kwargs: Any,
) -> FallbackOrchestrator:
    """Orchestrator over *providers* in list order; the last one is the last resort."""
    names = [p.get_provider_name() for p in providers]
    options: dict[str, Any] = {
        "preference": names,
        "ocr_primary": names[0],
        "analysis_primary": names[0],
        "last_resort": names[-1],
        "prober": AvailabilityProber(providers, MemoryCacheProvider(ttl=60)),
        "sleep": AsyncMock(),
        "timeout_seconds": 5.0,
    }
    options.update(kwargs)
    return FallbackOrchestrator(providers, **options)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def png_data_uri() -> str:
    return PNG_DATA_URI


@pytest.fixture
def fake_clock() -> Callable[[], float]:
    """Manually advanced clock for TTL tests; call ``fake_clock.advance(s)``."""

    class _Clock:
        def __init__(self) -> None:
            self.now = 1000.0

        def __call__(self) -> float:
            return self.now

        def advance(self, seconds: float) -> None:
            self.now += seconds

    return _Clock()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove formai-related environment variables for Settings tests."""
    for var in (
        "MISTRAL_API_KEY",
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
        "MAX_ATTEMPTS_PER_PROVIDER",
        "RETRY_BACKOFF_SECONDS",
        "PROVIDER_TIMEOUT_SECONDS",
        "HEALTH_CACHE_TTL_SECONDS",
        "APP_HOST",
        "APP_PORT",
        "APP_ENV",
        "LOG_LEVEL",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(var, raising=False)
