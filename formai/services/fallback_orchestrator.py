"""Fallback orchestration across the configured AI providers.

For each logical request (OCR or analysis) the orchestrator builds an
ordered candidate list and walks it:

    candidates = [primary] + other capable providers in preference order
                 + [last resort]
    for provider in candidates:
        skip if no credential, or if the cached probe says it is down
        for attempt in 1..max_attempts:
            success            -> normalize and return
            PERMANENT failure  -> next provider
            TRANSIENT failure  -> back off and retry, or next provider
                                  once the budget is spent
    raise AllProvidersFailedError(every recorded attempt)

Retry state is an explicit attempt counter local to one call, so any
number of requests can run concurrently on one orchestrator instance.
The only shared state is the prober's health cache and the request
counters.

Failure classification lives in :func:`classify_failure`, a pure function
of the exception.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, cast

import httpx

from formai.interfaces.ai_provider import IAIProvider, IAnalysisCapable, IOCRCapable
from formai.models.provider import Capability, FailureClass, ProviderAttempt
from formai.models.results import AnalysisResult, OCRResult
from formai.providers.cache.memory_cache import MemoryCacheProvider
from formai.services.availability_prober import AvailabilityProber
from formai.services.request_metrics import RequestMetrics
from formai.utils.data_uri import parse_data_uri
from formai.utils.errors import (
    AllProvidersFailedError,
    InvalidCredentialError,
    InvalidInputError,
    ProviderError,
    RateLimitError,
    UpstreamServerError,
)
from formai.utils.logging import get_logger
from formai.utils.response_normalizer import renormalize

_ResultT = TypeVar("_ResultT", OCRResult, AnalysisResult)

DEFAULT_MAX_ATTEMPTS = 2
DEFAULT_RETRY_BACKOFF_SECONDS = 0.5
DEFAULT_TIMEOUT_SECONDS = 30.0

_TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    RateLimitError,
    UpstreamServerError,
    httpx.TransportError,
    asyncio.TimeoutError,
    TimeoutError,
    ConnectionError,
)


def classify_failure(error: BaseException) -> FailureClass:
    """Decide whether retrying the same provider with the same input could help.

    Rate limiting, upstream 5xx and network-level faults are TRANSIENT.
    Everything else, including errors this module does not recognise, is
    PERMANENT.
    """
    if isinstance(error, _TRANSIENT_ERRORS):
        return FailureClass.TRANSIENT
    if isinstance(error, ProviderError) and error.status_code is not None:
        if error.status_code == 429 or error.status_code >= 500:
            return FailureClass.TRANSIENT
    return FailureClass.PERMANENT


class FallbackOrchestrator:
    """Routes OCR and analysis requests through the provider fallback chain.

    Parameters
    ----------
    providers:
        Every registered provider.  Names must be unique.
    preference:
        Declared provider order used after the primary has failed.
        Providers missing from it are tried after the listed ones, in
        registration order.
    ocr_primary / analysis_primary:
        Provider tried first for each capability.
    last_resort:
        Provider always tried last, and never skipped on a failed probe.
    prober:
        Health cache consulted before calling a provider.  A fresh one over
        a :class:`MemoryCacheProvider` is built when omitted.
    max_attempts:
        Calls per provider before falling through (2 = one retry).
    retry_backoff_seconds:
        Delay before the first retry; doubled for each further retry.
    timeout_seconds:
        Upper bound on one provider call.
    sleep:
        Awaitable used for backoff; tests pass a no-op.
    metrics:
        Request counters; a fresh :class:`RequestMetrics` when omitted.
    """

    def __init__(
        self,
        providers: list[IAIProvider],
        preference: list[str] | None = None,
        ocr_primary: str | None = None,
        analysis_primary: str | None = None,
        last_resort: str | None = None,
        prober: AvailabilityProber | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS,
        timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        metrics: RequestMetrics | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._providers: dict[str, IAIProvider] = {}
        for provider in providers:
            name = provider.get_provider_name()
            if name in self._providers:
                raise ValueError(f"Duplicate provider name: {name}")
            self._providers[name] = provider

        self._preference = list(preference) if preference else list(self._providers)
        self._primaries = {
            Capability.OCR: ocr_primary,
            Capability.ANALYSIS: analysis_primary,
        }
        self._last_resort = last_resort
        self._prober = prober or AvailabilityProber(providers, MemoryCacheProvider())
        self._max_attempts = max_attempts
        self._retry_backoff_seconds = retry_backoff_seconds
        self._timeout_seconds = timeout_seconds
        self._sleep = sleep
        self._metrics = metrics or RequestMetrics()
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract_text_from_image(self, image_data: str) -> OCRResult:
        """Read the text in *image_data* (a ``data:<mime>;base64,...`` URI).

        Raises
        ------
        InvalidInputError
            If *image_data* is not a well-formed data URI.  No provider is
            called.
        AllProvidersFailedError
            If every OCR-capable provider failed.
        """
        parse_data_uri(image_data)

        async def call(provider: IAIProvider) -> OCRResult:
            return await cast(IOCRCapable, provider).extract_text(image_data)

        return await self._run(Capability.OCR, call)

    async def analyze_document(self, text: str) -> AnalysisResult:
        """Classify *text* and extract its fields.

        Raises
        ------
        InvalidInputError
            If *text* is empty or whitespace-only.  No provider is called.
        AllProvidersFailedError
            If every analysis-capable provider failed.
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Document text must not be empty")

        async def call(provider: IAIProvider) -> AnalysisResult:
            return await cast(IAnalysisCapable, provider).analyze_document(text)

        return await self._run(Capability.ANALYSIS, call)

    async def get_provider_health(self, refresh: bool = False) -> dict[str, dict[str, Any]]:
        """Return ``{provider_name: {"available": bool, ...}}`` for every provider."""
        health = await self._prober.check_all(refresh=refresh)
        return {
            name: {
                "available": item.available,
                "response_time_ms": item.response_time_ms,
                "checked_at": item.checked_at.isoformat(),
            }
            for name, item in health.items()
        }

    def get_available_providers(self) -> list[dict[str, Any]]:
        """List providers with a configured credential, live or not."""
        return [
            {
                "name": name,
                "capabilities": sorted(c.value for c in provider.descriptor.capabilities),
            }
            for name, provider in self._providers.items()
            if provider.is_configured()
        ]

    def get_metrics(self) -> dict[str, Any]:
        """Return request counters since this orchestrator was built."""
        return self._metrics.snapshot()

    def candidates_for(self, capability: Capability) -> list[IAIProvider]:
        """Return the ordered fallback chain for *capability*."""
        order: list[str] = []
        primary = self._primaries.get(capability)
        if primary:
            order.append(primary)
        order.extend(self._preference)
        order.extend(self._providers)

        chain: list[IAIProvider] = []
        seen: set[str] = set()
        for name in order:
            if name in seen or name == self._last_resort:
                continue
            seen.add(name)
            provider = self._providers.get(name)
            if provider is not None and provider.supports(capability):
                chain.append(provider)

        last = self._providers.get(self._last_resort) if self._last_resort else None
        if last is not None and last.supports(capability):
            chain.append(last)
        return chain

    # ------------------------------------------------------------------
    # Fallback loop
    # ------------------------------------------------------------------

    async def _run(
        self,
        capability: Capability,
        call: Callable[[IAIProvider], Awaitable[_ResultT]],
    ) -> _ResultT:
        started = time.perf_counter()
        attempts: list[ProviderAttempt] = []
        chain = self.candidates_for(capability)

        for provider in chain:
            name = provider.get_provider_name()

            if not provider.is_configured():
                attempts.append(
                    _skip_record(name, InvalidCredentialError(provider_name=name))
                )
                self._logger.info("provider_skipped", provider=name, reason="not_configured")
                continue

            if name != self._last_resort and not await self._prober.is_available(name):
                attempts.append(
                    ProviderAttempt(
                        provider_name=name,
                        attempt=0,
                        error_kind="Unavailable",
                        message="Provider failed its availability probe",
                        classification=FailureClass.TRANSIENT,
                    )
                )
                self._logger.info("provider_skipped", provider=name, reason="unavailable")
                continue

            for attempt in range(1, self._max_attempts + 1):
                self._logger.info(
                    "provider_attempt",
                    provider=name,
                    capability=capability.value,
                    attempt=attempt,
                )
                try:
                    result = await self._call_with_timeout(provider, call)
                    result = renormalize(result)
                except InvalidInputError:
                    self._metrics.record_failure(_elapsed_ms(started))
                    raise
                except Exception as exc:  # noqa: BLE001 - every provider fault is recorded
                    classification = classify_failure(exc)
                    attempts.append(_attempt_record(name, attempt, exc, classification))
                    self._logger.warning(
                        "provider_call_failed",
                        provider=name,
                        attempt=attempt,
                        classification=classification.value,
                        error=str(exc),
                    )
                    if classification is FailureClass.PERMANENT or attempt >= self._max_attempts:
                        break
                    delay = self._retry_backoff_seconds * 2 ** (attempt - 1)
                    self._logger.info("provider_retry_scheduled", provider=name, delay=delay)
                    await self._sleep(delay)
                    continue

                self._logger.info(
                    "provider_succeeded",
                    provider=name,
                    capability=capability.value,
                    attempt=attempt,
                )
                self._metrics.record_success(name, _elapsed_ms(started))
                return result

        self._logger.error(
            "all_providers_failed",
            capability=capability.value,
            attempts=len(attempts),
            providers=[a.provider_name for a in attempts],
        )
        self._metrics.record_failure(_elapsed_ms(started))
        raise AllProvidersFailedError(attempts)

    async def _call_with_timeout(
        self,
        provider: IAIProvider,
        call: Callable[[IAIProvider], Awaitable[_ResultT]],
    ) -> _ResultT:
        if self._timeout_seconds is None:
            return await call(provider)
        try:
            return await asyncio.wait_for(call(provider), timeout=self._timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise UpstreamServerError(
                f"Provider call timed out after {self._timeout_seconds}s",
                provider_name=provider.get_provider_name(),
            ) from exc


def _attempt_record(
    name: str,
    attempt: int,
    error: BaseException,
    classification: FailureClass,
) -> ProviderAttempt:
    if isinstance(error, ProviderError):
        return ProviderAttempt(
            provider_name=name,
            attempt=attempt,
            error_kind=error.kind,
            message=error.message,
            classification=classification,
            status_code=error.status_code,
        )
    return ProviderAttempt(
        provider_name=name,
        attempt=attempt,
        error_kind=type(error).__name__,
        message=str(error) or type(error).__name__,
        classification=classification,
    )


def _skip_record(name: str, error: ProviderError) -> ProviderAttempt:
    return _attempt_record(name, 0, error, classify_failure(error))


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
