"""Custom exception hierarchy for formai.

All application exceptions inherit from :class:`FormAIError`, which
carries an optional ``provider_name`` so error handlers can identify which
upstream AI service (e.g. "mistral-ocr", "claude-analysis") caused the
failure, plus a stable ``kind`` tag used in logs and HTTP error bodies.

The hierarchy mirrors how the fallback orchestrator treats each failure:

    FormAIError  (base -- catch-all for any formai error)
    +-- InvalidInputError             (caller precondition; never retried)
    +-- ConfigurationError            (startup / missing config)
    +-- ProviderError                 (any per-provider call failure)
    |   +-- InvalidCredentialError    (401/403 or no key configured)
    |   +-- RateLimitError            (429)
    |   +-- UpstreamServerError       (5xx, timeout, connection failure)
    |   +-- PayloadTooLargeError      (413)
    |   +-- UpstreamRequestError      (any other 4xx)
    |   +-- NoTextFoundError          (OCR ran but found nothing readable)
    |   +-- InvalidUpstreamResponseError (body not parseable into our shape)
    +-- AllProvidersFailedError       (aggregate of every attempt)

Whether a :class:`ProviderError` is retried in place or falls through to
the next provider is decided by
:func:`formai.services.fallback_orchestrator.classify_failure`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from formai.models.provider import ProviderAttempt


class FormAIError(Exception):
    """Base exception for all formai errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which upstream service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[openai-fallback] Rate limit exceeded``.
    """

    kind = "FormAIError"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Caller / startup errors
# ---------------------------------------------------------------------------

class InvalidInputError(FormAIError):
    """Raised when caller-supplied data fails a precondition.

    Malformed image data URIs and empty analysis text end up here.  The
    orchestrator propagates it straight to the caller: no retry, no fallback.
    """

    kind = "InvalidInput"

    def __init__(
        self,
        message: str = "Invalid input",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(FormAIError):
    """Raised when configuration is invalid or missing at startup."""

    kind = "ConfigurationError"

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Per-provider errors
# ---------------------------------------------------------------------------

class ProviderError(FormAIError):
    """Base class for failures of a single upstream provider call.

    ``status_code`` holds the upstream HTTP status when the failure came
    from an HTTP response, ``None`` for network faults and parse errors.
    """

    kind = "ProviderError"

    def __init__(
        self,
        message: str = "AI provider call failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._status_code = status_code

    @property
    def status_code(self) -> int | None:
        return self._status_code


class InvalidCredentialError(ProviderError):
    """Raised on 401/403 responses or when no API key is configured."""

    kind = "InvalidCredential"

    def __init__(
        self,
        message: str = "Invalid or missing API credential",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class RateLimitError(ProviderError):
    """Raised when an upstream API rate limit is exceeded (HTTP 429)."""

    kind = "RateLimited"

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
        status_code: int | None = 429,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class UpstreamServerError(ProviderError):
    """Raised on upstream 5xx responses and network-level faults."""

    kind = "UpstreamServerError"

    def __init__(
        self,
        message: str = "Upstream service error",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class PayloadTooLargeError(ProviderError):
    """Raised when the upstream rejects the request body as too large (HTTP 413)."""

    kind = "PayloadTooLarge"

    def __init__(
        self,
        message: str = "Document too large for provider",
        provider_name: str | None = None,
        status_code: int | None = 413,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class UpstreamRequestError(ProviderError):
    """Raised for any other 4xx response (a client-side mistake)."""

    kind = "UpstreamRequestError"

    def __init__(
        self,
        message: str = "Upstream rejected the request",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class NoTextFoundError(ProviderError):
    """Raised when OCR completed but the image held no readable text."""

    kind = "NoTextFound"

    def __init__(
        self,
        message: str = "No readable text found in the document",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class InvalidUpstreamResponseError(ProviderError):
    """Raised when a response body cannot be parsed into the expected shape."""

    kind = "InvalidUpstreamResponse"

    def __init__(
        self,
        message: str = "Invalid response from provider",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

class AllProvidersFailedError(FormAIError):
    """Raised when every capability-matching provider has been exhausted.

    The message is stable ("All AI providers failed") so it can be shown to
    end users; ``attempts`` keeps the full per-provider history for logs.
    """

    kind = "AllProvidersFailed"

    def __init__(
        self,
        attempts: list[ProviderAttempt] | None = None,
        message: str = "All AI providers failed",
    ) -> None:
        super().__init__(message=message)
        self._attempts = list(attempts or [])

    @property
    def attempts(self) -> list[ProviderAttempt]:
        return list(self._attempts)

    def to_detail(self) -> list[dict[str, Any]]:
        """Return the attempt history as JSON-serialisable dicts."""
        return [attempt.model_dump(mode="json") for attempt in self._attempts]


def error_for_status(
    status_code: int,
    message: str,
    provider_name: str | None = None,
) -> ProviderError:
    """Map an upstream HTTP status code to the matching :class:`ProviderError`."""
    if status_code in (401, 403):
        return InvalidCredentialError(message, provider_name, status_code)
    if status_code == 413:
        return PayloadTooLargeError(message, provider_name, status_code)
    if status_code == 429:
        return RateLimitError(message, provider_name, status_code)
    if status_code >= 500:
        return UpstreamServerError(message, provider_name, status_code)
    return UpstreamRequestError(message, provider_name, status_code)
