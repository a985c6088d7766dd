"""Utility modules for formai.

- **confidence** -- coercion and clamping of upstream confidence values.
- **data_uri** -- validation of ``data:<mime>;base64,<payload>`` image input.
- **errors** -- exception taxonomy rooted at FormAIError; each kind maps to
  one retry/fallback behaviour in the orchestrator.
- **json_extraction** -- ordered strategies for pulling a JSON object out of
  free-form model output.
- **logging** -- structlog setup (console in development, JSON in production).
- **prompts** -- OCR and analysis prompt templates.
- **response_normalizer** -- canonical OCRResult / AnalysisResult builders.
- **text** -- fence stripping, "no text" sentinel detection, truncation.
"""

from formai.utils.confidence import NEUTRAL_CONFIDENCE, clamp_confidence, coerce_confidence
from formai.utils.errors import (
    AllProvidersFailedError,
    ConfigurationError,
    FormAIError,
    InvalidCredentialError,
    InvalidInputError,
    InvalidUpstreamResponseError,
    NoTextFoundError,
    PayloadTooLargeError,
    ProviderError,
    RateLimitError,
    UpstreamRequestError,
    UpstreamServerError,
    error_for_status,
)
from formai.utils.logging import configure_logging, get_logger

__all__ = [
    "AllProvidersFailedError",
    "ConfigurationError",
    "FormAIError",
    "InvalidCredentialError",
    "InvalidInputError",
    "InvalidUpstreamResponseError",
    "NEUTRAL_CONFIDENCE",
    "NoTextFoundError",
    "PayloadTooLargeError",
    "ProviderError",
    "RateLimitError",
    "UpstreamRequestError",
    "UpstreamServerError",
    "clamp_confidence",
    "coerce_confidence",
    "configure_logging",
    "error_for_status",
    "get_logger",
]
