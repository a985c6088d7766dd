"""Response normalization and validation for provider outputs.

Each upstream speaks a slightly different dialect: one omits
``suggested_form``, another returns ``"confidence": "0.9"``, a third nests
``null`` values inside ``extracted_data``.  The functions here fold all of
that into the canonical :class:`OCRResult` / :class:`AnalysisResult` shapes
so callers never see which provider answered.

    normalize_ocr         raw OCR text      -> OCRResult (or NoTextFoundError)
    normalize_analysis    parsed JSON dict  -> AnalysisResult
    renormalize           canonical result  -> same result, re-validated

All functions are pure.  Markdown clean-up happens once, in
:func:`normalize_ocr`; :func:`renormalize` only re-checks the result
invariants, so it is safe to apply to its own output.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from formai.models.results import AnalysisResult, OCRResult
from formai.utils.confidence import NEUTRAL_CONFIDENCE, coerce_confidence
from formai.utils.errors import InvalidUpstreamResponseError, NoTextFoundError
from formai.utils.text import clean_ocr_text, is_no_text_sentinel

DEFAULT_DOCUMENT_TYPE = "other"
DEFAULT_SUGGESTED_FORM = "personal_information"

# Form templates the downstream form generator knows how to render.
KNOWN_FORMS = frozenset({
    "personal_information",
    "visa_application",
    "financial_declaration",
    "employment_application",
})

_ResultT = TypeVar("_ResultT", OCRResult, AnalysisResult)


# ---------------------------------------------------------------------------
# Field-level helpers
# ---------------------------------------------------------------------------

def normalize_document_type(value: Any) -> str:
    """Return a trimmed, lower-case document type, or ``"other"``."""
    if isinstance(value, str) and value.strip():
        return value.strip().lower()
    return DEFAULT_DOCUMENT_TYPE


def normalize_suggested_form(value: Any) -> str:
    """Return *value* if it names a known form, else ``"personal_information"``."""
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in KNOWN_FORMS:
            return candidate
    return DEFAULT_SUGGESTED_FORM


def _normalize_value(value: Any) -> Any:
    """Normalize one ``extracted_data`` value; ``None`` means "drop it"."""
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, Mapping):
        nested = prune_extracted_data(value)
        return nested or None
    if isinstance(value, (list, tuple)):
        items = [item for item in (_normalize_value(v) for v in value) if item is not None]
        return items or None
    text = str(value).strip()
    return text or None


def prune_extracted_data(data: Any) -> dict[str, Any]:
    """Drop null/empty entries and trim string leaves, recursively.

    Scalars are stringified, nested mappings and lists are pruned the same
    way and removed when they end up empty.  Anything that is not a mapping
    yields ``{}`` so the result is never ``None``.
    """
    if not isinstance(data, Mapping):
        return {}

    cleaned: dict[str, Any] = {}
    for key, value in data.items():
        if key is None:
            continue
        name = str(key).strip()
        if not name:
            continue
        normalized = _normalize_value(value)
        if normalized is not None:
            cleaned[name] = normalized
    return cleaned


def _first_present(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


# ---------------------------------------------------------------------------
# Result builders
# ---------------------------------------------------------------------------

def normalize_ocr(
    raw_text: str | None,
    confidence: Any,
    processing_time_ms: int | float = 0,
    provider_name: str | None = None,
) -> OCRResult:
    """Build an :class:`OCRResult` from raw model output.

    Raises
    ------
    NoTextFoundError
        If the text is empty after fence-stripping and trimming, or is a
        "no text" sentinel phrase.
    """
    text = clean_ocr_text(raw_text or "")
    if not text or is_no_text_sentinel(text):
        raise NoTextFoundError(provider_name=provider_name)

    return OCRResult(
        text=text,
        confidence=coerce_confidence(confidence),
        processing_time_ms=max(0, int(processing_time_ms)),
    )


def normalize_analysis(
    payload: Any,
    provider_name: str | None = None,
) -> AnalysisResult:
    """Build an :class:`AnalysisResult` from a parsed upstream JSON object.

    Accepts both snake_case and camelCase keys.  Missing confidence becomes
    the neutral mid-range value; out-of-range confidence is clamped.

    Raises
    ------
    InvalidUpstreamResponseError
        If *payload* is not a JSON object.
    """
    if not isinstance(payload, Mapping):
        raise InvalidUpstreamResponseError(
            f"Expected a JSON object, got {type(payload).__name__}",
            provider_name=provider_name,
        )

    return AnalysisResult(
        document_type=normalize_document_type(
            _first_present(payload, "document_type", "documentType")
        ),
        confidence=coerce_confidence(payload.get("confidence"), NEUTRAL_CONFIDENCE),
        suggested_form=normalize_suggested_form(
            _first_present(payload, "suggested_form", "suggestedForm")
        ),
        extracted_data=prune_extracted_data(
            _first_present(payload, "extracted_data", "extractedData")
        ),
    )


def renormalize(result: _ResultT) -> _ResultT:
    """Re-check the invariants of an already canonical result.

    The orchestrator runs every success through here so that results from
    any :class:`~formai.interfaces.ai_provider.IAIProvider` implementation,
    including ones that skip this module, come out in the same shape.
    OCR text is not fence- or lead-in-stripped again: a second
    ``**Label:**`` line at the top is document content.
    """
    if isinstance(result, OCRResult):
        text = result.text.strip()
        if not text or is_no_text_sentinel(text):
            raise NoTextFoundError()
        return OCRResult(
            text=text,
            confidence=coerce_confidence(result.confidence),
            processing_time_ms=max(0, result.processing_time_ms),
        )
    return normalize_analysis(result.model_dump())
