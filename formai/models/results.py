"""Canonical OCR and document-analysis result models.

Every adapter, whatever upstream JSON it receives, ends up producing one of
these two shapes (see :mod:`formai.utils.response_normalizer`):

    1. An image data URI is read by an OCR provider  -> OCRResult
    2. The extracted text is analysed by an LLM      -> AnalysisResult

The models enforce the invariants themselves so that a result can never be
constructed in an invalid state, even by a third-party adapter that skips
the normalizer.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OCRResult(BaseModel):
    """Text read from one document image."""

    model_config = ConfigDict(frozen=True)

    # Never empty or whitespace-only: "no text" is a NoTextFoundError instead.
    text: str = Field(min_length=1)
    confidence: float = Field(ge=0.0, le=1.0)
    # Wall-clock duration of the upstream call in milliseconds.
    processing_time_ms: int = Field(default=0, ge=0)

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("OCR text must not be blank")
        return value


class AnalysisResult(BaseModel):
    """Structured data extracted from document text."""

    model_config = ConfigDict(frozen=True)

    document_type: str = "other"
    # Values above 1.0 are truncated to 1.0; negative values are rejected.
    confidence: float = Field(ge=0.0, le=1.0)
    suggested_form: str = "personal_information"
    extracted_data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("confidence", mode="before")
    @classmethod
    def _truncate_confidence(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 1.0:
            return 1.0
        return value

    @field_validator("extracted_data", mode="before")
    @classmethod
    def _extracted_data_never_null(cls, value: Any) -> Any:
        return {} if value is None else value
