"""Pydantic request/response schemas for the formai HTTP API.

Request schemas end with "Request", response schemas with "Response".
FastAPI validates incoming JSON against them (422 on mismatch) and
serialises outgoing results through ``response_model``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class OCRRequest(BaseModel):
    """Body of ``POST /api/v1/ocr``."""

    image_data: str = Field(
        ...,
        description="Document image as a data URI: data:<mime>;base64,<payload>",
    )


class OCRResponse(BaseModel):
    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    processing_time_ms: int = Field(ge=0)


class AnalysisRequest(BaseModel):
    """Body of ``POST /api/v1/analysis``."""

    text: str = Field(..., description="Document text, typically OCR output")


class AnalysisResponse(BaseModel):
    document_type: str
    confidence: float = Field(ge=0.0, le=1.0)
    suggested_form: str
    extracted_data: dict[str, Any] = Field(default_factory=dict)


class ProviderStatus(BaseModel):
    available: bool
    response_time_ms: int | None = None
    checked_at: str | None = None


class HealthResponse(BaseModel):
    """Application health check response.

    ``status`` is "healthy" when every provider answered its probe,
    "degraded" when at least one did, "unhealthy" otherwise.
    """

    status: str
    version: str
    providers: dict[str, ProviderStatus]


class ProviderInfo(BaseModel):
    name: str
    capabilities: list[str]


class ProvidersResponse(BaseModel):
    """Providers with a configured credential, independent of liveness."""

    providers: list[ProviderInfo]


class MetricsResponse(BaseModel):
    """Request counters since the service started."""

    uptime_seconds: float
    total_requests: int
    successful_requests: int
    failed_requests: int
    average_response_time_ms: int
    provider_usage: dict[str, int]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    attempts: list[dict[str, Any]] = Field(default_factory=list)
