"""FastAPI routes for the formai orchestration layer.

    Endpoint              Method  Description
    ---------------------------------------------------------------
    /api/v1/ocr           POST    Image data URI -> OCRResult
    /api/v1/analysis      POST    Document text  -> AnalysisResult
    /api/v1/health        GET     Per-provider liveness (?refresh=true)
    /api/v1/providers     GET     Providers with a configured credential
    /api/v1/metrics       GET     Request counters and per-provider usage

The orchestrator is resolved from ``app.state`` (populated in
``formai/main.py``'s lifespan) through an ``Annotated`` ``Depends`` alias.
Errors are raised, not returned; ErrorHandlingMiddleware renders them.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

import formai
from formai.api.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    ErrorResponse,
    HealthResponse,
    MetricsResponse,
    OCRRequest,
    OCRResponse,
    ProviderInfo,
    ProvidersResponse,
    ProviderStatus,
)
from formai.services.fallback_orchestrator import FallbackOrchestrator

router = APIRouter(prefix="/api/v1", tags=["formai"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    502: {"model": ErrorResponse, "description": "All AI providers failed"},
}


def _get_orchestrator(request: Request) -> FallbackOrchestrator:
    return request.app.state.orchestrator


OrchestratorDep = Annotated[FallbackOrchestrator, Depends(_get_orchestrator)]


@router.post(
    "/ocr",
    response_model=OCRResponse,
    responses=_ERROR_RESPONSES,
    summary="Extract text from a document image",
)
async def extract_text(body: OCRRequest, orchestrator: OrchestratorDep) -> OCRResponse:
    result = await orchestrator.extract_text_from_image(body.image_data)
    return OCRResponse(**result.model_dump())


@router.post(
    "/analysis",
    response_model=AnalysisResponse,
    responses=_ERROR_RESPONSES,
    summary="Classify a document and extract its fields",
)
async def analyze_document(body: AnalysisRequest, orchestrator: OrchestratorDep) -> AnalysisResponse:
    result = await orchestrator.analyze_document(body.text)
    return AnalysisResponse(**result.model_dump())


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Provider health check",
)
async def health_check(
    orchestrator: OrchestratorDep,
    refresh: Annotated[bool, Query(description="Bypass the health cache")] = False,
) -> HealthResponse:
    """Return application health and per-provider availability."""
    health = await orchestrator.get_provider_health(refresh=refresh)
    up = sum(1 for item in health.values() if item["available"])

    if health and up == len(health):
        status = "healthy"
    elif up:
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(
        status=status,
        version=formai.__version__,
        providers={name: ProviderStatus(**item) for name, item in health.items()},
    )


@router.get(
    "/providers",
    response_model=ProvidersResponse,
    summary="List configured providers",
)
async def list_providers(orchestrator: OrchestratorDep) -> ProvidersResponse:
    return ProvidersResponse(
        providers=[ProviderInfo(**item) for item in orchestrator.get_available_providers()]
    )


@router.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Request counters and per-provider usage",
)
async def get_metrics(orchestrator: OrchestratorDep) -> MetricsResponse:
    return MetricsResponse(**orchestrator.get_metrics())
