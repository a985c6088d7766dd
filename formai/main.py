"""formai FastAPI application entry point.

Wires the three provider adapters, the health cache, the availability
prober and the fallback orchestrator together, then exposes them through
the router in :mod:`formai.api.routes`.  Configuration comes from ``.env``
and ``config/config.yaml``.

``build_service`` is also used by the CLI to get an orchestrator without
starting the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

import formai
from formai.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from formai.api.routes import router as api_router
from formai.config.loader import load_config
from formai.config.settings import Settings
from formai.interfaces.ai_provider import IAIProvider
from formai.providers.ai.anthropic_provider import ClaudeAnalysisProvider
from formai.providers.ai.base import CONNECT_TIMEOUT
from formai.providers.ai.mistral_provider import MistralOCRProvider
from formai.providers.ai.openai_provider import OpenAIFallbackProvider
from formai.providers.cache.memory_cache import MemoryCacheProvider
from formai.services.availability_prober import AvailabilityProber
from formai.services.fallback_orchestrator import FallbackOrchestrator
from formai.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# DI assembly
# ---------------------------------------------------------------------------


def build_http_client(timeout: float) -> httpx.AsyncClient:
    """Shared connection pool for every vendor SDK client."""
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=CONNECT_TIMEOUT))


def build_providers(
    app_settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> list[IAIProvider]:
    """Instantiate every adapter; ones without a key stay registered but unconfigured."""
    timeout = app_settings.provider_timeout_seconds
    return [
        MistralOCRProvider(app_settings.mistral_api_key, http_client=http_client, timeout=timeout),
        ClaudeAnalysisProvider(
            app_settings.anthropic_api_key, http_client=http_client, timeout=timeout
        ),
        OpenAIFallbackProvider(
            app_settings.openai_api_key, http_client=http_client, timeout=timeout
        ),
    ]


def build_service(
    app_settings: Settings | None = None,
    config: dict[str, Any] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FallbackOrchestrator:
    """Construct the orchestrator and everything it depends on."""
    app_settings = app_settings or settings
    config = config if config is not None else load_config(settings=app_settings)
    provider_table = config["providers"]
    orchestration = config.get("orchestration", {})
    health = config.get("health", {})

    providers = build_providers(app_settings, http_client)
    cache = MemoryCacheProvider(
        ttl=health.get("cache_ttl_seconds", app_settings.health_cache_ttl_seconds)
    )
    prober = AvailabilityProber(providers, cache)

    orchestrator = FallbackOrchestrator(
        providers,
        preference=provider_table["preference"],
        ocr_primary=provider_table["ocr_primary"],
        analysis_primary=provider_table["analysis_primary"],
        last_resort=provider_table["last_resort"],
        prober=prober,
        max_attempts=orchestration.get(
            "max_attempts_per_provider", app_settings.max_attempts_per_provider
        ),
        retry_backoff_seconds=orchestration.get(
            "retry_backoff_seconds", app_settings.retry_backoff_seconds
        ),
        timeout_seconds=orchestration.get(
            "provider_timeout_seconds", app_settings.provider_timeout_seconds
        ),
    )
    _logger.info(
        "orchestrator_built",
        configured=[p["name"] for p in orchestrator.get_available_providers()],
        preference=provider_table["preference"],
    )
    return orchestrator


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build the orchestrator on startup unless one was injected; close the pool on shutdown."""
    http_client: httpx.AsyncClient | None = None
    if getattr(application.state, "orchestrator", None) is None:
        http_client = build_http_client(settings.provider_timeout_seconds)
        application.state.orchestrator = build_service(settings, http_client=http_client)

    _logger.info(
        "app_startup",
        version=formai.__version__,
        environment=settings.app_env,
        configured_providers=settings.get_configured_providers(),
    )

    yield

    if http_client is not None:
        await http_client.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(orchestrator: FallbackOrchestrator | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Passing *orchestrator* skips provider construction at startup.
    """
    application = FastAPI(
        title="formai API",
        version=formai.__version__,
        description=(
            "Document OCR and structured field extraction routed across "
            "Mistral, Claude and OpenAI with retry and automatic fallback."
        ),
        lifespan=_lifespan,
    )
    application.state.orchestrator = orchestrator

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.get_cors_origins())

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "formai.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
