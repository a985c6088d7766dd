"""API middleware: CORS, request logging, and error handling.

Starlette runs middleware as a stack (last added, first executed).  In
``formai/main.py``:

    app.add_middleware(ErrorHandlingMiddleware)    # added 1st, inner
    app.add_middleware(RequestLoggingMiddleware)   # added 2nd, outer

so RequestLoggingMiddleware sees the final status code, including the
ones ErrorHandlingMiddleware substitutes for a raised :class:`FormAIError`.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from formai.api.schemas import ErrorResponse
from formai.utils.errors import AllProvidersFailedError, FormAIError, InvalidInputError
from formai.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Defaults to ``["*"]``; production deployments pass the real origins via
    the ``CORS_ORIGINS`` setting.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers refuse credentials with a wildcard origin.
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def status_for_error(exc: FormAIError) -> int:
    """HTTP status for an application error reaching the API boundary."""
    if isinstance(exc, InvalidInputError):
        return 400
    if isinstance(exc, AllProvidersFailedError):
        return 502
    return 500


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn :class:`FormAIError` subclasses into structured JSON errors.

    The client gets the error ``kind``, the message, and for
    ``AllProvidersFailed`` the per-provider attempt history.  Stack traces
    stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except FormAIError as exc:
            status_code = status_for_error(exc)
            attempts = exc.to_detail() if isinstance(exc, AllProvidersFailedError) else []
            log = _logger.warning if status_code < 500 else _logger.error
            log(
                "application_error",
                error_kind=exc.kind,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                attempts=len(attempts),
            )
            body = ErrorResponse(error=exc.kind, detail=exc.message, attempts=attempts)
            return JSONResponse(status_code=status_code, content=body.model_dump())
