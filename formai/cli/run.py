"""Command line access to the formai orchestrator.

Usage::

    python -m formai.cli ocr scan.png
    python -m formai.cli analyze extracted.txt --json
    python -m formai.cli health --refresh
    python -m formai.cli providers
    python -m formai.cli metrics --url http://localhost:8000

Results go to stdout; logs go to stderr so ``--json`` output can be piped.

Exit codes: 0 success, 1 bad input (missing file, unsupported type,
invalid data), 2 every provider failed.
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import sys
from pathlib import Path
from typing import Any

import httpx

from formai.models.results import AnalysisResult, OCRResult
from formai.services.fallback_orchestrator import FallbackOrchestrator
from formai.utils.errors import AllProvidersFailedError, InvalidInputError
from formai.utils.logging import configure_logging

_CONTENT_TYPE_MAP = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}
_MAX_FILE_SIZE = 10 * 1024 * 1024

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_PROVIDERS_FAILED = 2


class CLIInputError(Exception):
    """A local file could not be turned into a request."""


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------


def image_to_data_uri(path: Path) -> str:
    """Read an image file and encode it as ``data:<mime>;base64,<payload>``."""
    if not path.is_file():
        raise CLIInputError(f"File not found: {path}")
    content_type = _CONTENT_TYPE_MAP.get(path.suffix.lower())
    if content_type is None:
        raise CLIInputError(
            f"Unsupported file type: {path.suffix or '(none)'}. "
            f"Allowed: {', '.join(sorted(_CONTENT_TYPE_MAP))}"
        )
    data = path.read_bytes()
    if len(data) > _MAX_FILE_SIZE:
        raise CLIInputError(f"File too large: {len(data)} bytes (max {_MAX_FILE_SIZE})")
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def read_text_file(path: Path) -> str:
    if not path.is_file():
        raise CLIInputError(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_ocr(result: OCRResult) -> str:
    return "\n".join(
        [
            f"Confidence: {result.confidence:.0%}  |  Processing time: {result.processing_time_ms} ms",
            "-" * 40,
            result.text,
        ]
    )


def _format_analysis(result: AnalysisResult) -> str:
    lines = [
        f"Document type:  {result.document_type}",
        f"Suggested form: {result.suggested_form}",
        f"Confidence:     {result.confidence:.0%}",
    ]
    if result.extracted_data:
        lines.append("")
        lines.append("EXTRACTED DATA")
        lines.append("-" * 40)
        lines.extend(_format_fields(result.extracted_data, indent=2))
    return "\n".join(lines)


def _format_fields(data: dict[str, Any], indent: int) -> list[str]:
    pad = " " * indent
    lines: list[str] = []
    for key, value in data.items():
        if isinstance(value, dict):
            lines.append(f"{pad}{key}:")
            lines.extend(_format_fields(value, indent + 2))
        elif isinstance(value, list):
            lines.append(f"{pad}{key}: {', '.join(str(v) for v in value)}")
        else:
            lines.append(f"{pad}{key}: {value}")
    return lines


def _format_health(health: dict[str, dict[str, Any]]) -> str:
    lines = []
    for name, item in health.items():
        state = "up" if item["available"] else "down"
        lines.append(f"{name:<20} {state:<5} {item.get('response_time_ms', 0)} ms")
    return "\n".join(lines)


def _format_providers(providers: list[dict[str, Any]]) -> str:
    if not providers:
        return "No providers configured. Set MISTRAL_API_KEY, ANTHROPIC_API_KEY or OPENAI_API_KEY."
    return "\n".join(f"{p['name']:<20} {', '.join(p['capabilities'])}" for p in providers)


def _format_metrics(metrics: dict[str, Any]) -> str:
    lines = [
        f"Uptime:       {metrics['uptime_seconds']:.0f} s",
        f"Requests:     {metrics['total_requests']} "
        f"({metrics['successful_requests']} ok, {metrics['failed_requests']} failed)",
        f"Avg latency:  {metrics['average_response_time_ms']} ms",
    ]
    for name, count in sorted(metrics.get("provider_usage", {}).items()):
        lines.append(f"  {name:<20} {count}")
    return "\n".join(lines)


def _emit(payload: Any, text: str, json_output: bool) -> None:
    if json_output:
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(text)


# ---------------------------------------------------------------------------
# Command runner
# ---------------------------------------------------------------------------


async def fetch_remote_metrics(base_url: str) -> dict[str, Any]:
    """GET ``/api/v1/metrics`` from a running server."""
    url = f"{base_url.rstrip('/')}/api/v1/metrics"
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()
    except httpx.HTTPError as exc:
        raise CLIInputError(f"Could not read metrics from {url}: {exc}") from exc


def _build_orchestrator() -> FallbackOrchestrator:
    # formai.main configures logging for the server at import time; point
    # it back at stderr afterwards.
    from formai.main import build_service, settings

    configure_logging(log_level=settings.log_level, stream=sys.stderr)
    return build_service(settings)


async def _run(args: argparse.Namespace, orchestrator: FallbackOrchestrator | None) -> int:
    if args.command == "metrics" and args.url:
        metrics = await fetch_remote_metrics(args.url)
        _emit(metrics, _format_metrics(metrics), args.json_output)
        return EXIT_OK

    assert orchestrator is not None
    if args.command == "ocr":
        result = await orchestrator.extract_text_from_image(image_to_data_uri(Path(args.image)))
        _emit(result.model_dump(), _format_ocr(result), args.json_output)
    elif args.command == "analyze":
        analysis = await orchestrator.analyze_document(read_text_file(Path(args.textfile)))
        _emit(analysis.model_dump(), _format_analysis(analysis), args.json_output)
    elif args.command == "health":
        health = await orchestrator.get_provider_health(refresh=args.refresh)
        _emit(health, _format_health(health), args.json_output)
    elif args.command == "providers":
        providers = orchestrator.get_available_providers()
        _emit(providers, _format_providers(providers), args.json_output)
    elif args.command == "metrics":
        metrics = orchestrator.get_metrics()
        _emit(metrics, _format_metrics(metrics), args.json_output)
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m formai.cli",
        description="Run document OCR and analysis through the formai provider chain.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON instead of formatted text.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ocr = sub.add_parser("ocr", help="Extract text from an image file.")
    ocr.add_argument("image", help="Path to a JPEG, PNG, WEBP or GIF image.")

    analyze = sub.add_parser("analyze", help="Classify a text file and extract its fields.")
    analyze.add_argument("textfile", help="Path to a UTF-8 text file.")

    health = sub.add_parser("health", help="Show provider availability.")
    health.add_argument("--refresh", action="store_true", help="Bypass the health cache.")

    sub.add_parser("providers", help="List providers with a configured API key.")

    metrics = sub.add_parser("metrics", help="Show request counters and per-provider usage.")
    metrics.add_argument(
        "--url",
        help="Base URL of a running formai server; without it the local process is reported.",
    )
    return parser


def main(argv: list[str] | None = None, orchestrator: FallbackOrchestrator | None = None) -> int:
    """Parse *argv*, run one command, and return the process exit code."""
    args = _build_parser().parse_args(argv)
    if orchestrator is None and not (args.command == "metrics" and args.url):
        orchestrator = _build_orchestrator()

    try:
        return asyncio.run(_run(args, orchestrator))
    except (CLIInputError, InvalidInputError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except AllProvidersFailedError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        for attempt in exc.attempts:
            print(
                f"  {attempt.provider_name} (attempt {attempt.attempt}): "
                f"{attempt.error_kind} - {attempt.message}",
                file=sys.stderr,
            )
        return EXIT_PROVIDERS_FAILED
