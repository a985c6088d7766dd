"""Pull a JSON object out of free-form LLM output.

Models asked for "ONLY valid JSON" still answer with fenced blocks,
leading commentary, or trailing explanations.  Extraction is an ordered
list of small, pure strategies; each either returns a candidate string or
``None``.  The first candidate that parses into a JSON object wins.

    1. fenced_block   -- contents of a ```` ```json ... ``` ```` fence
    2. balanced_braces -- first brace-balanced ``{...}`` span (string aware)
    3. raw_text       -- the whole response, trimmed

Each candidate is parsed strictly first, then once more with trailing
commas removed.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any, Optional

from formai.utils.errors import InvalidUpstreamResponseError

_JSON_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

ExtractionStrategy = Callable[[str], Optional[str]]


def fenced_block(text: str) -> str | None:
    """Return the body of the first markdown code fence, if any."""
    match = _JSON_FENCE_RE.search(text)
    if match:
        body = match.group(1).strip()
        return body or None
    return None


def balanced_braces(text: str) -> str | None:
    """Return the first brace-balanced ``{...}`` span in *text*.

    Braces inside JSON string literals (including escaped quotes) are
    ignored so ``{"note": "a } b"}`` is returned whole.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unbalanced from this brace; try the next opening brace.
        start = text.find("{", start + 1)
    return None


def raw_text(text: str) -> str | None:
    """Return the whole response, trimmed."""
    stripped = text.strip()
    return stripped or None


DEFAULT_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    fenced_block,
    balanced_braces,
    raw_text,
)


def _loads_lenient(candidate: str) -> Any:
    """``json.loads`` with a single trailing-comma repair retry."""
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        repaired = _TRAILING_COMMA_RE.sub(r"\1", candidate)
        if repaired == candidate:
            raise
        return json.loads(repaired)


def extract_json_object(
    text: str,
    provider_name: str | None = None,
    strategies: tuple[ExtractionStrategy, ...] = DEFAULT_STRATEGIES,
) -> dict[str, Any]:
    """Return the first JSON object any strategy can extract from *text*.

    Raises
    ------
    InvalidUpstreamResponseError
        If no strategy yields a candidate that parses into a JSON object.
    """
    for strategy in strategies:
        candidate = strategy(text)
        if candidate is None:
            continue
        try:
            parsed = _loads_lenient(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise InvalidUpstreamResponseError(
        "No valid JSON object found in provider response",
        provider_name=provider_name,
    )
