"""Text clean-up helpers shared by every AI provider adapter.

LLM-backed OCR and analysis endpoints return free-form text that often
arrives wrapped in markdown (```` ``` ```` or ```` ```json ```` fences, bold
lead-ins like ``**Extracted text:**``) or as a polite refusal sentence when
the image holds nothing readable.  The helpers here turn that into clean
content, and trim caller text to a provider's prompt budget.
"""

from __future__ import annotations

import re

# Whole-response fence: ```lang\n ... \n```
_FENCED_BLOCK_RE = re.compile(r"^```[\w-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)
_OPENING_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_CLOSING_FENCE_RE = re.compile(r"\n?[ \t]*```$")

# A first line that is only a bold label ending in a colon.
_BOLD_LEAD_IN_RE = re.compile(r"^\*\*[^*\n]+:\*\*[ \t]*\n")

# Phrases our OCR prompts ask the model to return when nothing is readable.
NO_TEXT_SENTINELS = frozenset({
    "no text found",
    "no readable text found",
    "no text detected",
})

# Appended when truncation could not find a sentence or line boundary.
ELLIPSIS = "..."

# Truncation prefers a boundary inside the last 20% of the budget.
_BOUNDARY_WINDOW = 0.8


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapping *text* and trim whitespace.

    ``"```\\nHello\\n```"`` and ``"```json\\n{...}\\n```"`` both lose their
    fences.  Text without fences is only trimmed.
    """
    cleaned = text.strip()
    match = _FENCED_BLOCK_RE.match(cleaned)
    if match:
        return match.group(1).strip()
    cleaned = _OPENING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def strip_bold_lead_in(text: str) -> str:
    """Drop a leading ``**Label:**`` line that some models prepend to OCR output."""
    return _BOLD_LEAD_IN_RE.sub("", text, count=1).strip()


def clean_ocr_text(text: str) -> str:
    """Fence-strip, drop a bold lead-in, and trim raw OCR model output."""
    return strip_bold_lead_in(strip_code_fences(text))


def is_no_text_sentinel(text: str) -> bool:
    """Return ``True`` if *text* is exactly a "no text" sentinel phrase.

    The comparison is case-insensitive and ignores surrounding quotes and a
    trailing full stop, so ``'"No text found."'`` still counts.
    """
    normalized = text.strip().strip("\"'").strip().rstrip(".!").strip().lower()
    return normalized in NO_TEXT_SENTINELS


def truncate_text(text: str, max_chars: int) -> str:
    """Trim *text* to at most *max_chars* characters for prompt embedding.

    When the text is too long, the cut happens at the last sentence end
    (``.``) or newline, provided that boundary lies within the final 20% of
    the budget.  Otherwise the text is hard-cut and :data:`ELLIPSIS` appended,
    with the cut placed so the result still fits in *max_chars*.
    """
    if len(text) <= max_chars:
        return text

    truncated = text[:max_chars]
    cut_point = max(truncated.rfind("."), truncated.rfind("\n"))
    if cut_point > max_chars * _BOUNDARY_WINDOW:
        return truncated[: cut_point + 1]
    if max_chars <= len(ELLIPSIS):
        return text[:max_chars]
    return text[: max_chars - len(ELLIPSIS)] + ELLIPSIS
