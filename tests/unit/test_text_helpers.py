"""Unit tests for text, data-URI, and JSON extraction helpers."""

from __future__ import annotations

import pytest

from formai.utils.data_uri import parse_data_uri
from formai.utils.errors import InvalidInputError, InvalidUpstreamResponseError
from formai.utils.json_extraction import (
    DEFAULT_STRATEGIES,
    balanced_braces,
    extract_json_object,
    fenced_block,
    raw_text,
)
from formai.utils.text import (
    ELLIPSIS,
    clean_ocr_text,
    is_no_text_sentinel,
    strip_bold_lead_in,
    strip_code_fences,
    truncate_text,
)


# ======================================================================
# Code fences & lead-ins
# ======================================================================


class TestStripCodeFences:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("```\nHello\n```", "Hello"),
            ("```text\nLine 1\nLine 2\n```", "Line 1\nLine 2"),
            ('```json\n{"a": 1}\n```', '{"a": 1}'),
            ("  plain text  ", "plain text"),
            ("```\nunterminated", "unterminated"),
        ],
    )
    def test_strip(self, raw: str, expected: str) -> None:
        assert strip_code_fences(raw) == expected

    def test_inner_backticks_kept(self) -> None:
        assert strip_code_fences("use `code` here") == "use `code` here"


class TestLeadIn:
    def test_bold_label_line_removed(self) -> None:
        assert strip_bold_lead_in("**Extracted text:**\nJohn Smith") == "John Smith"

    def test_bold_inside_text_kept(self) -> None:
        assert strip_bold_lead_in("Name: **John**") == "Name: **John**"

    def test_clean_ocr_text_combines_both(self) -> None:
        assert clean_ocr_text("```\n**Text:**\nHello\n```") == "Hello"


class TestSentinel:
    @pytest.mark.parametrize(
        "text",
        ["No text found", "no text found", "NO TEXT FOUND", '"No text found."', "No readable text found"],
    )
    def test_matches(self, text: str) -> None:
        assert is_no_text_sentinel(text) is True

    @pytest.mark.parametrize("text", ["No text found on page 2, but page 1 says hi", "Hello", ""])
    def test_no_match(self, text: str) -> None:
        assert is_no_text_sentinel(text) is False


# ======================================================================
# Truncation
# ======================================================================


class TestTruncateText:
    def test_short_text_unchanged(self) -> None:
        assert truncate_text("short", 100) == "short"

    def test_exact_length_unchanged(self) -> None:
        assert truncate_text("x" * 10, 10) == "x" * 10

    def test_cuts_at_sentence_boundary_in_tail(self) -> None:
        text = "a" * 90 + ". " + "b" * 50
        result = truncate_text(text, 100)
        assert result == "a" * 90 + "."
        assert not result.endswith(ELLIPSIS)

    def test_cuts_at_newline_boundary(self) -> None:
        text = "a" * 85 + "\n" + "b" * 50
        assert truncate_text(text, 100) == "a" * 85 + "\n"

    def test_hard_cut_when_boundary_too_early(self) -> None:
        text = "a" * 10 + "." + "b" * 200
        result = truncate_text(text, 100)
        assert result == text[:97] + ELLIPSIS
        assert len(result) == 100

    def test_hard_cut_without_boundary(self) -> None:
        assert truncate_text("z" * 500, 100) == "z" * 97 + ELLIPSIS

    @pytest.mark.parametrize("budget", [1, 3, 4, 10, 250])
    def test_never_exceeds_budget(self, budget: int) -> None:
        assert len(truncate_text("a" * 500, budget)) <= budget

    def test_tiny_budget_drops_marker(self) -> None:
        assert truncate_text("abcdef", 2) == "ab"


# ======================================================================
# Data URIs
# ======================================================================


class TestParseDataURI:
    def test_valid(self) -> None:
        uri = parse_data_uri("data:image/png;base64,AAAA")
        assert uri.mime_type == "image/png"
        assert uri.payload == "AAAA"
        assert uri.uri == "data:image/png;base64,AAAA"

    def test_missing_mime_defaults_to_jpeg(self) -> None:
        assert parse_data_uri("data:;base64,AAAA").mime_type == "image/jpeg"

    @pytest.mark.parametrize(
        "value",
        [
            "not-a-data-uri",
            "image/png;base64,AAAA",
            "data:image/png;base64",
            "data:image/png;base64,",
            "data:image/png;base64,   ",
            "data:image/png,AAAA",
            "data:image/png;base64,not base64!",
            "data:image/png;base64,AAA",
            "",
        ],
    )
    def test_invalid(self, value: str) -> None:
        with pytest.raises(InvalidInputError):
            parse_data_uri(value)

    def test_non_string_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            parse_data_uri(None)  # type: ignore[arg-type]

    def test_provider_name_carried(self) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            parse_data_uri("nope", provider_name="mistral-ocr")
        assert exc_info.value.provider_name == "mistral-ocr"


# ======================================================================
# JSON extraction strategies
# ======================================================================


class TestStrategies:
    def test_fenced_block(self) -> None:
        assert fenced_block('Sure:\n```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_fenced_block_absent(self) -> None:
        assert fenced_block('{"a": 1}') is None

    def test_balanced_braces_ignores_braces_in_strings(self) -> None:
        text = 'prefix {"note": "a } b", "n": {"x": 1}} suffix'
        assert balanced_braces(text) == '{"note": "a } b", "n": {"x": 1}}'

    def test_balanced_braces_handles_escaped_quotes(self) -> None:
        text = r'{"q": "say \"}\" now"} tail'
        assert balanced_braces(text) == r'{"q": "say \"}\" now"}'

    def test_balanced_braces_none(self) -> None:
        assert balanced_braces("no json here") is None

    def test_raw_text(self) -> None:
        assert raw_text("  {}  ") == "{}"
        assert raw_text("   ") is None

    def test_default_order(self) -> None:
        assert DEFAULT_STRATEGIES == (fenced_block, balanced_braces, raw_text)


class TestExtractJSONObject:
    def test_plain_json(self) -> None:
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_fenced_json(self) -> None:
        assert extract_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    def test_json_with_commentary(self) -> None:
        assert extract_json_object('Here you go: {"a": 1}. Hope that helps!') == {"a": 1}

    def test_trailing_comma_repaired(self) -> None:
        assert extract_json_object('{"a": 1, "b": [1, 2,],}') == {"a": 1, "b": [1, 2]}

    def test_array_is_not_an_object(self) -> None:
        with pytest.raises(InvalidUpstreamResponseError):
            extract_json_object("[1, 2, 3]")

    def test_garbage_raises(self) -> None:
        with pytest.raises(InvalidUpstreamResponseError) as exc_info:
            extract_json_object("I cannot help with that.", provider_name="openai-fallback")
        assert exc_info.value.provider_name == "openai-fallback"

    def test_custom_strategies(self) -> None:
        with pytest.raises(InvalidUpstreamResponseError):
            extract_json_object('text {"a": 1}', strategies=(raw_text,))
