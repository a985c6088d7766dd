"""Unit tests for the formai error hierarchy."""

from __future__ import annotations

import pytest

from formai.models.provider import FailureClass, ProviderAttempt
from formai.utils.errors import (
    AllProvidersFailedError,
    ConfigurationError,
    FormAIError,
    InvalidCredentialError,
    InvalidInputError,
    InvalidUpstreamResponseError,
    NoTextFoundError,
    PayloadTooLargeError,
    ProviderError,
    RateLimitError,
    UpstreamRequestError,
    UpstreamServerError,
    error_for_status,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [
            InvalidCredentialError,
            RateLimitError,
            UpstreamServerError,
            PayloadTooLargeError,
            UpstreamRequestError,
            NoTextFoundError,
            InvalidUpstreamResponseError,
        ],
    )
    def test_provider_errors(self, cls: type) -> None:
        error = cls()
        assert isinstance(error, ProviderError)
        assert isinstance(error, FormAIError)

    def test_caller_errors_are_not_provider_errors(self) -> None:
        assert not isinstance(InvalidInputError(), ProviderError)
        assert not isinstance(ConfigurationError(), ProviderError)
        assert not isinstance(AllProvidersFailedError(), ProviderError)

    @pytest.mark.parametrize(
        ("cls", "kind"),
        [
            (InvalidInputError, "InvalidInput"),
            (InvalidCredentialError, "InvalidCredential"),
            (RateLimitError, "RateLimited"),
            (UpstreamServerError, "UpstreamServerError"),
            (PayloadTooLargeError, "PayloadTooLarge"),
            (NoTextFoundError, "NoTextFound"),
            (InvalidUpstreamResponseError, "InvalidUpstreamResponse"),
            (AllProvidersFailedError, "AllProvidersFailed"),
        ],
    )
    def test_kind_tags(self, cls: type, kind: str) -> None:
        assert cls.kind == kind

    def test_str_prefixes_provider(self) -> None:
        error = RateLimitError("Rate limit exceeded", provider_name="openai-fallback")
        assert str(error) == "[openai-fallback] Rate limit exceeded"
        assert error.message == "Rate limit exceeded"

    def test_str_without_provider(self) -> None:
        assert str(InvalidInputError("bad")) == "bad"

    def test_default_status_codes(self) -> None:
        assert RateLimitError().status_code == 429
        assert PayloadTooLargeError().status_code == 413
        assert UpstreamServerError().status_code is None


class TestErrorForStatus:
    @pytest.mark.parametrize(
        ("status", "cls"),
        [
            (401, InvalidCredentialError),
            (403, InvalidCredentialError),
            (413, PayloadTooLargeError),
            (429, RateLimitError),
            (500, UpstreamServerError),
            (502, UpstreamServerError),
            (503, UpstreamServerError),
            (400, UpstreamRequestError),
            (404, UpstreamRequestError),
            (422, UpstreamRequestError),
        ],
    )
    def test_mapping(self, status: int, cls: type) -> None:
        error = error_for_status(status, "msg", provider_name="p")
        assert type(error) is cls
        assert error.status_code == status
        assert error.provider_name == "p"


class TestAllProvidersFailed:
    def test_stable_message(self) -> None:
        assert str(AllProvidersFailedError()) == "All AI providers failed"

    def test_attempt_history(self) -> None:
        attempts = [
            ProviderAttempt(
                provider_name="mistral-ocr",
                attempt=1,
                error_kind="RateLimited",
                message="slow down",
                classification=FailureClass.TRANSIENT,
                status_code=429,
            )
        ]
        error = AllProvidersFailedError(attempts)

        assert error.attempts == attempts
        assert error.to_detail() == [
            {
                "provider_name": "mistral-ocr",
                "attempt": 1,
                "error_kind": "RateLimited",
                "message": "slow down",
                "classification": "TRANSIENT",
                "status_code": 429,
            }
        ]

    def test_attempts_copy(self) -> None:
        error = AllProvidersFailedError([])
        error.attempts.append("x")  # type: ignore[arg-type]
        assert error.attempts == []
