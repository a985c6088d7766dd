"""Provider identity, health, and attempt-history models.

These models describe the *orchestration* side of formai rather than the
documents themselves:

    ProviderDescriptor -- who a provider is and what it can do
    ProviderHealth     -- one cached liveness probe result
    ProviderAttempt    -- one recorded call outcome inside a fallback chain

All models are frozen pydantic v2 models; descriptors are built once at
startup from configuration and never mutated afterwards.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Capability(str, Enum):
    """Canonical operations a provider may support."""

    OCR = "OCR"
    ANALYSIS = "ANALYSIS"


class FailureClass(str, Enum):
    """Whether retrying the same provider with the same input could succeed."""

    TRANSIENT = "TRANSIENT"
    PERMANENT = "PERMANENT"


class ProviderDescriptor(BaseModel):
    """Identifies one upstream integration.

    ``credential`` is a :class:`SecretStr` so the key never shows up in
    ``repr()`` output or structured logs.  An empty credential means the
    provider is not configured.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    capabilities: frozenset[Capability]
    credential: SecretStr = SecretStr("")

    @property
    def has_credential(self) -> bool:
        return bool(self.credential.get_secret_value().strip())

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities


class ProviderHealth(BaseModel):
    """Result of a single availability probe, cached for a short TTL."""

    model_config = ConfigDict(frozen=True)

    provider_name: str
    available: bool
    checked_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
    # Wall-clock duration of the probe round-trip.
    response_time_ms: int = Field(default=0, ge=0)


class ProviderAttempt(BaseModel):
    """One recorded outcome in a fallback chain.

    Attempts are collected per request and attached to
    :class:`~formai.utils.errors.AllProvidersFailedError` so that every
    failure is visible in diagnostics even when it was never surfaced on its own.
    """

    model_config = ConfigDict(frozen=True)

    provider_name: str
    # 1-based attempt number against this provider; 0 means the provider was
    # skipped before any call was made (missing credential, failed probe).
    attempt: int = Field(ge=0)
    error_kind: str
    message: str
    classification: FailureClass
    status_code: int | None = None
