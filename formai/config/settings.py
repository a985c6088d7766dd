"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

    1. Environment variables, e.g. ``MISTRAL_API_KEY=...``
    2. A ``.env`` file in the working directory
    3. The defaults below

Field ``mistral_api_key`` maps to env var ``MISTRAL_API_KEY``; pydantic-settings
matches names case-insensitively.  The provider preference table lives in
``config/config.yaml`` (see :mod:`formai.config.loader`).
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """formai application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Provider credentials ===
    # Empty string = "not configured": the provider is skipped without a call.
    mistral_api_key: str = ""
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # === Orchestration ===
    # Attempts per provider before falling through (2 = one retry).
    max_attempts_per_provider: int = Field(default=2, ge=1)
    # First backoff delay; doubled for each further retry.
    retry_backoff_seconds: float = Field(default=0.5, ge=0.0)
    # Upper bound on a single upstream call.
    provider_timeout_seconds: float = Field(default=30.0, gt=0.0)
    # How long a liveness probe result is trusted.
    health_cache_ttl_seconds: float = Field(default=120.0, gt=0.0)

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "*"  # comma-separated list

    def get_configured_providers(self) -> list[str]:
        """Return the provider names that have non-empty API keys configured."""
        providers: list[str] = []
        if self.mistral_api_key:
            providers.append("mistral-ocr")
        if self.anthropic_api_key:
            providers.append("claude-analysis")
        if self.openai_api_key:
            providers.append("openai-fallback")
        return providers

    def get_cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
