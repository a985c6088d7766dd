"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

    1. config/config.yaml  -- provider preference table and tuning defaults
    2. .env file           -- local developer overrides (not committed)
    3. Environment vars    -- set at deploy time

``load_config()`` reads the YAML first, then lays values from
:class:`~formai.config.settings.Settings` over it: variables that were
explicitly set replace YAML keys, plain defaults only fill gaps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from formai.config.settings import Settings
from formai.utils.errors import ConfigurationError

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "config.yaml"

# Used when no YAML file is present.
_BUILTIN_PROVIDERS: dict[str, Any] = {
    "preference": ["mistral-ocr", "claude-analysis", "openai-fallback"],
    "ocr_primary": "mistral-ocr",
    "analysis_primary": "claude-analysis",
    "last_resort": "openai-fallback",
}

# (section, key, Settings field)
_SETTINGS_MAP: tuple[tuple[str, str, str], ...] = (
    ("app", "host", "app_host"),
    ("app", "port", "app_port"),
    ("app", "env", "app_env"),
    ("app", "cors_origins", "cors_origins"),
    ("orchestration", "max_attempts_per_provider", "max_attempts_per_provider"),
    ("orchestration", "retry_backoff_seconds", "retry_backoff_seconds"),
    ("orchestration", "provider_timeout_seconds", "provider_timeout_seconds"),
    ("health", "cache_ttl_seconds", "health_cache_ttl_seconds"),
    ("logging", "level", "log_level"),
)


def load_config(
    path: str | Path | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  Defaults to the
            repository's ``config/config.yaml``.
        settings: Settings instance to merge; a fresh one is read from the
            environment when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML is malformed or the provider table
            names a primary that is not in the preference list.
    """
    config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Malformed config file {config_path}: {exc}") from exc
    else:
        yaml_config = {}

    if not isinstance(yaml_config, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    yaml_config.setdefault("providers", {})
    for key, value in _BUILTIN_PROVIDERS.items():
        yaml_config["providers"].setdefault(key, value)

    s = settings or Settings()
    # Explicitly set env/.env values override YAML; untouched Settings
    # defaults only fill keys the YAML leaves out.
    explicit = s.model_fields_set
    for section, key, field in _SETTINGS_MAP:
        target = yaml_config.setdefault(section, {})
        value = getattr(s, field)
        if field == "cors_origins":
            value = s.get_cors_origins()
        if field in explicit:
            target[key] = value
        else:
            target.setdefault(key, value)

    _validate_providers(yaml_config["providers"])
    return yaml_config


def _validate_providers(providers: dict[str, Any]) -> None:
    preference = providers.get("preference")
    if not isinstance(preference, list) or not preference:
        raise ConfigurationError("providers.preference must be a non-empty list")
    for role in ("ocr_primary", "analysis_primary", "last_resort"):
        name = providers.get(role)
        if name not in preference:
            raise ConfigurationError(
                f"providers.{role} ({name!r}) is not listed in providers.preference"
            )

