"""Configuration module -- exports Settings and load_config."""

from formai.config.loader import load_config
from formai.config.settings import Settings

__all__ = ["Settings", "load_config"]
