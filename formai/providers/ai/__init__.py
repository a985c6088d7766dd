"""Upstream AI provider adapters."""

from formai.providers.ai.anthropic_provider import ClaudeAnalysisProvider
from formai.providers.ai.base import BaseAIProvider
from formai.providers.ai.mistral_provider import MistralOCRProvider
from formai.providers.ai.openai_provider import OpenAIFallbackProvider

__all__ = [
    "BaseAIProvider",
    "ClaudeAnalysisProvider",
    "MistralOCRProvider",
    "OpenAIFallbackProvider",
]
