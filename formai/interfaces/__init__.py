"""Public interface definitions for formai's external collaborators.

Concrete adapters implement these ABCs and are injected at startup in
``formai/main.py``; services only ever see the interfaces.

    Interface          ->  Concrete implementations
    ------------------------------------------------------------
    IOCRCapable        ->  MistralOCRProvider, ClaudeAnalysisProvider,
                           OpenAIFallbackProvider
    IAnalysisCapable   ->  MistralOCRProvider, ClaudeAnalysisProvider,
                           OpenAIFallbackProvider
    ICacheProvider     ->  MemoryCacheProvider
"""

from formai.interfaces.ai_provider import IAIProvider, IAnalysisCapable, IOCRCapable
from formai.interfaces.cache_provider import ICacheProvider

__all__ = [
    "IAIProvider",
    "IAnalysisCapable",
    "ICacheProvider",
    "IOCRCapable",
]
