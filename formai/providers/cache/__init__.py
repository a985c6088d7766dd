"""Cache provider adapters."""

from formai.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
