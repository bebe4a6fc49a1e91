"""Service modules for wxdash."""

from .cache import CacheStats, TTLCache

__all__ = ["CacheStats", "TTLCache"]
