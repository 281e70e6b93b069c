"""Response caching keyed by request content."""

from .keys import cache_key
from .response_cache import CacheEntry, ResponseCache

__all__ = ["cache_key", "CacheEntry", "ResponseCache"]
