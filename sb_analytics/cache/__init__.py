"""Edge response cache."""

from .policies import DETAIL, LIST, NO_STORE, ROLLUP, CachePolicy
from .response_cache import CachedResponse, InMemoryStore, ResponseCache, build_cache_key

__all__ = [
    "CachePolicy",
    "DETAIL",
    "LIST",
    "NO_STORE",
    "ROLLUP",
    "CachedResponse",
    "InMemoryStore",
    "ResponseCache",
    "build_cache_key",
]
