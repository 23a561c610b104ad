"""Credential cache for the TVM client.

Two tiers: a process-wide memory mapping shared by every client, layered
over an optional persisted store holding one JSON object of key to record.
"""

from .backends import CacheBackend, FileBackend
from .errors import CacheBackendError, CacheError, CacheKeyError, CacheSerializationError
from .expiry import get_expiration, is_fresh, parse_expiration
from .key_builder import derive_key
from .manager import TwoTierCache
from .memory import MemoryCache, get_process_cache

__all__ = [
    "CacheBackend",
    "FileBackend",
    "CacheError",
    "CacheBackendError",
    "CacheKeyError",
    "CacheSerializationError",
    "derive_key",
    "get_expiration",
    "is_fresh",
    "parse_expiration",
    "MemoryCache",
    "get_process_cache",
    "TwoTierCache",
]
