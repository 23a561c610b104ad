"""Persisted store implementations for the credential cache.

- CacheBackend: Abstract byte-blob store
- FileBackend: Local file storage with optional cross-process locking
"""

from .base import CacheBackend
from .file import FileBackend

__all__ = [
    "CacheBackend",
    "FileBackend",
]
