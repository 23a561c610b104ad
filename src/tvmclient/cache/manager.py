"""Two-tier credential cache: process-wide memory over an optional persisted store."""

import json
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from ..utils.security import get_secure_logger
from .backends.base import CacheBackend
from .errors import CacheError, CacheSerializationError
from .expiry import is_fresh
from .memory import MemoryCache, get_process_cache

logger = get_secure_logger(__name__)


class TwoTierCache:
    """
    Credential cache combining the shared memory tier with a persisted store.

    Lookups check memory first and fall back to reading the whole persisted
    snapshot, which is then copied into memory. Writes always merge: the
    persisted snapshot is re-read, the one key is updated and the full
    mapping is written back, so entries for other keys survive. The cycle is
    serialized between threads; without a lock-enabled backend it is not
    atomic across processes and the last writer wins.

    Persisted store failures are logged and recovered: an unreadable store
    counts as empty and a failed write leaves the memory tier updated.
    """

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        memory: Optional[MemoryCache] = None,
    ):
        """
        Initialize the two-tier cache.

        Args:
            backend: Persisted store. None keeps the cache purely in memory.
            memory: Memory tier, defaults to the process-wide instance
        """
        self.backend = backend
        self.memory = memory if memory is not None else get_process_cache()
        self._write_lock = threading.Lock()

    @property
    def persistence_enabled(self) -> bool:
        return self.backend is not None

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Look up the record stored under ``key``.

        Freshness is not checked here.

        Returns:
            A copy of the record, or None if neither tier holds the key
        """
        record = self.memory.get(key)
        if record is not None:
            logger.debug(f"read credentials from cache with key {key}")
            return record

        if self.backend is None:
            return None

        persisted = self._read_persisted()
        self.memory.merge_missing(persisted)

        record = persisted.get(key)
        if not isinstance(record, Mapping):
            return None

        logger.debug(f"read credentials from cache file {self.backend.location} with key {key}")
        return dict(record)

    def put(self, key: str, record: Mapping[str, Any]) -> None:
        """
        Store ``record`` under ``key`` in every enabled tier.

        Args:
            key: Cache key
            record: Credential record, must be JSON serializable to persist
        """
        self.memory.set(key, record)
        logger.debug(f"wrote credentials to cache with key {key}")

        if self.backend is None:
            return

        try:
            with self._write_lock, self.backend.lock():
                persisted = self._read_persisted()
                persisted[key] = dict(record)
                self.backend.write(self._serialize(persisted))
        except CacheError as e:
            logger.warning(f"failed to write credentials to cache file {self.backend.location}: {e}")
            return

        logger.debug(f"wrote credentials to cache file {self.backend.location} with key {key}")

    def clear(self) -> int:
        """
        Drop every entry from memory and remove the persisted store.

        Returns:
            Number of distinct entries that were dropped
        """
        keys = set(self.memory.snapshot())
        self.memory.clear()

        if self.backend is not None:
            try:
                with self._write_lock, self.backend.lock():
                    keys.update(self._read_persisted())
                    self.backend.delete()
            except CacheError as e:
                logger.warning(f"failed to clear cache file {self.backend.location}: {e}")

        logger.debug(f"cleared {len(keys)} cached credentials")
        return len(keys)

    def get_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Get cache statistics for status output.

        Returns:
            Dictionary with entry counts per tier and the fresh/expired split
        """
        now = now or datetime.now(timezone.utc)
        memory_entries = self.memory.snapshot()
        persisted = self._read_persisted() if self.backend is not None else {}

        combined = dict(persisted)
        combined.update(memory_entries)
        fresh = sum(1 for record in combined.values() if is_fresh(record, now))

        return {
            "persistence_enabled": self.persistence_enabled,
            "location": self.backend.location if self.backend is not None else None,
            "memory_entries": len(memory_entries),
            "persisted_entries": len(persisted),
            "total_entries": len(combined),
            "fresh_entries": fresh,
            "expired_entries": len(combined) - fresh,
        }

    def _read_persisted(self) -> Dict[str, Any]:
        """Read the persisted snapshot, treating any failure as an empty mapping."""
        try:
            raw = self.backend.read()
        except CacheError as e:
            logger.warning(f"ignoring unreadable cache file {self.backend.location}: {e}")
            return {}

        if not raw:
            return {}

        try:
            return self._deserialize(raw)
        except CacheSerializationError as e:
            logger.warning(f"ignoring malformed cache file {self.backend.location}: {e}")
            return {}

    @staticmethod
    def _deserialize(raw: bytes) -> Dict[str, Any]:
        try:
            content = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise CacheSerializationError(f"invalid JSON content: {e}", cause=e)

        if not isinstance(content, dict):
            raise CacheSerializationError(
                f"expected a JSON object, got {type(content).__name__}"
            )
        return content

    @staticmethod
    def _serialize(entries: Mapping[str, Any]) -> bytes:
        try:
            return json.dumps(entries).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CacheSerializationError(f"cannot serialize cache content: {e}", cause=e)
