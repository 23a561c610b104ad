"""Process-wide in-memory tier of the credential cache."""

import copy
import threading
from typing import Any, Dict, Mapping, Optional


class MemoryCache:
    """
    Thread-safe mapping from cache key to credential record.

    One instance normally lives for the whole process and is shared by every
    client, see :func:`get_process_cache`. Records are deep-copied on the
    way in and out so callers can never mutate cached state.
    """

    def __init__(self):
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._entries.get(key)
            return copy.deepcopy(record) if record is not None else None

    def set(self, key: str, record: Mapping[str, Any]) -> None:
        with self._lock:
            self._entries[key] = copy.deepcopy(dict(record))

    def merge_missing(self, entries: Mapping[str, Any]) -> int:
        """
        Copy entries whose keys are not in memory yet.

        Entries already held in memory were written by this process and are
        kept. Non-mapping values are ignored.

        Returns:
            Number of entries added
        """
        added = 0
        with self._lock:
            for key, record in entries.items():
                if key in self._entries or not isinstance(record, Mapping):
                    continue
                self._entries[key] = copy.deepcopy(dict(record))
                added += 1
        return added

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_process_cache = MemoryCache()


def get_process_cache() -> MemoryCache:
    """Return the memory tier shared by all clients in this process."""
    return _process_cache
