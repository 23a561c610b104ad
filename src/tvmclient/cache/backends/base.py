"""Persisted store interface for the credential cache."""

import contextlib
from abc import ABC, abstractmethod
from typing import ContextManager, Optional


class CacheBackend(ABC):
    """
    Abstract byte-blob store holding the whole persisted cache snapshot.

    The store knows nothing about records or keys: it reads and writes one
    serialized blob. Implementations may override :meth:`lock` to guard the
    read-merge-write cycle across processes; the default performs no
    locking and concurrent writers race with last-writer-wins semantics.
    """

    backend_type = "unknown"

    @abstractmethod
    def read(self) -> Optional[bytes]:
        """
        Read the persisted blob.

        Returns:
            Raw bytes, or None if nothing has been persisted yet

        Raises:
            CacheBackendError: If the store exists but cannot be read
        """
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Replace the persisted blob.

        Raises:
            CacheBackendError: If the store cannot be written
        """
        pass

    @abstractmethod
    def delete(self) -> bool:
        """
        Remove the persisted blob.

        Returns:
            True if something was removed, False if the store was already empty
        """
        pass

    @property
    @abstractmethod
    def location(self) -> str:
        """Human readable location of the store, for logs and status output."""
        pass

    def lock(self) -> ContextManager[None]:
        """Context manager held around each read-merge-write cycle."""
        return contextlib.nullcontext()
