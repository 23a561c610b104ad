"""File-based persisted store for the credential cache."""

import contextlib
import os
import threading
import uuid
from pathlib import Path
from typing import ContextManager, Optional, Union

from filelock import FileLock, Timeout

from ...utils.security import get_secure_logger
from ..errors import CacheBackendError
from .base import CacheBackend

logger = get_secure_logger(__name__)

# One lock per cache file, shared by every backend instance in the process
_path_locks = {}
_path_locks_guard = threading.Lock()


def _get_path_lock(path: Path):
    key = os.path.abspath(path)
    with _path_locks_guard:
        if key not in _path_locks:
            _path_locks[key] = threading.RLock()
        return _path_locks[key]


class FileBackend(CacheBackend):
    """
    Stores the persisted cache snapshot as a single file.

    Writes go to a temporary sibling file that is renamed over the target,
    so readers never observe a half-written blob. Read-merge-write cycles
    on the same file are serialized between threads of this process. When
    ``lock_timeout`` is set they are also serialized across processes with
    a ``filelock`` lock file next to the cache file.
    """

    backend_type = "file"

    def __init__(self, path: Union[str, Path], lock_timeout: Optional[float] = None):
        """
        Initialize file backend.

        Args:
            path: Cache file location
            lock_timeout: Seconds to wait for the cross-process lock. None
                          disables it, threads of this process are still
                          serialized.
        """
        self.path = Path(path).expanduser()
        self.lock_timeout = lock_timeout

    @property
    def location(self) -> str:
        return str(self.path)

    @property
    def lock_path(self) -> Path:
        return self.path.with_name(self.path.name + ".lock")

    def read(self) -> Optional[bytes]:
        try:
            with open(self.path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CacheBackendError(
                f"Cannot read cache file {self.path}", backend_type=self.backend_type, cause=e
            )

    def write(self, data: bytes) -> None:
        # Unique per writer so concurrent threads never share a temp file
        temp_name = f"{self.path.name}.{os.getpid()}.{uuid.uuid4().hex}.tmp"
        temp_file = self.path.with_name(temp_name)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "wb") as f:
                f.write(data)
            os.replace(temp_file, self.path)
        except OSError as e:
            self._cleanup_temp_file(temp_file)
            raise CacheBackendError(
                f"Cannot write cache file {self.path}", backend_type=self.backend_type, cause=e
            )

    def delete(self) -> bool:
        try:
            self.path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise CacheBackendError(
                f"Cannot delete cache file {self.path}", backend_type=self.backend_type, cause=e
            )

    def lock(self) -> ContextManager[None]:
        return self._locked()

    @contextlib.contextmanager
    def _locked(self):
        with _get_path_lock(self.path):
            if self.lock_timeout is None:
                yield
            else:
                with self._file_locked():
                    yield

    @contextlib.contextmanager
    def _file_locked(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            file_lock = FileLock(str(self.lock_path), timeout=self.lock_timeout)
            file_lock.acquire()
        except (Timeout, OSError) as e:
            raise CacheBackendError(
                f"Cannot lock cache file {self.path}", backend_type=self.backend_type, cause=e
            )
        try:
            yield
        finally:
            file_lock.release()

    def _cleanup_temp_file(self, temp_file: Path) -> None:
        try:
            temp_file.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove temporary cache file {temp_file}: {e}")
