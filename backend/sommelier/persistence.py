"""Load/save primitives behind the cart and suggestion stores."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol

from .file_lock import FileLock
from .settings import settings

logger = logging.getLogger(__name__)

# Raised by an unavailable backing store or a lock that cannot be taken in time.
STORAGE_ERRORS: tuple[type[Exception], ...] = (OSError, TimeoutError, RuntimeError)


class Persistence(Protocol):
    def load(self) -> str | None: ...

    def save(self, blob: str) -> None: ...

    def lock(self): ...


class MemoryPersistence:
    """Process-local backing store, used for tests and ephemeral sessions."""

    def __init__(self, blob: str | None = None) -> None:
        self.blob = blob
        self.saves = 0
        self._mutex = threading.RLock()

    def load(self) -> str | None:
        return self.blob

    def save(self, blob: str) -> None:
        self.blob = blob
        self.saves += 1

    @contextmanager
    def lock(self) -> Iterator[None]:
        with self._mutex:
            yield


class JsonFilePersistence:
    """
    JSON blob stored in a single file.

    ``lock()`` serialises threads of this process with a re-entrant mutex and other
    processes with a :class:`FileLock` taken on the outermost acquisition only.
    Writes go to a temporary sibling first and are swapped in with ``os.replace``.
    """

    def __init__(self, path: Path | str, *, lock_timeout: float | None = None) -> None:
        self.path = Path(path)
        self.lock_timeout = (
            lock_timeout if lock_timeout is not None else settings.STORE_LOCK_TIMEOUT_SECONDS
        )
        self._mutex = threading.RLock()
        self._depth = 0

    def load(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError):
            logger.warning("Unreadable store file %s; treating as empty", self.path, exc_info=True)
            return None

    def save(self, blob: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(blob, encoding="utf-8")
        os.replace(tmp_path, self.path)

    @contextmanager
    def lock(self) -> Iterator[None]:
        with self._mutex:
            outermost = self._depth == 0
            file_lock = FileLock(self.path, timeout=self.lock_timeout) if outermost else None
            if file_lock is not None:
                file_lock.acquire()
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                if file_lock is not None:
                    file_lock.release()


__all__ = ["STORAGE_ERRORS", "JsonFilePersistence", "MemoryPersistence", "Persistence"]
