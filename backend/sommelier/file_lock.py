"""Exclusive file locks guarding the read-modify-write cycle of persisted stores."""

from __future__ import annotations

import time
from pathlib import Path
from typing import IO

try:
    import fcntl  # Unix/Linux/macOS

    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False
    try:
        import msvcrt  # Windows

        HAS_MSVCRT = True
    except ImportError:
        HAS_MSVCRT = False


def lock_path_for(path: Path) -> Path:
    return path.parent / f".{path.name}.lock"


class FileLock:
    """
    Cross-process exclusive lock on a sidecar ``.<name>.lock`` file.

    The sidecar is left in place on release: unlinking it would let a waiter that
    already opened the old inode hold a lock nobody else can see.

    Usage:
        with FileLock(cart_path, timeout=5.0):
            blob = cart_path.read_text()
            ...
            cart_path.write_text(blob)
    """

    def __init__(
        self,
        path: Path | str,
        *,
        timeout: float = 10.0,
        poll_interval: float = 0.01,
    ):
        self.path = Path(path)
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._handle: IO[str] | None = None
        self._lock_path = lock_path_for(self.path)

    @property
    def locked(self) -> bool:
        return self._handle is not None

    def __enter__(self) -> FileLock:
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def _try_lock(self, handle: IO[str]) -> None:
        if HAS_FCNTL:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        else:
            msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)

    def _unlock(self, handle: IO[str]) -> None:
        if HAS_FCNTL:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        else:
            msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)

    def acquire(self) -> None:
        """
        Block until the lock is held or ``timeout`` elapses.

        Raises:
            TimeoutError: If the lock cannot be acquired within timeout
            RuntimeError: If file locking is not available on this platform
        """
        if not HAS_FCNTL and not HAS_MSVCRT:
            raise RuntimeError("File locking not available on this platform.")
        if self._handle is not None:
            raise RuntimeError(f"Lock on {self.path} is already held by this object")

        self._lock_path.parent.mkdir(parents=True, exist_ok=True)
        deadline = time.monotonic() + self.timeout
        handle = open(self._lock_path, "a+", encoding="utf-8")
        while True:
            try:
                self._try_lock(handle)
            except OSError:
                if time.monotonic() >= deadline:
                    handle.close()
                    raise TimeoutError(
                        f"Could not acquire lock on {self.path} within {self.timeout}s"
                    ) from None
                time.sleep(self.poll_interval)
            except Exception as exc:
                handle.close()
                raise RuntimeError(f"Failed to acquire lock on {self.path}") from exc
            else:
                self._handle = handle
                return

    def release(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            self._unlock(handle)
        finally:
            handle.close()


__all__ = ["FileLock", "lock_path_for"]
