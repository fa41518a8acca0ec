"""File locking utilities for atomic I/O operations."""
from __future__ import annotations

import fcntl
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .core import ensure_directory

_THREAD_MUTEXES: dict[str, threading.Lock] = {}

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_POLL_INTERVAL_SECONDS = 0.1


class LockTimeoutError(TimeoutError):
    """Raised when an OS file lock cannot be acquired within timeout."""


def _thread_mutex(path: Path) -> threading.Lock:
    key = str(path.resolve())
    lock = _THREAD_MUTEXES.get(key)
    if lock is None:
        lock = _THREAD_MUTEXES.setdefault(key, threading.Lock())
    return lock


def _validate_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive (got {value})")


@contextmanager
def acquire_file_lock(
    file_path: Path | str,
    timeout: Optional[float] = None,
    nfs_safe: bool = True,
    *,
    poll_interval: Optional[float] = None,
) -> Iterator[object]:
    """Acquire an exclusive lock on ``file_path`` with a timeout.

    - Uses ``fcntl.flock`` with ``LOCK_EX | LOCK_NB`` (non-blocking) in a retry loop.
    - When ``nfs_safe`` is True, a sidecar ``.lock`` file is used for the lock target
      to avoid issues with NFS file locking semantics.
    - Threads of the same process are serialized by a per-path mutex first,
      since ``flock`` alone does not exclude them reliably.

    Args:
        file_path: Target file path to lock (or its .lock sidecar when nfs_safe=True).
        timeout: Maximum seconds to wait before raising ``LockTimeoutError``.
        nfs_safe: Use ``<file>.lock`` as the locked file.
        poll_interval: Sleep duration between non-blocking attempts.

    Yields:
        The opened file object kept locked for the duration of the context.
    """
    effective_timeout = DEFAULT_TIMEOUT_SECONDS if timeout is None else timeout
    effective_poll_interval = (
        DEFAULT_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
    )
    _validate_positive("timeout", effective_timeout)
    _validate_positive("poll_interval", effective_poll_interval)

    start = time.time()
    target = Path(file_path)
    lock_target = target.with_suffix(target.suffix + ".lock") if nfs_safe else target
    ensure_directory(lock_target.parent)

    mutex = _thread_mutex(lock_target)
    if not mutex.acquire(timeout=effective_timeout):
        raise LockTimeoutError(
            f"Could not acquire lock on {target} within {effective_timeout}s"
        )

    try:
        fh = open(lock_target, "a+")
        acquired = False
        try:
            while True:
                try:
                    fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    acquired = True
                    break
                except OSError:
                    if (time.time() - start) >= effective_timeout:
                        raise LockTimeoutError(
                            f"Could not acquire lock on {target} within {effective_timeout}s"
                        )
                    time.sleep(effective_poll_interval)

            yield fh
        finally:
            try:
                if acquired:
                    fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
            finally:
                fh.close()
                if nfs_safe and acquired:
                    lock_target.unlink(missing_ok=True)
    finally:
        mutex.release()


__all__ = ["acquire_file_lock", "LockTimeoutError"]
