"""File locking utilities.

modctl commands share the store file, the integration tree and the generated
artifacts with any other invocation against the same project. State-changing
commands hold an exclusive advisory lock for their whole duration.
"""
from __future__ import annotations

import fcntl
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .core import ensure_directory

_THREAD_MUTEXES: dict[str, threading.Lock] = {}


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
    timeout: float = 10.0,
    *,
    poll_interval: float = 0.1,
) -> Iterator[object]:
    """Acquire an exclusive lock on ``<file_path>.lock`` with a timeout.

    - Uses ``fcntl.flock`` with ``LOCK_EX | LOCK_NB`` in a retry loop.
    - A sidecar ``.lock`` file is the lock target so the guarded file itself can
      be atomically replaced while the lock is held.

    Args:
        file_path: File whose sidecar is locked.
        timeout: Maximum seconds to wait before raising ``LockTimeoutError``.
        poll_interval: Sleep duration between non-blocking attempts.

    Yields:
        The opened lock file object, kept locked for the duration of the context.
    """
    _validate_positive("timeout", timeout)
    _validate_positive("poll_interval", poll_interval)

    start = time.time()
    target = Path(file_path)
    lock_target = target.with_suffix(target.suffix + ".lock")
    ensure_directory(lock_target.parent)

    mutex = _thread_mutex(lock_target)
    if not mutex.acquire(timeout=timeout):
        raise LockTimeoutError(f"Could not acquire lock on {target} within {timeout}s")

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
                    if (time.time() - start) >= timeout:
                        raise LockTimeoutError(
                            f"Could not acquire lock on {target} within {timeout}s"
                        )
                    time.sleep(poll_interval)

            yield fh
        finally:
            try:
                if acquired:
                    fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
            finally:
                fh.close()
                if acquired:
                    lock_target.unlink(missing_ok=True)
    finally:
        mutex.release()


def is_locked(file_path: Path | str) -> bool:
    """Return True when another holder currently owns the lock for ``file_path``."""
    target = Path(file_path)
    lock_target = target.with_suffix(target.suffix + ".lock")
    if not lock_target.exists():
        return False
    with open(lock_target, "a+") as fh:
        try:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            return True
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    return False


__all__ = ["acquire_file_lock", "is_locked", "LockTimeoutError"]
