"""
Per-path locks - serializes read/transform/write cycles that target the
same file, so two concurrent updates cannot overwrite each other.
"""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from typing import Iterator


class PathLocks:
    """Map of canonical absolute path -> ``threading.Lock``.

    Locks are created on first use and kept for the life of the table;
    calls on different paths never contend.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _lock_for(self, abs_path: str) -> threading.Lock:
        key = os.path.normcase(os.path.normpath(abs_path))
        with self._lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, abs_path: str) -> Iterator[None]:
        """Hold the lock for *abs_path* for the duration of the block."""
        lock = self._lock_for(abs_path)
        with lock:
            yield

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)
