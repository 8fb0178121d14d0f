"""In-process mutual exclusion keyed by filesystem path.

Writers lock every path they mutate. Callers holding several locks
acquire them through ``hold`` so the order is always sorted. A path's
lock lives only while some caller holds or waits on it.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
import os
from pathlib import Path
import threading
from typing import Iterable, Iterator


class _LockEntry:
    """Reentrant lock plus the count of callers using it."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.holders = 0


class PathLockRegistry:
    """Reference-counted reentrant locks, one per canonical path."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def lock_for(self, path: Path) -> threading.RLock | None:
        """Return the lock currently shared for a path, if any caller uses it."""
        with self._guard:
            entry = self._entries.get(_canonical(path))
            return entry.lock if entry is not None else None

    @contextmanager
    def hold(self, paths: Iterable[Path]) -> Iterator[None]:
        """Hold the locks of several paths, acquired in sorted order.

        Args:
            paths: Paths to lock; duplicates are collapsed.

        Yields:
            None while every lock is held.
        """
        keys = sorted({_canonical(path) for path in paths})
        entries = self._retain(keys)
        try:
            with ExitStack() as stack:
                for entry in entries:
                    stack.enter_context(entry.lock)
                yield
        finally:
            self._release(keys)

    def _retain(self, keys: list[str]) -> list[_LockEntry]:
        with self._guard:
            entries = []
            for key in keys:
                entry = self._entries.get(key)
                if entry is None:
                    entry = _LockEntry()
                    self._entries[key] = entry
                entry.holders += 1
                entries.append(entry)
            return entries

    def _release(self, keys: list[str]) -> None:
        # Locks are already unlocked here; waiters keep their entry alive.
        with self._guard:
            for key in keys:
                entry = self._entries[key]
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[key]


def _canonical(path: Path) -> str:
    return os.path.normpath(os.path.abspath(path))
