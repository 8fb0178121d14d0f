"""Unit tests for path-keyed locks."""

from __future__ import annotations

import threading

import pytest

from store.path_locks import PathLockRegistry


def test_lock_for_returns_same_lock_for_equivalent_paths(tmp_path) -> None:
    """Equivalent spellings of a path should share one lock."""
    registry = PathLockRegistry()

    with registry.hold([tmp_path / "b.json"]):
        first = registry.lock_for(tmp_path / "a" / ".." / "b.json")
        second = registry.lock_for(tmp_path / "b.json")

    assert first is not None and first is second


def test_lock_for_is_none_for_unheld_path(tmp_path) -> None:
    """Paths nobody holds have no registered lock."""
    assert PathLockRegistry().lock_for(tmp_path / "a.json") is None


def test_hold_is_reentrant_for_repeated_paths(tmp_path) -> None:
    """Nested holds on the same path in one thread should not deadlock."""
    registry = PathLockRegistry()
    entered = False

    with registry.hold([tmp_path / "a.json", tmp_path / "a.json"]):
        with registry.hold([tmp_path / "a.json"]):
            entered = True

    assert entered


def test_hold_blocks_other_threads(tmp_path) -> None:
    """A held path lock should exclude other threads until released."""
    registry = PathLockRegistry()
    acquired: list[bool] = []

    def _try_acquire() -> None:
        lock = registry.lock_for(tmp_path / "a.json")
        acquired.append(lock is not None and lock.acquire(blocking=False))

    with registry.hold([tmp_path / "a.json"]):
        worker = threading.Thread(target=_try_acquire)
        worker.start()
        worker.join()

    assert acquired == [False]


def test_registry_drops_locks_after_last_holder(tmp_path) -> None:
    """Locks should be forgotten once nested holds are all released."""
    registry = PathLockRegistry()

    with registry.hold([tmp_path / "a.json", tmp_path / "b.json"]):
        with registry.hold([tmp_path / "a.json"]):
            held = len(registry)
        still_held = len(registry)

    assert (held, still_held, len(registry)) == (2, 2, 0)


def test_registry_drops_lock_released_by_exception(tmp_path) -> None:
    """A hold left by an exception should still release its entry."""
    registry = PathLockRegistry()

    with pytest.raises(RuntimeError):
        with registry.hold([tmp_path / "a.json"]):
            raise RuntimeError("boom")

    assert len(registry) == 0
