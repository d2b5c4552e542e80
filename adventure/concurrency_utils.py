"""
Named locks that serialize mutations of one owner's adventure state.

Every caller-facing operation that touches an owner's Progress record, Area
nodes, or world paths runs inside that owner's lock, so two concurrent
"generate new area" or "move to node" requests cannot interleave and leave
Progress pointing at an area or node that was never written. State is
partitioned by owner id, so different owners never contend.

Usage:
    from concurrency_utils import atomic, owner_key

    with atomic(owner_key(owner_id)):
        ... read, mutate, and persist the owner's records ...

Design notes:
- Locks are greenlet-friendly when eventlet is installed (Semaphore) and
  fall back to threading.RLock otherwise.
- atomic_many() sorts names so multi-owner operations acquire in a stable
  order and cannot deadlock.
- The lock registry itself is guarded by a plain threading.RLock.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List

# Prefer eventlet's Semaphore when available for cooperative concurrency
try:  # pragma: no cover - environment dependent
    from eventlet.semaphore import Semaphore as _Lock
except Exception:  # pragma: no cover - CI without eventlet
    from threading import RLock as _Lock  # type: ignore

from threading import RLock as _RegistryLock

_LOCKS: Dict[str, Any] = {}
_LOCKS_GUARD = _RegistryLock()


def owner_key(owner_id: str) -> str:
    """Lock name for everything belonging to one owner."""
    return f"owner:{owner_id}"


def get_lock(name: str) -> Any:
    """Return the process-wide lock for ``name``, creating it on first use."""
    lk = _LOCKS.get(name)
    if lk is not None:
        return lk
    with _LOCKS_GUARD:
        lk = _LOCKS.get(name)
        if lk is None:
            lk = _Lock()
            _LOCKS[name] = lk
        return lk


@contextmanager
def atomic(name: str) -> Iterator[None]:
    """Hold the named lock for the duration of the block."""
    lk = get_lock(name)
    lk.acquire()
    try:
        yield
    finally:
        lk.release()


@contextmanager
def atomic_many(names: Iterable[str]) -> Iterator[None]:
    """Acquire several named locks in sorted order."""
    to_acquire: List[Any] = [get_lock(n) for n in sorted(set(names))]
    for lk in to_acquire:
        lk.acquire()
    try:
        yield
    finally:
        for lk in reversed(to_acquire):
            lk.release()
