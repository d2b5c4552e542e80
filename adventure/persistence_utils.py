from __future__ import annotations

"""
persistence_utils.py: the single write path for adventure state.

Services never call store.save_to_file() themselves; they call save_store()
so that bursts of writes (a player clearing node after node) collapse into
one JSON dump, and tests can flush or inspect saves in one place.

Public API:
- save_store(store, state_path, debounced=True): standard save.
- flush_all_saves(): write every pending debounced save now (shutdown, tests).
- get_save_stats(): counters for monitoring and tests.

Design:
- One DebouncedSaver per state path, cached in _savers.
- The saver always writes the most recent store handed in for its path.
- Save failures are counted and logged, never raised to the caller; the
  in-memory store stays authoritative.
"""

import logging
import os
import time
from typing import Any, Dict

from constants import DEFAULT_SAVE_DEBOUNCE_MS, ENV_SAVE_DEBOUNCE_MS
from debounced_saver import DebouncedSaver

logger = logging.getLogger(__name__)

# state_path -> DebouncedSaver
_savers: Dict[str, DebouncedSaver] = {}
# state_path -> latest store handed to save_store
_targets: Dict[str, Any] = {}

_stats = {
    'debounced_calls': 0,
    'immediate_calls': 0,
    'errors': 0,
    'last_save_time': None,
}


def _get_interval_ms() -> int:
    try:
        return int((os.getenv(ENV_SAVE_DEBOUNCE_MS) or str(DEFAULT_SAVE_DEBOUNCE_MS)).strip())
    except ValueError:
        return DEFAULT_SAVE_DEBOUNCE_MS


def save_store(store, state_path: str, debounced: bool = True) -> None:
    """Persist ``store`` to ``state_path``.

    Usage:
        save_store(ctx.store, ctx.state_path)                   # normal mutation
        save_store(ctx.store, ctx.state_path, debounced=False)  # must hit disk now
    """
    _targets[state_path] = store
    if debounced:
        _stats['debounced_calls'] += 1
        s = _savers.get(state_path)
        if s is None:
            s = DebouncedSaver(lambda: _save_pending(state_path), interval_ms=_get_interval_ms())
            _savers[state_path] = s
        s.debounce()
    else:
        _stats['immediate_calls'] += 1
        _save_store_immediate(store, state_path)


def _save_pending(state_path: str) -> None:
    store = _targets.get(state_path)
    if store is not None:
        _save_store_immediate(store, state_path)


def _save_store_immediate(store, state_path: str) -> None:
    try:
        store.save_to_file(state_path)
        _stats['last_save_time'] = time.time()
    except (OSError, TypeError, ValueError) as e:
        _stats['errors'] += 1
        logger.error(f"Saving adventure state to {state_path} failed: {e}")


def flush_all_saves() -> None:
    """Write every pending debounced save immediately; safe to call repeatedly."""
    for saver in list(_savers.values()):
        saver.flush()


def get_save_stats() -> Dict[str, Any]:
    """Counters: debounced_calls, immediate_calls, errors, last_save_time, active_savers."""
    return {
        **_stats,
        'active_savers': len(_savers),
    }


def reset_persistence_state() -> None:
    """Drop cached savers and zero the counters (test isolation)."""
    for saver in _savers.values():
        saver.close()
    _savers.clear()
    _targets.clear()
    _stats.update({'debounced_calls': 0, 'immediate_calls': 0, 'errors': 0, 'last_save_time': None})
