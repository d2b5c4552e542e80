"""
Fail-soft call helpers for objective resolution.

Objective checks and regeneration run on every level read, so a broken rule
or a malformed task record must never bubble up and block progression.
These helpers run a callable, log the first failure of each exception type
per callable, and hand back a default instead of raising.

Environment Opt-In (Debug Raising):
    Set DEBUG_RAISE_EXCEPTIONS to '1', 'true', 'yes', or 'on' to re-raise
    after the first (still logged) occurrence. The variable is read at call
    time, so tests can flip it with monkeypatch.setenv.

Usage:
    ok = safe_call_with_default(_rule, False, objective, tasks)
    record = safe_call(Task.from_dict, raw)
"""

import logging
import os
from typing import Callable, Optional, Set, TypeVar

# Keys of "<callable>:<ExceptionType>" already logged this session
_seen_exceptions: Set[str] = set()

logger = logging.getLogger(__name__)

T = TypeVar('T')


def _debug_raise_enabled() -> bool:
    try:
        val = os.getenv('DEBUG_RAISE_EXCEPTIONS', '').strip().lower()
        return val in ('1', 'true', 'yes', 'on')
    except Exception:
        return False


def _fn_name(fn: Callable) -> str:
    return fn.__name__ if hasattr(fn, '__name__') else str(fn)


def _log_once(label: str, fn: Callable, e: Exception, suffix: str) -> None:
    exc_type = type(e).__name__
    exc_key = f"{_fn_name(fn)}:{exc_type}"
    if exc_key not in _seen_exceptions:
        _seen_exceptions.add(exc_key)
        logger.warning(f"{label}: {_fn_name(fn)} failed with {exc_type}: {e} ({suffix})")


def safe_call(fn: Callable[..., T], *args, **kwargs) -> Optional[T]:
    """Run fn and return its result, or None if it raises.

    Only the first exception of each type per callable is logged; repeats
    are silent so a bad task record cannot flood the logs on every read.
    """
    try:
        return fn(*args, **kwargs)
    except Exception as e:
        _log_once('safe_call', fn, e, 'subsequent failures of this type will be silent')
        if _debug_raise_enabled():
            raise
        return None


def safe_call_with_default(fn: Callable[..., T], default: T, *args, **kwargs) -> T:
    """Like safe_call but returns ``default`` instead of None on failure.

    Example:
        valid = safe_call_with_default(rule, False, objective, tasks, stats, today)
    """
    try:
        return fn(*args, **kwargs)
    except Exception as e:
        _log_once('safe_call_with_default', fn, e, f'returning default: {default!r}')
        if _debug_raise_enabled():
            raise
        return default


def reset_seen_exceptions() -> None:
    """Forget which exception types were logged (test isolation)."""
    _seen_exceptions.clear()
