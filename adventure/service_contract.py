"""Service layer contract definitions and helpers.

Every caller-facing adventure operation returns a 3-tuple:
    (ok: bool, error: str | None, payload: dict)

Where:
    - ok: True when the operation was applied
    - error: None on success, a human-readable rejection reason otherwise
    - payload: structured result for the caller (empty on rejection)

Example success:
    return success({'area': area.to_dict()})

Example rejection:
    return error('Target node is locked.')

Rejections never mutate state: services validate everything first and only
then write, so a caller can retry or show the reason without cleanup.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

ServiceReturn = Tuple[bool, Optional[str], Dict[str, Any]]


def success(payload: Dict[str, Any] | None = None) -> ServiceReturn:
    """Return a successful result carrying ``payload``."""
    return True, None, payload or {}


def error(message: str) -> ServiceReturn:
    """Return a rejection with a user-facing reason and no payload."""
    return False, message, {}
