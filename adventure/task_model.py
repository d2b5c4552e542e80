"""Task and stats records supplied by external providers.

The objective engine and the world-path generator only read these. Provider
payloads are loose dicts (ids may be ints or strings, dates ISO strings or
missing), so ``from_dict`` normalizes them once at the boundary:
- ids become strings so ``42`` and ``"42"`` refer to the same task
- unparseable dates become None rather than raising
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from constants import DEFAULT_TASK_CATEGORY, DEFAULT_TASK_PRIORITY


def _parse_date(raw: Any) -> Optional[date]:
    if raw is None or raw == '':
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return datetime.fromisoformat(str(raw).strip()).date()
    except ValueError:
        return None


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if raw is None or raw == '':
        return None
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    try:
        return datetime.fromisoformat(str(raw).strip())
    except ValueError:
        return None


_TRUE_STRINGS = ("1", "true", "yes", "on")


def _parse_bool(raw: Any) -> bool:
    """Providers send booleans, 0/1, or their string forms ("0", "false")."""
    if isinstance(raw, str):
        return raw.strip().lower() in _TRUE_STRINGS
    return bool(raw)


@dataclass
class Task:
    id: str
    title: str = ""
    category: str = DEFAULT_TASK_CATEGORY
    priority: str = DEFAULT_TASK_PRIORITY
    completed: bool = False
    due_date: Optional[date] = None
    completed_date: Optional[datetime] = None

    def is_overdue(self, today: date) -> bool:
        return self.due_date is not None and self.due_date < today

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "priority": self.priority,
            "completed": self.completed,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "completed_date": self.completed_date.isoformat() if self.completed_date else None,
        }

    @staticmethod
    def from_dict(data: dict) -> "Task":
        return Task(
            id=str(data.get("id")),
            title=str(data.get("title") or ""),
            category=str(data.get("category") or DEFAULT_TASK_CATEGORY),
            priority=str(data.get("priority") or DEFAULT_TASK_PRIORITY).lower(),
            completed=_parse_bool(data.get("completed", False)),
            due_date=_parse_date(data.get("due_date")),
            completed_date=_parse_datetime(data.get("completed_date")),
        )


def coerce_tasks(raw: Iterable[Any] | None) -> List[Task]:
    """Accept Task objects or provider dicts; skip anything else."""
    out: List[Task] = []
    for item in raw or []:
        if isinstance(item, Task):
            out.append(item)
        elif isinstance(item, dict) and item.get("id") is not None:
            out.append(Task.from_dict(item))
    return out


@dataclass
class UserStats:
    """Aggregate counters from the stats provider."""
    current_streak: int = 0
    tasks_completed_today: int = 0
    tasks_completed_this_week: int = 0

    @staticmethod
    def from_dict(data: dict | None) -> "UserStats":
        data = data or {}

        def _int(key: str) -> int:
            try:
                return int(data.get(key) or 0)
            except (TypeError, ValueError):
                return 0

        return UserStats(
            current_streak=_int("current_streak"),
            tasks_completed_today=_int("tasks_completed_today"),
            tasks_completed_this_week=_int("tasks_completed_this_week"),
        )
