"""Objective records: one dataclass per objective type.

Objectives are a tagged union. Each variant carries only the parameters its
rule needs, and ``Objective.from_dict`` dispatches on the ``type`` tag.
Records are frozen: an objective that stops being achievable is replaced
wholesale by the objective service, never edited in place.

Serialized shape (what the persistence store keeps):
    {"type": "daily_quantity", "data": {"count": 3}, "description": "Complete 3 tasks today"}

``complete_task`` records written by older callers keep task_id/task_title at
the top level; from_dict accepts both places.
"""

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, Optional, Type

OBJECTIVE_COMPLETE_TASK = "complete_task"
OBJECTIVE_DAILY_QUANTITY = "daily_quantity"
OBJECTIVE_CATEGORY_DIVERSITY = "category_diversity"
OBJECTIVE_PRIORITY_CLEAR = "priority_clear"
OBJECTIVE_STREAK = "streak"
OBJECTIVE_QUANTITY_TIME = "quantity_time"
OBJECTIVE_OVERDUE_CLEAR = "overdue_clear"
OBJECTIVE_MASTER_CHALLENGE = "master_challenge"


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Objective:
    """Base class; concrete objectives set ``type``."""
    type: ClassVar[str] = "generic"
    description: str = ""

    def params(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "description"}

    def default_description(self) -> str:
        return "Complete the objective"

    @property
    def text(self) -> str:
        return self.description or self.default_description()

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "data": self.params(),
            "description": self.text,
        }

    @staticmethod
    def from_dict(data: dict) -> "Objective":
        if not isinstance(data, dict):
            return UnknownObjective(raw_type=str(data))
        obj_type = str(data.get("type") or "")
        params = dict(data.get("data") or {})
        # Top-level parameters (legacy complete_task shape) fill gaps in data
        for key, value in data.items():
            if key not in ("type", "data", "description"):
                params.setdefault(key, value)
        description = str(data.get("description") or "")

        cls = _REGISTRY.get(obj_type)
        if cls is None:
            return UnknownObjective(description=description, raw_type=obj_type, raw_data=params)
        return cls.from_params(params, description)

    @classmethod
    def from_params(cls, params: Dict[str, Any], description: str) -> "Objective":
        return cls(description=description)


@dataclass(frozen=True)
class CompleteTaskObjective(Objective):
    type: ClassVar[str] = OBJECTIVE_COMPLETE_TASK
    task_id: str = ""
    task_title: str = ""

    def default_description(self) -> str:
        return f"Complete: {self.task_title or self.task_id}"

    @classmethod
    def from_params(cls, params: Dict[str, Any], description: str) -> "Objective":
        raw_id = params.get("task_id")
        return cls(
            description=description,
            task_id="" if raw_id is None else str(raw_id),
            task_title=str(params.get("task_title") or ""),
        )


@dataclass(frozen=True)
class DailyQuantityObjective(Objective):
    type: ClassVar[str] = OBJECTIVE_DAILY_QUANTITY
    count: int = 1

    def default_description(self) -> str:
        noun = "task" if self.count == 1 else "tasks"
        return f"Complete {self.count} {noun} today"

    @classmethod
    def from_params(cls, params: Dict[str, Any], description: str) -> "Objective":
        return cls(description=description, count=_as_int(params.get("count"), 1))


@dataclass(frozen=True)
class CategoryDiversityObjective(Objective):
    type: ClassVar[str] = OBJECTIVE_CATEGORY_DIVERSITY
    category_count: int = 2

    def default_description(self) -> str:
        return f"Complete tasks from {self.category_count} different categories"

    @classmethod
    def from_params(cls, params: Dict[str, Any], description: str) -> "Objective":
        return cls(description=description, category_count=_as_int(params.get("category_count"), 2))


@dataclass(frozen=True)
class PriorityClearObjective(Objective):
    type: ClassVar[str] = OBJECTIVE_PRIORITY_CLEAR
    priority: str = "high"

    def default_description(self) -> str:
        return f"Complete all {self.priority}-priority tasks"

    @classmethod
    def from_params(cls, params: Dict[str, Any], description: str) -> "Objective":
        return cls(description=description, priority=str(params.get("priority") or "high").lower())


@dataclass(frozen=True)
class StreakObjective(Objective):
    type: ClassVar[str] = OBJECTIVE_STREAK
    days: int = 7
    category: Optional[str] = None

    def default_description(self) -> str:
        return f"Maintain a {self.days}-day streak"

    @classmethod
    def from_params(cls, params: Dict[str, Any], description: str) -> "Objective":
        return cls(description=description, days=_as_int(params.get("days"), 7),
                   category=params.get("category") or None)


@dataclass(frozen=True)
class QuantityTimeObjective(Objective):
    type: ClassVar[str] = OBJECTIVE_QUANTITY_TIME
    count: int = 10
    days: int = 5
    category: Optional[str] = None

    def default_description(self) -> str:
        what = f"{self.category} tasks" if self.category and self.category != "mixed" else "tasks"
        return f"Complete {self.count} {what} in {self.days} days"

    @classmethod
    def from_params(cls, params: Dict[str, Any], description: str) -> "Objective":
        return cls(description=description, count=_as_int(params.get("count"), 10),
                   days=_as_int(params.get("days"), 5), category=params.get("category") or None)


@dataclass(frozen=True)
class OverdueClearObjective(Objective):
    type: ClassVar[str] = OBJECTIVE_OVERDUE_CLEAR

    def default_description(self) -> str:
        return "Clear all overdue tasks"


@dataclass(frozen=True)
class MasterChallengeObjective(Objective):
    type: ClassVar[str] = OBJECTIVE_MASTER_CHALLENGE
    count: int = 25
    days: int = 7
    min_categories: int = 3

    def default_description(self) -> str:
        return f"Complete {self.count} tasks across {self.min_categories} categories in {self.days} days"

    @classmethod
    def from_params(cls, params: Dict[str, Any], description: str) -> "Objective":
        return cls(description=description, count=_as_int(params.get("count"), 25),
                   days=_as_int(params.get("days"), 7),
                   min_categories=_as_int(params.get("min_categories"), 3))


@dataclass(frozen=True)
class UnknownObjective(Objective):
    """Placeholder for a tag this engine does not know; never valid."""
    raw_type: str = ""
    raw_data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"type": self.raw_type, "data": dict(self.raw_data), "description": self.text}


_REGISTRY: Dict[str, Type[Objective]] = {
    cls.type: cls
    for cls in (
        CompleteTaskObjective,
        DailyQuantityObjective,
        CategoryDiversityObjective,
        PriorityClearObjective,
        StreakObjective,
        QuantityTimeObjective,
        OverdueClearObjective,
        MasterChallengeObjective,
    )
}

OBJECTIVE_TYPES = tuple(_REGISTRY.keys())


def generic_objective() -> Objective:
    """Fallback goal used when nothing better can be built."""
    return DailyQuantityObjective(description="Complete 1 task today", count=1)


def as_objective(value) -> Objective:
    """Accept an Objective or its serialized dict."""
    if isinstance(value, Objective):
        return value
    return Objective.from_dict(value)
