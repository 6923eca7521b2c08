"""In-memory representations of session entries and the practice plan."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional
from uuid import uuid4

from practice_log.core.constants import (
    CATEGORIES,
    DEFAULT_CATEGORY_MINUTES,
    DEFAULT_CATEGORY_NOTES,
    DEFAULT_DAILY_GOAL,
)

PLACEHOLDER_PREFIX = "local-"


def placeholder_key() -> str:
    return f"{PLACEHOLDER_PREFIX}{uuid4().hex}"


@dataclass(frozen=True)
class SessionEntry:
    """Minutes practised in one category on one day.

    ``id`` is assigned by the remote store; until then the entry is addressed by
    its placeholder ``local_key``.
    """

    date: str
    category: str
    minutes: int = 0
    id: Optional[int] = None
    local_key: str = field(default_factory=placeholder_key)

    def __post_init__(self) -> None:
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category {self.category!r}")
        if self.minutes < 0:
            raise ValueError("minutes must be >= 0")

    @property
    def key(self) -> str:
        return str(self.id) if self.id is not None else self.local_key

    @property
    def persisted(self) -> bool:
        return self.id is not None

    def patched(self, **changes: Any) -> "SessionEntry":
        return replace(self, **changes)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SessionEntry":
        return cls(
            id=row["id"],
            date=str(row["session_date"]),
            category=row["category"],
            minutes=int(row.get("minutes") or 0),
        )

    def to_row(self, user_id: str) -> Dict[str, Any]:
        return {
            "user_id": user_id,
            "session_date": self.date,
            "category": self.category,
            "minutes": self.minutes,
        }


@dataclass(frozen=True)
class PlanItem:
    minutes: int
    note: str = ""


def _default_items() -> Dict[str, PlanItem]:
    return {
        category: PlanItem(minutes=DEFAULT_CATEGORY_MINUTES, note=DEFAULT_CATEGORY_NOTES[category])
        for category in CATEGORIES
    }


@dataclass(frozen=True)
class WeeklyPlan:
    """Daily goal plus target minutes and a note per category (one per user)."""

    daily_goal: int = DEFAULT_DAILY_GOAL
    items: Dict[str, PlanItem] = field(default_factory=_default_items)
    updated_at: Optional[str] = None

    @property
    def allocated_minutes(self) -> int:
        return sum(self.items[category].minutes for category in CATEGORIES if category in self.items)

    def with_item(self, category: str, *, minutes: Optional[int] = None, note: Optional[str] = None) -> "WeeklyPlan":
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category {category!r}")
        current = self.items.get(category, PlanItem(minutes=0))
        items = dict(self.items)
        items[category] = PlanItem(
            minutes=current.minutes if minutes is None else minutes,
            note=current.note if note is None else note,
        )
        return replace(self, items=items)

    def with_goal(self, daily_goal: int) -> "WeeklyPlan":
        return replace(self, daily_goal=daily_goal)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "WeeklyPlan":
        """Build from a ``plan`` row; missing columns fall back to the defaults."""
        goal = row.get("daily_goal")
        items = {}
        for category in CATEGORIES:
            minutes = row.get(f"{category}_minutes")
            items[category] = PlanItem(
                minutes=DEFAULT_CATEGORY_MINUTES if minutes is None else int(minutes),
                note=row.get(f"{category}_note") or "",
            )
        updated_at = row.get("updated_at")
        return cls(
            daily_goal=DEFAULT_DAILY_GOAL if goal is None else int(goal),
            items=items,
            updated_at=str(updated_at) if updated_at else None,
        )

    def to_row(self, user_id: str) -> Dict[str, Any]:
        row: Dict[str, Any] = {"user_id": user_id, "daily_goal": self.daily_goal}
        for category in CATEGORIES:
            item = self.items.get(category, PlanItem(minutes=0))
            row[f"{category}_minutes"] = item.minutes
            row[f"{category}_note"] = item.note
        return row
