"""Derived totals for history, today's progress and the session log.

Everything here is a pure function of the entries passed in.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from practice_log.client.dates import last_n_dates
from practice_log.client.models import SessionEntry, WeeklyPlan
from practice_log.core.constants import CATEGORIES, CONSISTENCY_THRESHOLD, HISTORY_RANGES


def round_half_up(value: float) -> int:
    """Round like a UI would (2.5 -> 3), not banker's rounding."""
    return int(math.floor(value + 0.5))


def percent(achieved: float, target: float) -> int:
    """Whole percent of target, capped at 100; a zero target counts as 1."""
    return min(100, round_half_up(achieved / max(target, 1) * 100))


@dataclass(frozen=True)
class DaySummary:
    date: str
    total: int
    split: Dict[str, int]

    @property
    def segments(self) -> List[Tuple[str, int]]:
        """Non-zero categories in display order."""
        return [(category, self.split[category]) for category in CATEGORIES if self.split[category] > 0]


@dataclass(frozen=True)
class RangeSummary:
    days: List[DaySummary]
    total: int
    met_days: int
    days_in_range: int
    pct: int

    @property
    def consistency_display(self) -> str:
        return f"{self.met_days}/{self.days_in_range}"


def summarize_day(entries: Iterable[SessionEntry], session_date: str) -> DaySummary:
    split = {category: 0 for category in CATEGORIES}
    for entry in entries:
        if entry.date == session_date:
            split[entry.category] += entry.minutes
    return DaySummary(date=session_date, total=sum(split.values()), split=split)


def summarize_range(
    entries: Iterable[SessionEntry],
    *,
    goal: int,
    days: int,
    today: Optional[date] = None,
) -> RangeSummary:
    """Per-day totals, consistency and goal percentage for the trailing ``days``.

    A day meets the goal when its total reaches 80% of ``goal`` (rounded) and is
    above zero, so empty days never count even with a zero goal.
    """
    snapshot = list(entries)
    window = list(reversed(last_n_dates(days, today)))
    by_date: Dict[str, List[SessionEntry]] = {day: [] for day in window}
    for entry in snapshot:
        if entry.date in by_date:
            by_date[entry.date].append(entry)

    per_day = [summarize_day(by_date[day], day) for day in window]
    total = sum(day.total for day in per_day)
    threshold = round_half_up(goal * CONSISTENCY_THRESHOLD)
    met_days = sum(1 for day in per_day if day.total > 0 and day.total >= threshold)
    return RangeSummary(
        days=per_day,
        total=total,
        met_days=met_days,
        days_in_range=days,
        pct=percent(total, goal * days),
    )


def summarize_history(
    entries: Iterable[SessionEntry],
    *,
    goal: int,
    range_name: str = "week",
    today: Optional[date] = None,
) -> RangeSummary:
    try:
        days = HISTORY_RANGES[range_name]
    except KeyError:
        raise ValueError(f"Unknown history range {range_name!r}") from None
    return summarize_range(entries, goal=goal, days=days, today=today)


@dataclass(frozen=True)
class DayProgress:
    date: str
    total: int
    by_category: Dict[str, int]
    goal: int
    pct: int
    category_pct: Dict[str, int] = field(default_factory=dict)


def category_percent(minutes: int, target: int) -> int:
    """Percent of a category's target; a category with no target shows 0."""
    if target <= 0:
        return 0
    return min(100, round_half_up(minutes / target * 100))


def daily_progress(
    entries: Iterable[SessionEntry],
    session_date: str,
    goal: int,
    *,
    plan: Optional[WeeklyPlan] = None,
) -> DayProgress:
    day = summarize_day(entries, session_date)
    category_pct: Dict[str, int] = {}
    if plan is not None:
        targets = daily_targets(plan).by_category
        category_pct = {category: category_percent(day.split[category], targets[category]) for category in CATEGORIES}
    return DayProgress(
        date=session_date,
        total=day.total,
        by_category=day.split,
        goal=goal,
        pct=percent(day.total, goal),
        category_pct=category_pct,
    )


@dataclass(frozen=True)
class DailyTargets:
    by_category: Dict[str, int]
    allocated: int
    goal: int

    @property
    def unallocated(self) -> int:
        return self.goal - self.allocated


def daily_targets(plan: WeeklyPlan) -> DailyTargets:
    by_category = {
        category: (plan.items[category].minutes if category in plan.items else 0) for category in CATEGORIES
    }
    return DailyTargets(by_category=by_category, allocated=sum(by_category.values()), goal=plan.daily_goal)


@dataclass(frozen=True)
class DayGroup:
    date: str
    entries: List[SessionEntry]

    @property
    def total(self) -> int:
        return sum(entry.minutes for entry in self.entries)


def group_by_day(
    entries: Iterable[SessionEntry],
    *,
    days: int = 14,
    today: Optional[date] = None,
) -> List[DayGroup]:
    """Session-log view: trailing window, newest day first, categories in display order."""
    window = last_n_dates(days, today)
    grouped: Dict[str, List[SessionEntry]] = {day: [] for day in window}
    for entry in entries:
        if entry.date in grouped:
            grouped[entry.date].append(entry)
    return [
        DayGroup(date=day, entries=sorted(grouped[day], key=lambda e: CATEGORIES.index(e.category)))
        for day in window
    ]
