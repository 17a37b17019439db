from __future__ import annotations

import math
import time
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence, Union

from brutalytics.constants import (
    LOW_PROGRESS_DEADLINE_WINDOW_DAYS,
    STUCK_AFTER_DAYS,
    STUCK_DEADLINE_WINDOW_DAYS,
    STUCK_MIN_HISTORY_ENTRIES,
    URGENT_PROGRESS_PERCENT,
)
from brutalytics.models import (
    Goal,
    GoalStatus,
    Micrometa,
    MicrometaProgressEntry,
    ProgressEntry,
    ReminderFrequency,
)

Trackable = Union[Goal, Micrometa]


def _normalize(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    return _normalize(now) if now is not None else datetime.now(timezone.utc)


def progress_ratio(item: Trackable) -> float:
    if item.target <= 0:
        return 0.0
    return item.current / item.target


def progress_percent(item: Trackable) -> float:
    return progress_ratio(item) * 100


def format_amount(value: float) -> str:
    """Render ``5000.0`` as ``5,000`` and ``2.5`` as ``2.5``."""

    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def derive_status(current: float, target: float) -> GoalStatus:
    """Single source of truth for the completion status of a goal or micrometa."""

    return GoalStatus.COMPLETED if target > 0 and current >= target else GoalStatus.IN_PROGRESS


def sync_status(item: Trackable) -> Trackable:
    """Return a copy whose stored status matches its progress."""

    status = derive_status(item.current, item.target)
    if status is item.status:
        return item
    return item.model_copy(update={"status": status})


def days_until_deadline(item: Trackable, *, now: Optional[datetime] = None) -> Optional[int]:
    """Whole days left until the deadline, rounded up; negative once it has passed."""

    if item.deadline is None:
        return None
    remaining = _normalize(item.deadline) - _now(now)
    return math.ceil(remaining.total_seconds() / 86400)


def _deadline_within(item: Trackable, days: int, *, now: Optional[datetime]) -> bool:
    remaining = days_until_deadline(item, now=now)
    return remaining is not None and remaining <= days


def is_stuck(goal: Goal, *, now: Optional[datetime] = None) -> bool:
    """A goal with progress history that has not been updated for a week."""

    if len(goal.progress_history) < STUCK_MIN_HISTORY_ENTRIES:
        return False
    idle_seconds = (_now(now) - _normalize(goal.last_updated)).total_seconds()
    return idle_seconds > STUCK_AFTER_DAYS * 86400 and goal.status is GoalStatus.IN_PROGRESS


def needs_urgent_attention(goal: Goal, *, now: Optional[datetime] = None) -> bool:
    if is_stuck(goal, now=now) and _deadline_within(goal, STUCK_DEADLINE_WINDOW_DAYS, now=now):
        return True
    return progress_percent(goal) < URGENT_PROGRESS_PERCENT and _deadline_within(
        goal, LOW_PROGRESS_DEADLINE_WINDOW_DAYS, now=now
    )


def new_goal_id(existing_ids: Iterable[int] = (), *, now: Optional[datetime] = None) -> int:
    """Millisecond timestamp id, bumped past any existing id to stay unique."""

    candidate = int(_now(now).timestamp() * 1000) if now is not None else time.time_ns() // 1_000_000
    highest = max(existing_ids, default=0)
    return max(candidate, highest + 1)


def create_goal(
    *,
    title: str,
    metric: str,
    target: float,
    unit: str = "",
    current: float = 0.0,
    deadline: Optional[datetime] = None,
    reminder_frequency: ReminderFrequency = ReminderFrequency.WEEKLY,
    existing: Sequence[Goal] = (),
    now: Optional[datetime] = None,
) -> Goal:
    cleaned_title = title.strip()
    if not cleaned_title:
        raise ValueError("La meta necesita un título.")
    if target <= 0:
        raise ValueError("El objetivo debe ser mayor que cero.")

    timestamp = _now(now)
    return Goal(
        id=new_goal_id((goal.id for goal in existing), now=now),
        title=cleaned_title,
        metric=metric.strip() or cleaned_title,
        current=current,
        target=target,
        unit=unit.strip(),
        status=derive_status(current, target),
        created_at=timestamp,
        last_updated=timestamp,
        reminder_frequency=reminder_frequency,
        next_reminder=timestamp + reminder_frequency.interval,
        deadline=_normalize(deadline) if deadline is not None else None,
    )


def record_progress(
    goal: Goal,
    value: float,
    *,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Goal:
    """Append a progress entry and move ``current``.

    Status is left untouched; the notification pass announces the completion
    and then syncs it.
    """

    timestamp = _now(now)
    entry = ProgressEntry(date=timestamp, value=value, notes=(notes or "").strip() or None)
    return goal.model_copy(
        update={
            "current": value,
            "last_updated": timestamp,
            "progress_history": [*goal.progress_history, entry],
        }
    )


def record_micrometa_progress(
    micrometa: Micrometa,
    value: float,
    *,
    notes: Optional[str] = None,
    evidence: Optional[str] = None,
    links: Sequence[str] = (),
    now: Optional[datetime] = None,
) -> Micrometa:
    timestamp = _now(now)
    entry = MicrometaProgressEntry(
        date=timestamp,
        value=value,
        notes=(notes or "").strip() or None,
        evidence=(evidence or "").strip() or None,
        links=[link.strip() for link in links if link and link.strip()],
    )
    updated = micrometa.model_copy(
        update={
            "current": value,
            "last_updated": timestamp,
            "progress_history": [*micrometa.progress_history, entry],
        }
    )
    return sync_status(updated)


def update_micrometa(goal: Goal, micrometa: Micrometa) -> Goal:
    micrometas = [micrometa if item.id == micrometa.id else item for item in goal.micrometas]
    return goal.model_copy(update={"micrometas": micrometas})


def micrometa_completion_ratio(goal: Goal) -> float:
    if not goal.micrometas:
        return 0.0
    completed = len([item for item in goal.micrometas if item.status is GoalStatus.COMPLETED])
    return completed / len(goal.micrometas)


def find_goal(goals: Iterable[Goal], goal_id: int) -> Optional[Goal]:
    for goal in goals:
        if goal.id == goal_id:
            return goal
    return None


def replace_goal(goals: Sequence[Goal], updated: Goal) -> list[Goal]:
    return [updated if goal.id == updated.id else goal for goal in goals]


__all__ = [
    "create_goal",
    "days_until_deadline",
    "derive_status",
    "find_goal",
    "format_amount",
    "is_stuck",
    "micrometa_completion_ratio",
    "needs_urgent_attention",
    "new_goal_id",
    "progress_percent",
    "progress_ratio",
    "record_micrometa_progress",
    "record_progress",
    "replace_goal",
    "sync_status",
    "update_micrometa",
]
