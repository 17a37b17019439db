from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import cmp_to_key
from typing import Optional, Sequence

from brutalytics.constants import DEADLINE_WARNING_DAYS
from brutalytics.goals import days_until_deadline, progress_percent
from brutalytics.models import Goal

FOCUS_GOAL_LIMIT = 3
FOCUS_PROGRESS_TIE_POINTS = 10.0


@dataclass(frozen=True)
class GoalsSummary:
    total: int
    completed: int
    in_progress: int
    urgent: int

    @property
    def completion_rate(self) -> float:
        return self.completed / self.total if self.total else 0.0


def _reached(goal: Goal) -> bool:
    return goal.current >= goal.target


def summarize_goals(goals: Sequence[Goal], *, now: Optional[datetime] = None) -> GoalsSummary:
    """Counts for the dashboard header; urgent means unfinished with a deadline within a week."""

    completed = len([goal for goal in goals if _reached(goal)])
    urgent = 0
    for goal in goals:
        days = days_until_deadline(goal, now=now)
        if days is not None and days <= DEADLINE_WARNING_DAYS and not _reached(goal):
            urgent += 1
    return GoalsSummary(total=len(goals), completed=completed, in_progress=len(goals) - completed, urgent=urgent)


def _compare_focus(left: Goal, right: Goal) -> int:
    left_progress = progress_percent(left)
    right_progress = progress_percent(right)
    if abs(left_progress - right_progress) > FOCUS_PROGRESS_TIE_POINTS:
        return -1 if left_progress > right_progress else 1
    if left.deadline is not None and right.deadline is not None:
        if left.deadline == right.deadline:
            return 0
        return -1 if left.deadline < right.deadline else 1
    return 0


def main_focus_goals(goals: Sequence[Goal], *, limit: int = FOCUS_GOAL_LIMIT) -> list[Goal]:
    """Unfinished goals, most advanced first; close progress is broken by the earliest deadline."""

    open_goals = [goal for goal in goals if not _reached(goal)]
    return sorted(open_goals, key=cmp_to_key(_compare_focus))[:limit]


__all__ = ["GoalsSummary", "main_focus_goals", "summarize_goals"]
