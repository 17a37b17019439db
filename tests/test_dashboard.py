from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from brutalytics.dashboard import GoalsSummary, main_focus_goals, summarize_goals
from brutalytics.models import Goal


def _goal(goal_id: int, current: float, *, deadline: datetime | None = None) -> Goal:
    return Goal(id=goal_id, title=f"Meta {goal_id}", metric="Ventas", current=current, target=100, deadline=deadline)


def test_summarize_goals_counts_urgent_and_completed(now: datetime) -> None:
    goals = [
        _goal(1, 100, deadline=now + timedelta(days=2)),
        _goal(2, 10, deadline=now + timedelta(days=5)),
        _goal(3, 50, deadline=now + timedelta(days=20)),
        _goal(4, 20, deadline=now - timedelta(days=2)),
        _goal(5, 40),
    ]

    summary = summarize_goals(goals, now=now)

    assert summary == GoalsSummary(total=5, completed=1, in_progress=4, urgent=2)
    assert summary.completion_rate == pytest.approx(0.2)


def test_empty_summary_has_zero_rate(now: datetime) -> None:
    assert summarize_goals([], now=now).completion_rate == 0.0


def test_focus_prefers_progress_then_deadline(now: datetime) -> None:
    far = _goal(1, 80, deadline=now + timedelta(days=30))
    close = _goal(2, 75, deadline=now + timedelta(days=5))
    behind = _goal(3, 20, deadline=now + timedelta(days=1))
    done = _goal(4, 100)

    focus = main_focus_goals([behind, far, done, close])

    assert [goal.id for goal in focus] == [2, 1, 3]
    assert [goal.id for goal in main_focus_goals([behind, far, close], limit=2)] == [2, 1]
