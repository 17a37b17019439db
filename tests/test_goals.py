from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from brutalytics.goals import (
    create_goal,
    days_until_deadline,
    derive_status,
    find_goal,
    is_stuck,
    micrometa_completion_ratio,
    needs_urgent_attention,
    new_goal_id,
    record_micrometa_progress,
    record_progress,
    replace_goal,
    sync_status,
    update_micrometa,
)
from brutalytics.models import Goal, GoalStatus, Micrometa, ProgressEntry


def _goal(now: datetime, **overrides: object) -> Goal:
    fields: dict[str, object] = {
        "id": 1,
        "title": "Vender",
        "metric": "Ventas",
        "current": 10,
        "target": 100,
        "unit": "USD",
        "created_at": now,
        "last_updated": now,
    }
    fields.update(overrides)
    return Goal.model_validate(fields)


def _history(now: datetime, count: int = 2) -> list[ProgressEntry]:
    return [ProgressEntry(date=now - timedelta(days=20 - index), value=index) for index in range(count)]


def test_derive_and_sync_status(now: datetime) -> None:
    assert derive_status(100, 100) is GoalStatus.COMPLETED
    assert derive_status(99.9, 100) is GoalStatus.IN_PROGRESS

    goal = _goal(now, current=100)
    synced = sync_status(goal)

    assert goal.status is GoalStatus.IN_PROGRESS
    assert synced.status is GoalStatus.COMPLETED
    assert sync_status(synced) is synced


def test_days_until_deadline_rounds_up_and_goes_negative(now: datetime) -> None:
    assert days_until_deadline(_goal(now), now=now) is None
    assert days_until_deadline(_goal(now, deadline=now + timedelta(days=4, hours=1)), now=now) == 5
    assert days_until_deadline(_goal(now, deadline=now - timedelta(days=2)), now=now) == -2


def test_stuck_requires_history_and_idle_week(now: datetime) -> None:
    idle = now - timedelta(days=10)

    assert is_stuck(_goal(now, last_updated=idle, progress_history=_history(now)), now=now)
    assert not is_stuck(_goal(now, last_updated=idle, progress_history=_history(now, 1)), now=now)
    assert not is_stuck(_goal(now, last_updated=now - timedelta(days=3), progress_history=_history(now)), now=now)
    assert not is_stuck(
        _goal(now, last_updated=idle, progress_history=_history(now), status=GoalStatus.COMPLETED),
        now=now,
    )


def test_urgent_attention_rules(now: datetime) -> None:
    idle = now - timedelta(days=10)
    stuck_soon = _goal(
        now, current=90, last_updated=idle, progress_history=_history(now), deadline=now + timedelta(days=5)
    )
    low_progress_soon = _goal(now, current=10, deadline=now + timedelta(days=25))
    low_progress_late = _goal(now, current=10, deadline=now + timedelta(days=60))
    overdue = _goal(now, current=10, deadline=now - timedelta(days=3))

    assert needs_urgent_attention(stuck_soon, now=now)
    assert needs_urgent_attention(low_progress_soon, now=now)
    assert not needs_urgent_attention(low_progress_late, now=now)
    assert needs_urgent_attention(overdue, now=now)


def test_new_goal_id_stays_above_existing(now: datetime) -> None:
    stamp = int(now.timestamp() * 1000)

    assert new_goal_id([], now=now) == stamp
    assert new_goal_id([stamp + 5], now=now) == stamp + 6


def test_create_goal_validates_input(now: datetime) -> None:
    goal = create_goal(title="  Lanzar curso ", metric="", target=10, unit=" ventas ", now=now)

    assert goal.title == "Lanzar curso"
    assert goal.metric == "Lanzar curso"
    assert goal.unit == "ventas"
    assert goal.next_reminder == now + timedelta(days=7)

    with pytest.raises(ValueError):
        create_goal(title=" ", metric="x", target=10, now=now)
    with pytest.raises(ValueError):
        create_goal(title="x", metric="x", target=0, now=now)


def test_record_progress_appends_history_without_touching_status(now: datetime) -> None:
    goal = _goal(now - timedelta(days=1))

    updated = record_progress(goal, 100, notes=" cerrado ", now=now)

    assert updated.current == 100
    assert updated.last_updated == now
    assert updated.progress_history[-1].notes == "cerrado"
    assert updated.status is GoalStatus.IN_PROGRESS
    assert goal.progress_history == []


def test_micrometa_progress_syncs_status(now: datetime) -> None:
    micrometa = Micrometa(id=11, parent_goal_id=1, title="Llamar clientes")
    goal = _goal(now, micrometas=[micrometa, Micrometa(id=12, parent_goal_id=1, title="Otro")])

    updated = record_micrometa_progress(
        micrometa, 100, evidence="CRM", links=["https://example.com", "  "], now=now
    )
    goal = update_micrometa(goal, updated)

    assert updated.status is GoalStatus.COMPLETED
    assert updated.progress_history[-1].links == ["https://example.com"]
    assert micrometa_completion_ratio(goal) == 0.5


def test_find_and_replace_goal(now: datetime) -> None:
    goals = [_goal(now, id=1), _goal(now, id=2)]
    changed = goals[1].model_copy(update={"current": 50})

    replaced = replace_goal(goals, changed)

    assert find_goal(replaced, 2) == changed
    assert find_goal(replaced, 3) is None
    assert replaced[0] is goals[0]
