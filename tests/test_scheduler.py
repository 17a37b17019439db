from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Sequence

from brutalytics.models import Goal, GoalStatus, NotificationType, ProgressEntry
from brutalytics.notifications import GoalNotifier, NotificationScheduler, NotificationStore
from brutalytics.storage import LocalStorage, MemoryStorageBackend


class _GoalRepository:
    def __init__(self, goals: Sequence[Goal]) -> None:
        self.goals = list(goals)
        self.saves = 0

    def load(self) -> list[Goal]:
        return list(self.goals)

    def save(self, goals: Sequence[Goal]) -> None:
        self.goals = list(goals)
        self.saves += 1


def _goal(now: datetime, goal_id: int, **overrides: object) -> Goal:
    fields: dict[str, object] = {
        "id": goal_id,
        "title": f"Meta {goal_id}",
        "metric": "Ventas",
        "current": 50,
        "target": 100,
        "created_at": now,
        "last_updated": now,
        "next_reminder": now + timedelta(days=7),
    }
    fields.update(overrides)
    return Goal.model_validate(fields)


def _scheduler(repository: _GoalRepository) -> NotificationScheduler:
    store = NotificationStore(LocalStorage(MemoryStorageBackend()))
    return NotificationScheduler(
        GoalNotifier(rng=random.Random(0)),
        store,
        load_goals=repository.load,
        save_goals=repository.save,
    )


def test_due_reminders_notify_and_reschedule(now: datetime) -> None:
    repository = _GoalRepository(
        [
            _goal(now, 1, next_reminder=now - timedelta(minutes=1)),
            _goal(now, 2),
        ]
    )
    scheduler = _scheduler(repository)

    created = scheduler.check_scheduled_reminders(now=now)

    assert [item.goal_id for item in created] == [1]
    assert repository.saves == 1
    assert repository.goals[0].next_reminder == now + timedelta(days=7)
    assert repository.goals[1].next_reminder == now + timedelta(days=7)
    assert scheduler.store.get_all_notifications() == created


def test_no_due_reminders_does_not_save(now: datetime) -> None:
    repository = _GoalRepository([_goal(now, 1)])

    assert _scheduler(repository).check_scheduled_reminders(now=now) == []
    assert repository.saves == 0


def test_urgent_pass_announces_completion_once(now: datetime) -> None:
    repository = _GoalRepository([_goal(now, 1, current=100)])
    scheduler = _scheduler(repository)

    first = scheduler.check_urgent_goals(now=now)
    second = scheduler.check_urgent_goals(now=now)

    assert [item.type for item in first] == [NotificationType.ACHIEVEMENT]
    assert second == []
    assert repository.goals[0].status is GoalStatus.COMPLETED
    assert len(scheduler.store.get_all_notifications()) == 1


def test_urgent_pass_emits_one_notification_per_goal(now: datetime) -> None:
    stuck_and_done = _goal(
        now,
        1,
        current=100,
        last_updated=now - timedelta(days=10),
        progress_history=[
            ProgressEntry(date=now - timedelta(days=20), value=10),
            ProgressEntry(date=now - timedelta(days=10), value=100),
        ],
        deadline=now + timedelta(days=5),
    )
    low_progress = _goal(now, 2, current=10, deadline=now + timedelta(days=10))
    repository = _GoalRepository([stuck_and_done, low_progress])
    scheduler = _scheduler(repository)

    created = scheduler.check_urgent_goals(now=now)

    assert sorted(item.goal_id for item in created) == [1, 2]
    by_goal = {item.goal_id: item for item in created}
    assert by_goal[1].type is NotificationType.ACHIEVEMENT
    assert by_goal[2].type is NotificationType.WARNING
    assert repository.goals[1].status is GoalStatus.IN_PROGRESS


def test_poll_once_throttles_each_pass(now: datetime) -> None:
    repository = _GoalRepository([_goal(now, 1, current=10, deadline=now + timedelta(days=10))])
    scheduler = _scheduler(repository)

    first = scheduler.poll_once(now=now)
    assert len(first) == 1
    assert scheduler.last_reminder_check == now
    assert scheduler.last_urgent_check == now

    assert scheduler.poll_once(now=now + timedelta(seconds=60)) == []

    after_urgent_interval = now + timedelta(minutes=2)
    assert len(scheduler.poll_once(now=after_urgent_interval)) == 1
    assert scheduler.last_urgent_check == after_urgent_interval
    assert scheduler.last_reminder_check == now


def test_due_completed_goal_is_announced_once_per_poll(now: datetime) -> None:
    repository = _GoalRepository([_goal(now, 1, current=100, next_reminder=now - timedelta(minutes=1))])
    scheduler = _scheduler(repository)

    created = scheduler.poll_once(now=now)

    achievements = [item for item in created if item.type is NotificationType.ACHIEVEMENT]
    assert len(achievements) == 1
    assert len(scheduler.store.get_all_notifications()) == 1
    assert repository.goals[0].status is GoalStatus.COMPLETED
    assert repository.goals[0].next_reminder > now
