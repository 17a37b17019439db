from __future__ import annotations

import random
from datetime import datetime, timedelta

import pytest

from brutalytics.goals import sync_status
from brutalytics.models import (
    Goal,
    GoalStatus,
    MotivationType,
    NotificationPriority,
    NotificationType,
    ProgressEntry,
    ReminderFrequency,
)
from brutalytics.notifications import GoalNotifier
from brutalytics.notifications import templates


def _goal(now: datetime, **overrides: object) -> Goal:
    fields: dict[str, object] = {
        "id": 7,
        "title": "Lanzar curso",
        "metric": "Ventas",
        "current": 50,
        "target": 100,
        "unit": "ventas",
        "created_at": now,
        "last_updated": now,
    }
    fields.update(overrides)
    return Goal.model_validate(fields)


def _stuck_fields(now: datetime) -> dict[str, object]:
    return {
        "last_updated": now - timedelta(days=10),
        "progress_history": [
            ProgressEntry(date=now - timedelta(days=20), value=10),
            ProgressEntry(date=now - timedelta(days=10), value=40),
        ],
    }


@pytest.fixture()
def notifier() -> GoalNotifier:
    return GoalNotifier(rng=random.Random(3))


def test_completed_goal_gets_single_achievement(notifier: GoalNotifier, now: datetime) -> None:
    goal = _goal(now, current=100)

    first = notifier.check_completed_goals([goal], now=now)

    assert len(first) == 1
    assert first[0].type is NotificationType.ACHIEVEMENT
    assert first[0].priority is NotificationPriority.CRITICAL
    assert not first[0].action_required
    assert first[0].title == templates.ACHIEVEMENT_TITLE.format(title=goal.title)

    assert notifier.check_completed_goals([sync_status(goal)], now=now) == []


def test_stuck_goal_with_close_deadline_is_urgent(notifier: GoalNotifier, now: datetime) -> None:
    goal = _goal(now, current=60, deadline=now + timedelta(days=5), **_stuck_fields(now))

    notification = notifier.generate_goal_notification(goal, now=now)

    assert notification.type is NotificationType.WARNING
    assert notification.priority is NotificationPriority.CRITICAL
    assert notification.action_required
    assert templates.URGENT_REASON_STUCK in notification.message
    assert notifier.check_stuck_goals([goal], now=now)[0].type is NotificationType.WARNING


def test_low_progress_with_deadline_uses_low_progress_reason(notifier: GoalNotifier, now: datetime) -> None:
    goal = _goal(now, current=20, deadline=now + timedelta(days=20))

    notification = notifier.generate_goal_notification(goal, now=now)

    assert notification.priority is NotificationPriority.CRITICAL
    assert templates.URGENT_REASON_LOW_PROGRESS in notification.message


def test_near_completion_is_motivation(notifier: GoalNotifier, now: datetime) -> None:
    goal = _goal(now, current=85)

    notification = notifier.generate_goal_notification(goal, now=now)

    assert notification.type is NotificationType.MOTIVATION
    assert notification.priority is None
    assert not notification.action_required
    expected_titles = {title.format(title=goal.title) for title, _ in templates.NEAR_COMPLETION_VARIANTS}
    assert notification.title in expected_titles


def test_deadline_warning_for_healthy_goal(notifier: GoalNotifier, now: datetime) -> None:
    goal = _goal(now, current=60, deadline=now + timedelta(days=3))

    notification = notifier.generate_goal_notification(goal, now=now)

    assert notification.type is NotificationType.WARNING
    assert notification.action_required
    assert "3 días" in notification.message
    assert "60.0%" in notification.message


def test_low_progress_without_deadline_is_getting_started(notifier: GoalNotifier, now: datetime) -> None:
    notification = notifier.generate_goal_notification(_goal(now, current=5), now=now)

    assert notification.type is NotificationType.MOTIVATION


def test_routine_reminder(notifier: GoalNotifier, now: datetime) -> None:
    notification = notifier.generate_goal_notification(_goal(now, current=50), now=now)

    assert notification.type is NotificationType.REMINDER
    assert notification.action_required
    assert notification.goal_id == 7
    assert notification.id.startswith("notification-")


def test_variant_choice_is_reproducible(now: datetime) -> None:
    goal = _goal(now, current=50)
    first = GoalNotifier(rng=random.Random(42)).generate_goal_notification(goal, now=now)
    second = GoalNotifier(rng=random.Random(42)).generate_goal_notification(goal, now=now)

    assert first.title == second.title
    assert first.id != second.id


def test_new_goal_notification(notifier: GoalNotifier, now: datetime) -> None:
    notification = notifier.generate_new_goal_notification(_goal(now, target=5000, unit="USD"), now=now)

    assert notification.type is NotificationType.INFO
    assert notification.priority is NotificationPriority.HIGH
    assert "5,000 USD" in notification.message


@pytest.mark.parametrize(
    ("overrides", "motivation"),
    [
        ({"current": 10, "deadline_days": 10}, MotivationType.URGENT),
        ({"current": 60, "stuck": True}, MotivationType.CHALLENGE),
        ({"current": 90}, MotivationType.CELEBRATION),
        ({"current": 50}, MotivationType.ENCOURAGEMENT),
    ],
)
def test_scheduled_reminder_motivation(
    notifier: GoalNotifier, now: datetime, overrides: dict[str, object], motivation: MotivationType
) -> None:
    fields: dict[str, object] = {"current": overrides["current"]}
    if "deadline_days" in overrides:
        fields["deadline"] = now + timedelta(days=int(overrides["deadline_days"]))  # type: ignore[call-overload]
    if overrides.get("stuck"):
        fields.update(_stuck_fields(now))

    reminder = notifier.generate_scheduled_reminder(_goal(now, **fields), now=now)

    assert reminder.motivation_type is motivation
    assert reminder.scheduled_for == now + timedelta(hours=24)
    assert "Lanzar curso" in reminder.message


def test_calculate_next_reminder(notifier: GoalNotifier, now: datetime) -> None:
    urgent = _goal(now, current=10, deadline=now + timedelta(days=10))
    stuck = _goal(now, current=60, **_stuck_fields(now))
    daily = _goal(now, reminder_frequency=ReminderFrequency.DAILY)
    monthly = _goal(now, reminder_frequency=ReminderFrequency.MONTHLY)

    assert notifier.calculate_next_reminder(urgent, now=now) == now + timedelta(hours=12)
    assert notifier.calculate_next_reminder(stuck, now=now) == now + timedelta(hours=24)
    assert notifier.calculate_next_reminder(daily, now=now) == now + timedelta(days=1)
    assert notifier.calculate_next_reminder(monthly, now=now) == now + timedelta(days=30)
    assert notifier.calculate_next_reminder(_goal(now), now=now) == now + timedelta(days=7)


def test_completed_status_is_not_reannounced(notifier: GoalNotifier, now: datetime) -> None:
    goal = _goal(now, current=100, status=GoalStatus.COMPLETED)

    notification = notifier.generate_goal_notification(goal, now=now)

    assert notification.type is not NotificationType.ACHIEVEMENT
