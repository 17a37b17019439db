from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence
from uuid import uuid4

from brutalytics.constants import (
    DEADLINE_WARNING_DAYS,
    LOW_PROGRESS_PERCENT,
    NEAR_COMPLETION_PERCENT,
)
from brutalytics.goals import (
    days_until_deadline,
    format_amount,
    is_stuck,
    needs_urgent_attention,
    progress_percent,
    progress_ratio,
)
from brutalytics.models import (
    CoachReminder,
    Goal,
    GoalStatus,
    MotivationType,
    Notification,
    NotificationPriority,
    NotificationType,
)
from brutalytics.notifications import templates

LOGGER = logging.getLogger(__name__)

URGENT_REMINDER_INTERVAL = timedelta(hours=12)
STUCK_REMINDER_INTERVAL = timedelta(hours=24)
SCHEDULED_REMINDER_DELAY = timedelta(hours=24)


def _template_fields(goal: Goal, *, now: datetime) -> dict[str, object]:
    days = days_until_deadline(goal, now=now)
    return {
        "title": goal.title,
        "progress": f"{progress_percent(goal):.1f}",
        "days": days if days is not None else "",
        "target": format_amount(goal.target),
        "unit": goal.unit,
    }


def is_newly_completed(goal: Goal) -> bool:
    return progress_ratio(goal) >= 1 and goal.status is not GoalStatus.COMPLETED


class GoalNotifier:
    """Classify goal state into notifications and coach reminders.

    The random source is injectable so variant selection is reproducible in
    tests.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def _notification(
        self,
        goal: Goal,
        *,
        type_: NotificationType,
        title: str,
        message: str,
        now: datetime,
        priority: Optional[NotificationPriority] = None,
        action_required: bool = False,
    ) -> Notification:
        return Notification(
            id=f"notification-{uuid4().hex}",
            type=type_,
            title=title,
            message=message,
            goal_id=goal.id,
            created_at=now,
            priority=priority,
            action_required=action_required,
            action_url=templates.GOALS_ACTION_URL,
        )

    def _pick(self, variants: Sequence[tuple[str, str]]) -> tuple[str, str]:
        return variants[self.rng.randrange(len(variants))]

    def generate_goal_notification(self, goal: Goal, *, now: Optional[datetime] = None) -> Notification:
        """Return the single notification that best describes the goal right now."""

        now_ts = now or datetime.now(timezone.utc)
        fields = _template_fields(goal, now=now_ts)
        percent = progress_percent(goal)
        days = days_until_deadline(goal, now=now_ts)

        if is_newly_completed(goal):
            return self._notification(
                goal,
                type_=NotificationType.ACHIEVEMENT,
                title=templates.ACHIEVEMENT_TITLE.format(**fields),
                message=templates.ACHIEVEMENT_MESSAGE.format(**fields),
                priority=NotificationPriority.CRITICAL,
                now=now_ts,
            )

        if needs_urgent_attention(goal, now=now_ts):
            reason = templates.URGENT_REASON_STUCK if is_stuck(goal, now=now_ts) else templates.URGENT_REASON_LOW_PROGRESS
            return self._notification(
                goal,
                type_=NotificationType.WARNING,
                title=templates.URGENT_TITLE.format(**fields),
                message=templates.URGENT_MESSAGE.format(reason=reason, **fields),
                priority=NotificationPriority.CRITICAL,
                action_required=True,
                now=now_ts,
            )

        if percent >= NEAR_COMPLETION_PERCENT:
            type_ = NotificationType.MOTIVATION
            title, message = self._pick(templates.NEAR_COMPLETION_VARIANTS)
        elif days is not None and days <= DEADLINE_WARNING_DAYS:
            type_ = NotificationType.WARNING
            title, message = templates.DEADLINE_TITLE, templates.DEADLINE_MESSAGE
        elif percent < LOW_PROGRESS_PERCENT:
            type_ = NotificationType.MOTIVATION
            title, message = self._pick(templates.GETTING_STARTED_VARIANTS)
        else:
            type_ = NotificationType.REMINDER
            title, message = self._pick(templates.ROUTINE_VARIANTS)

        return self._notification(
            goal,
            type_=type_,
            title=title.format(**fields),
            message=message.format(**fields),
            action_required=type_ in (NotificationType.WARNING, NotificationType.REMINDER),
            now=now_ts,
        )

    def generate_new_goal_notification(self, goal: Goal, *, now: Optional[datetime] = None) -> Notification:
        now_ts = now or datetime.now(timezone.utc)
        fields = _template_fields(goal, now=now_ts)
        return self._notification(
            goal,
            type_=NotificationType.INFO,
            title=templates.NEW_GOAL_TITLE.format(**fields),
            message=templates.NEW_GOAL_MESSAGE.format(**fields),
            priority=NotificationPriority.HIGH,
            now=now_ts,
        )

    def generate_scheduled_reminder(self, goal: Goal, *, now: Optional[datetime] = None) -> CoachReminder:
        now_ts = now or datetime.now(timezone.utc)

        if needs_urgent_attention(goal, now=now_ts):
            motivation, variants = MotivationType.URGENT, templates.REMINDER_URGENT_VARIANTS
        elif is_stuck(goal, now=now_ts):
            motivation, variants = MotivationType.CHALLENGE, templates.REMINDER_CHALLENGE_VARIANTS
        elif progress_percent(goal) >= NEAR_COMPLETION_PERCENT:
            motivation, variants = MotivationType.CELEBRATION, templates.REMINDER_CELEBRATION_VARIANTS
        else:
            motivation, variants = MotivationType.ENCOURAGEMENT, templates.REMINDER_ENCOURAGEMENT_VARIANTS

        message = variants[self.rng.randrange(len(variants))].format(title=goal.title)
        LOGGER.debug("Recordatorio de tipo %s para la meta '%s'", motivation.value, goal.title)
        return CoachReminder(
            id=f"reminder-{uuid4().hex}",
            goal_id=goal.id,
            message=message,
            scheduled_for=now_ts + SCHEDULED_REMINDER_DELAY,
            motivation_type=motivation,
        )

    def check_completed_goals(self, goals: Iterable[Goal], *, now: Optional[datetime] = None) -> list[Notification]:
        """Achievement notifications for goals that reached their target but are not marked completed."""

        return [self.generate_goal_notification(goal, now=now) for goal in goals if is_newly_completed(goal)]

    def check_stuck_goals(self, goals: Iterable[Goal], *, now: Optional[datetime] = None) -> list[Notification]:
        return [
            self.generate_goal_notification(goal, now=now)
            for goal in goals
            if needs_urgent_attention(goal, now=now)
        ]

    def calculate_next_reminder(self, goal: Goal, *, now: Optional[datetime] = None) -> datetime:
        now_ts = now or datetime.now(timezone.utc)
        if needs_urgent_attention(goal, now=now_ts):
            return now_ts + URGENT_REMINDER_INTERVAL
        if is_stuck(goal, now=now_ts):
            return now_ts + STUCK_REMINDER_INTERVAL
        return now_ts + goal.reminder_frequency.interval


__all__ = ["GoalNotifier", "is_newly_completed"]
