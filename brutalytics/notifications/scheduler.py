from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional, Sequence

from brutalytics.constants import REMINDER_POLL_INTERVAL_SECONDS, URGENT_POLL_INTERVAL_SECONDS
from brutalytics.goals import sync_status
from brutalytics.models import Goal, Notification, NotificationType
from brutalytics.notifications.notifier import GoalNotifier, is_newly_completed
from brutalytics.notifications.store import NotificationStore

LOGGER = logging.getLogger(__name__)


def _normalize(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@dataclass
class NotificationSchedulerConfig:
    reminder_interval_seconds: int = REMINDER_POLL_INTERVAL_SECONDS
    urgent_interval_seconds: int = URGENT_POLL_INTERVAL_SECONDS
    sleep_seconds: int = 30


class NotificationScheduler:
    """Run the periodic reminder and urgent-goal passes over the stored goals."""

    def __init__(
        self,
        notifier: GoalNotifier,
        store: NotificationStore,
        *,
        load_goals: Callable[[], Iterable[Goal]],
        save_goals: Callable[[Sequence[Goal]], None],
        config: Optional[NotificationSchedulerConfig] = None,
    ) -> None:
        self.notifier = notifier
        self.store = store
        self.load_goals = load_goals
        self.save_goals = save_goals
        self.config = config or NotificationSchedulerConfig()
        self.last_reminder_check: Optional[datetime] = None
        self.last_urgent_check: Optional[datetime] = None

    def check_scheduled_reminders(self, *, now: Optional[datetime] = None) -> list[Notification]:
        """Notify every goal whose reminder is due and reschedule it."""

        now_ts = _normalize(now or datetime.now(timezone.utc))
        goals = list(self.load_goals())
        created: list[Notification] = []
        persisted: list[Goal] = []

        for goal in goals:
            if _normalize(goal.next_reminder) > now_ts:
                persisted.append(goal)
                continue

            notification = self.notifier.generate_goal_notification(goal, now=now_ts)
            self.store.add_notification(notification)
            created.append(notification)
            next_reminder = self.notifier.calculate_next_reminder(goal, now=now_ts)
            LOGGER.info("Recordatorio para la meta '%s'; siguiente: %s", goal.title, next_reminder.isoformat())
            if notification.type is NotificationType.ACHIEVEMENT:
                goal = sync_status(goal)
            persisted.append(goal.model_copy(update={"next_reminder": next_reminder}))

        if created:
            self.save_goals(persisted)
        return created

    def check_urgent_goals(self, *, now: Optional[datetime] = None) -> list[Notification]:
        """Completed and stuck checks, at most one notification per goal.

        Goals that produced an achievement are marked completed afterwards so
        the next pass does not announce them again.
        """

        now_ts = _normalize(now or datetime.now(timezone.utc))
        goals = list(self.load_goals())
        notified: set[int] = set()
        created: list[Notification] = []

        candidates = [
            *self.notifier.check_completed_goals(goals, now=now_ts),
            *self.notifier.check_stuck_goals(goals, now=now_ts),
        ]
        for notification in candidates:
            if notification.goal_id is None or notification.goal_id in notified:
                continue
            notified.add(notification.goal_id)
            self.store.add_notification(notification)
            created.append(notification)

        completed_ids = {goal.id for goal in goals if goal.id in notified and is_newly_completed(goal)}
        if completed_ids:
            self.save_goals([sync_status(goal) if goal.id in completed_ids else goal for goal in goals])
            LOGGER.info("Metas completadas: %s", sorted(completed_ids))
        return created

    def _due(self, last_run: Optional[datetime], interval_seconds: int, now: datetime) -> bool:
        return last_run is None or now - last_run >= timedelta(seconds=interval_seconds)

    def poll_once(self, *, now: Optional[datetime] = None) -> list[Notification]:
        now_ts = _normalize(now or datetime.now(timezone.utc))
        created: list[Notification] = []

        if self._due(self.last_reminder_check, self.config.reminder_interval_seconds, now_ts):
            created.extend(self.check_scheduled_reminders(now=now_ts))
            self.last_reminder_check = now_ts

        if self._due(self.last_urgent_check, self.config.urgent_interval_seconds, now_ts):
            created.extend(self.check_urgent_goals(now=now_ts))
            self.last_urgent_check = now_ts

        return created

    def run(self) -> None:
        """Continuously poll; each pass is throttled by its own interval."""

        while True:
            self.poll_once()
            time.sleep(self.config.sleep_seconds)


__all__ = ["NotificationScheduler", "NotificationSchedulerConfig"]
