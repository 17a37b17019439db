from brutalytics.notifications.notifier import GoalNotifier
from brutalytics.notifications.scheduler import NotificationScheduler, NotificationSchedulerConfig
from brutalytics.notifications.store import NotificationStore

__all__ = ["GoalNotifier", "NotificationScheduler", "NotificationSchedulerConfig", "NotificationStore"]
