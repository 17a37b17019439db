from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import ValidationError

from brutalytics.constants import NOTIFICATION_RETENTION_DAYS, NOTIFICATIONS_STORAGE_KEY
from brutalytics.models import Notification
from brutalytics.storage import LocalStorage

LOGGER = logging.getLogger(__name__)


def _normalize(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class NotificationStore:
    """Newest-first list of notifications persisted under a single key.

    Loads on construction and saves after every mutation.
    """

    def __init__(self, storage: LocalStorage, *, key: str = NOTIFICATIONS_STORAGE_KEY) -> None:
        self.storage = storage
        self.key = key
        self._notifications: list[Notification] = []
        self._load()

    def _load(self) -> None:
        raw = self.storage.get_item(self.key)
        if not raw:
            return

        try:
            entries = json.loads(raw)
        except ValueError as exc:
            LOGGER.warning("Notificaciones guardadas ilegibles, se descartan: %s", exc)
            return

        if not isinstance(entries, list):
            LOGGER.warning("Formato inesperado de notificaciones guardadas: %s", type(entries).__name__)
            return

        for entry in entries:
            try:
                notification = Notification.model_validate(entry)
            except ValidationError as exc:
                LOGGER.warning("Notificación guardada inválida omitida: %s", exc.errors(include_url=False))
                continue
            if not self._contains(notification.id):
                self._notifications.append(notification)

    def _save(self) -> None:
        payload = [notification.model_dump(mode="json") for notification in self._notifications]
        self.storage.set_item(self.key, json.dumps(payload, ensure_ascii=False))

    def _contains(self, notification_id: str) -> bool:
        return any(item.id == notification_id for item in self._notifications)

    def add_notification(self, notification: Notification) -> bool:
        """Prepend ``notification``; returns ``False`` when its id is already stored."""

        if self._contains(notification.id):
            LOGGER.debug("Notificación duplicada ignorada: %s", notification.id)
            return False
        self._notifications.insert(0, notification)
        self._save()
        return True

    def mark_as_read(self, notification_id: str) -> None:
        changed = False
        updated: list[Notification] = []
        for item in self._notifications:
            if item.id == notification_id and not item.is_read:
                item = item.model_copy(update={"is_read": True})
                changed = True
            updated.append(item)
        if changed:
            self._notifications = updated
            self._save()

    def mark_all_as_read(self) -> None:
        if all(item.is_read for item in self._notifications):
            return
        self._notifications = [item.model_copy(update={"is_read": True}) for item in self._notifications]
        self._save()

    def delete_notification(self, notification_id: str) -> None:
        self._notifications = [item for item in self._notifications if item.id != notification_id]
        self._save()

    def get_all_notifications(self) -> list[Notification]:
        return list(self._notifications)

    def get_unread_notifications(self) -> list[Notification]:
        return [item for item in self._notifications if not item.is_read]

    def unread_count(self) -> int:
        return len(self.get_unread_notifications())

    def cleanup_old_notifications(self, *, now: Optional[datetime] = None) -> int:
        """Drop notifications created more than the retention window ago; returns how many."""

        now_ts = _normalize(now or datetime.now(timezone.utc))
        cutoff = now_ts - timedelta(days=NOTIFICATION_RETENTION_DAYS)
        kept = [item for item in self._notifications if _normalize(item.created_at) > cutoff]
        removed = len(self._notifications) - len(kept)
        self._notifications = kept
        self._save()
        if removed:
            LOGGER.info("Eliminadas %s notificaciones antiguas.", removed)
        return removed


__all__ = ["NotificationStore"]
