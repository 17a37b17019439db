from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

import httpx

from brutalytics.coach import ChatSession, ResponseInterpreter
from brutalytics.config import CoachSettings
from brutalytics.llm import GeminiClient
from brutalytics.models import ConversationMessage, Goal
from brutalytics.notifications import GoalNotifier, NotificationScheduler, NotificationStore
from brutalytics.storage import LOCAL_STORAGE_FILENAME, FileStorageBackend, LocalStorage

LOGGER = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Explicitly constructed collaborators shared by the views of one session."""

    settings: CoachSettings
    interpreter: ResponseInterpreter
    chat: ChatSession
    notifier: GoalNotifier
    store: NotificationStore
    scheduler: NotificationScheduler

    def close(self) -> None:
        self.interpreter.client.close()


def build_services(
    *,
    load_goals: Callable[[], Iterable[Goal]],
    save_goals: Callable[[Sequence[Goal]], None],
    transcript: Iterable[ConversationMessage] = (),
    settings: Optional[CoachSettings] = None,
    local_storage: Optional[LocalStorage] = None,
    http_client: Optional[httpx.Client] = None,
    rng: Optional[random.Random] = None,
) -> AppServices:
    resolved_settings = settings or CoachSettings.from_env()
    storage = local_storage or LocalStorage(FileStorageBackend(filename=LOCAL_STORAGE_FILENAME))

    interpreter = ResponseInterpreter(GeminiClient(resolved_settings, client=http_client))
    notifier = GoalNotifier(rng=rng)
    store = NotificationStore(storage)
    scheduler = NotificationScheduler(notifier, store, load_goals=load_goals, save_goals=save_goals)

    if not resolved_settings.has_credential:
        LOGGER.info("GEMINI_API_KEY no configurada; el coach funcionará en modo sin conexión.")

    return AppServices(
        settings=resolved_settings,
        interpreter=interpreter,
        chat=ChatSession(interpreter, transcript),
        notifier=notifier,
        store=store,
        scheduler=scheduler,
    )


__all__ = ["AppServices", "build_services"]
