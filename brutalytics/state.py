from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence

import streamlit as st
from pydantic import ValidationError

from brutalytics.constants import (
    CONVERSATION_HISTORY_LIMIT,
    SS_CONVERSATION,
    SS_CONVERTED_DIAGNOSES,
    SS_GOALS,
    SS_PROFILE,
    cap_list_tail,
)
from brutalytics.models import ConversationMessage, Goal, StrategicProfile
from brutalytics.resources import initial_goals
from brutalytics.state_persistence import (
    configure_storage,
    load_persisted_state,
    persist_state,
)

LOGGER = logging.getLogger(__name__)

__all__ = [
    "configure_storage",
    "get_converted_diagnoses",
    "get_goals",
    "get_profile",
    "get_transcript",
    "init_state",
    "load_persisted_state",
    "mark_diagnosis_converted",
    "persist_state",
    "reset_state",
    "save_goals",
    "save_profile",
    "save_transcript",
]


def _coerce_goal(raw: Any) -> Optional[Goal]:
    if isinstance(raw, Goal):
        return raw
    try:
        return Goal.model_validate(raw)
    except ValidationError as exc:
        LOGGER.warning("Meta guardada inválida omitida: %s", exc.errors(include_url=False))
        return None


def _coerce_message(raw: Any) -> Optional[ConversationMessage]:
    if isinstance(raw, ConversationMessage):
        return raw
    try:
        return ConversationMessage.model_validate(raw)
    except ValidationError as exc:
        LOGGER.warning("Mensaje guardado inválido omitido: %s", exc.errors(include_url=False))
        return None


def init_state(*, now: Optional[datetime] = None) -> None:
    """Initialize all required session state keys if they are missing.

    A first run is seeded with the example goals so the dashboard is not empty.
    """

    if SS_GOALS not in st.session_state:
        seeded = initial_goals(now or datetime.now(timezone.utc))
        st.session_state[SS_GOALS] = [goal.model_dump() for goal in seeded]

    if SS_CONVERSATION not in st.session_state:
        st.session_state[SS_CONVERSATION] = []

    if SS_PROFILE not in st.session_state:
        st.session_state[SS_PROFILE] = StrategicProfile().model_dump()

    if SS_CONVERTED_DIAGNOSES not in st.session_state:
        st.session_state[SS_CONVERTED_DIAGNOSES] = []

    persist_state()


def get_goals() -> List[Goal]:
    """Return goals from session state as Goal models, skipping corrupt entries."""

    raw_goals: Iterable[Any] = st.session_state.get(SS_GOALS, [])
    goals: List[Goal] = []
    for raw in raw_goals:
        goal = _coerce_goal(raw)
        if goal is not None:
            goals.append(goal)
    return goals


def save_goals(goals: Sequence[Goal]) -> None:
    st.session_state[SS_GOALS] = [goal.model_dump() for goal in goals]
    persist_state()


def get_transcript() -> List[ConversationMessage]:
    messages: List[ConversationMessage] = []
    for raw in st.session_state.get(SS_CONVERSATION, []):
        message = _coerce_message(raw)
        if message is not None:
            messages.append(message)
    return messages


def save_transcript(messages: Sequence[ConversationMessage]) -> None:
    capped = cap_list_tail(list(messages), CONVERSATION_HISTORY_LIMIT)
    st.session_state[SS_CONVERSATION] = [message.model_dump() for message in capped]
    persist_state()


def get_profile() -> StrategicProfile:
    raw = st.session_state.get(SS_PROFILE, {})
    try:
        return StrategicProfile.model_validate(raw)
    except ValidationError:
        LOGGER.warning("Perfil guardado inválido; se usa uno vacío.")
        return StrategicProfile()


def save_profile(profile: StrategicProfile) -> None:
    st.session_state[SS_PROFILE] = profile.model_dump()
    persist_state()


def get_converted_diagnoses() -> set[str]:
    return {str(fingerprint) for fingerprint in st.session_state.get(SS_CONVERTED_DIAGNOSES, [])}


def mark_diagnosis_converted(fingerprint: str) -> None:
    """Remember that a diagnosis already produced a goal."""

    converted = get_converted_diagnoses()
    if fingerprint in converted:
        return
    st.session_state[SS_CONVERTED_DIAGNOSES] = sorted(converted | {fingerprint})
    persist_state()


def reset_state() -> None:
    """Clear managed keys and restore defaults."""

    for key in (SS_GOALS, SS_CONVERSATION, SS_PROFILE, SS_CONVERTED_DIAGNOSES):
        if key in st.session_state:
            del st.session_state[key]
    init_state()
