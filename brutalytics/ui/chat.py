"""Streamlit view for the coach conversation."""

from __future__ import annotations

import html
import logging
from datetime import datetime, timezone

import streamlit as st

from brutalytics.coach import SessionBusyError, is_offline_response
from brutalytics.coach.session import decode_model_message, diagnosis_fingerprint
from brutalytics.constants import SS_API_STATUS, SS_LAST_REPLY_ERROR
from brutalytics.goal_extraction import extract_goal
from brutalytics.models import CoachResponse, ConnectionStatus, ConversationMessage
from brutalytics.resources import find_resource
from brutalytics.services import AppServices
from brutalytics.state import (
    get_converted_diagnoses,
    get_goals,
    mark_diagnosis_converted,
    save_goals,
    save_transcript,
)

LOGGER = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Soy Brutalytics. No estoy aquí para animarte, estoy aquí para que obtengas resultados. "
    "Cuéntame qué quieres lograr y qué te lo está impidiendo."
)


def _connection_status(services: AppServices) -> ConnectionStatus:
    if SS_API_STATUS not in st.session_state:
        st.session_state[SS_API_STATUS] = services.interpreter.test_connection().value
    return ConnectionStatus(st.session_state[SS_API_STATUS])


def _render_status_banner(services: AppServices) -> None:
    status = _connection_status(services)
    last_error = st.session_state.get(SS_LAST_REPLY_ERROR)

    if status is ConnectionStatus.NO_KEY or last_error == "no-key":
        st.warning(
            "API Key de Gemini no configurada. El coach responde en modo sin conexión. "
            "Configura `GEMINI_API_KEY` en los secretos o el entorno.",
            icon="🔑",
        )
        return

    if status is ConnectionStatus.ERROR or last_error in {"connection", "malformed"}:
        columns = st.columns([4, 1])
        columns[0].error("Error de conexión con la IA. Mostrando respuestas sin conexión.", icon="📡")
        if columns[1].button("Reintentar", key="coach_retry_connection"):
            st.session_state.pop(SS_API_STATUS, None)
            st.session_state.pop(SS_LAST_REPLY_ERROR, None)
            st.rerun()


def _create_goal_from(response: CoachResponse, services: AppServices, *, key: str) -> None:
    if not response.meta:
        return

    st.markdown(f"<span class='coach-label'>Meta</span><br/>{html.escape(response.meta)}", unsafe_allow_html=True)
    if is_offline_response(response):
        return

    fingerprint = diagnosis_fingerprint(response)
    if fingerprint in get_converted_diagnoses():
        st.caption("✅ Meta ya creada a partir de este diagnóstico.")
        return
    if not st.button("🎯 Crear meta", key=key):
        return

    now = datetime.now(timezone.utc)
    goals = get_goals()
    goal = extract_goal(response.meta, response.plan, existing=goals, now=now)
    if goal is None:
        st.info("No pude convertir esta meta en algo medible.")
        return

    save_goals([*goals, goal])
    mark_diagnosis_converted(fingerprint)
    services.store.add_notification(services.notifier.generate_new_goal_notification(goal, now=now))
    LOGGER.info("Meta creada desde diagnóstico: %s (%s)", goal.title, goal.metric)
    st.toast(f"Meta creada: {goal.title}", icon="🎯")
    st.rerun()


def _render_response(response: CoachResponse, services: AppServices, *, index: int) -> None:
    if response.truth:
        st.markdown(
            f"<span class='coach-label'>Verdad dura</span><br/>{html.escape(response.truth)}",
            unsafe_allow_html=True,
        )

    if response.plan:
        st.markdown("<span class='coach-label'>Plan de acción</span>", unsafe_allow_html=True)
        st.markdown("\n".join(f"{position}. {step}" for position, step in enumerate(response.plan, start=1)))

    st.markdown(
        f"<span class='coach-label'>Desafío</span><br/>{html.escape(response.challenge)}",
        unsafe_allow_html=True,
    )

    resource = find_resource(response.suggested_resource)
    if resource is not None:
        with st.expander(f"{resource.icon} Recurso sugerido: {resource.title}"):
            st.caption(resource.subtitle)
            if response.suggestion_context:
                st.write(response.suggestion_context)
            st.write(resource.description)

    if response.is_diagnosis:
        _create_goal_from(response, services, key=f"coach_create_goal_{index}")


def _render_message(message: ConversationMessage, services: AppServices, *, index: int) -> None:
    if message.role == "user":
        with st.chat_message("user"):
            st.write(message.text)
        return

    with st.chat_message("assistant", avatar="🧠"):
        response = decode_model_message(message)
        if response is None:
            st.write(message.text)
        else:
            _render_response(response, services, index=index)


def render_chat(services: AppServices) -> None:
    st.header("Coach Brutalytics")
    _render_status_banner(services)

    chat = services.chat
    if not chat.transcript:
        with st.chat_message("assistant", avatar="🧠"):
            st.write(WELCOME_MESSAGE)

    for index, message in enumerate(chat.transcript):
        _render_message(message, services, index=index)

    columns = st.columns([5, 1])
    if columns[1].button("Reiniciar", key="coach_reset", disabled=chat.busy):
        chat.reset()
        save_transcript(chat.transcript)
        st.rerun()

    prompt = st.chat_input("Escribe tu situación…", disabled=chat.busy)
    if not prompt:
        return

    try:
        with st.spinner("Brutalytics está analizando…"):
            reply = chat.send(prompt)
    except SessionBusyError:
        st.info("Espera a que el coach termine de responder.")
        return
    except ValueError:
        return

    st.session_state[SS_LAST_REPLY_ERROR] = reply.error_kind
    save_transcript(chat.transcript)
    st.rerun()


__all__ = ["render_chat"]
