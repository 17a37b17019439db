from __future__ import annotations

import html
import logging
from datetime import date, datetime, time, timezone
from typing import Optional

import streamlit as st

from brutalytics.charts import build_goal_progress_figure
from brutalytics.goals import (
    create_goal,
    micrometa_completion_ratio,
    record_micrometa_progress,
    record_progress,
    replace_goal,
    update_micrometa,
)
from brutalytics.models import Goal, GoalStatus, Micrometa, ReminderFrequency
from brutalytics.services import AppServices
from brutalytics.state import get_goals, save_goals
from brutalytics.ui.common import format_deadline, priority_badge, render_progress

LOGGER = logging.getLogger(__name__)


def _deadline_from(value: Optional[date]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.combine(value, time.max).replace(tzinfo=timezone.utc)


def _render_create_form(services: AppServices, goals: list[Goal]) -> None:
    with st.expander("➕ Nueva meta", expanded=not goals):
        with st.form("new_goal_form", clear_on_submit=True):
            title = st.text_input("Título", placeholder="Ej: Lanzar mi curso online")
            metric = st.text_input("Métrica", placeholder="Ej: Ventas")
            columns = st.columns(2)
            target = columns[0].number_input("Objetivo", min_value=0.0, value=100.0, step=1.0)
            unit = columns[1].text_input("Unidad", placeholder="Ej: USD")
            deadline = st.date_input("Fecha límite", value=None)
            frequency = st.selectbox(
                "Recordatorios",
                options=list(ReminderFrequency),
                index=1,
                format_func=lambda option: option.label,
            )
            submitted = st.form_submit_button("Crear meta")

        if not submitted:
            return

        try:
            goal = create_goal(
                title=title,
                metric=metric,
                target=float(target),
                unit=unit,
                deadline=_deadline_from(deadline),
                reminder_frequency=frequency,
                existing=goals,
            )
        except ValueError as exc:
            st.error(str(exc))
            return

        save_goals([*goals, goal])
        services.store.add_notification(services.notifier.generate_new_goal_notification(goal))
        st.toast(f"Meta creada: {goal.title}", icon="🎯")
        st.rerun()


def _render_goal_card(goal: Goal, services: AppServices, goals: list[Goal]) -> None:
    with st.container(border=True):
        badge = "✅" if goal.status is GoalStatus.COMPLETED else "⏳"
        st.subheader(f"{badge} {goal.title}")
        st.markdown(
            f"<div class='goal-meta'>{html.escape(goal.metric)} · {format_deadline(goal)} · "
            f"Recordatorio {goal.reminder_frequency.label.lower()}</div>",
            unsafe_allow_html=True,
        )
        render_progress(goal)

        with st.form(f"goal_progress_{goal.id}", clear_on_submit=True):
            columns = st.columns([2, 3, 1])
            value = columns[0].number_input("Valor actual", min_value=0.0, value=float(goal.current), key=f"value_{goal.id}")
            notes = columns[1].text_input("Notas", key=f"notes_{goal.id}")
            submitted = columns[2].form_submit_button("Guardar")

        if submitted:
            updated = record_progress(goal, float(value), notes=notes)
            save_goals(replace_goal(goals, updated))
            created = services.scheduler.check_urgent_goals()
            for notification in created:
                st.toast(notification.title, icon="🔔")
            LOGGER.info("Progreso registrado para '%s': %s", goal.title, value)
            st.rerun()

        if goal.progress_history:
            with st.expander("Historial"):
                st.plotly_chart(build_goal_progress_figure(goal), use_container_width=True)


def render_goals_view(services: AppServices) -> None:
    st.header("Metas")
    goals = get_goals()
    _render_create_form(services, goals)

    if not goals:
        st.info("Aún no tienes metas. Crea una o pide un diagnóstico al coach.")
        return

    for goal in goals:
        _render_goal_card(goal, services, goals)


def _render_micrometa(micrometa: Micrometa, goal: Goal, goals: list[Goal]) -> None:
    with st.container(border=True):
        st.markdown(
            f"**{html.escape(micrometa.title)}** · {priority_badge(micrometa.priority)}",
            unsafe_allow_html=True,
        )
        if micrometa.description and micrometa.description != micrometa.title:
            st.caption(micrometa.description)
        st.markdown(f"<div class='goal-meta'>{format_deadline(micrometa)}</div>", unsafe_allow_html=True)
        render_progress(micrometa)

        with st.expander("Registrar avance"):
            with st.form(f"micrometa_progress_{micrometa.id}", clear_on_submit=True):
                value = st.slider(
                    "Avance",
                    min_value=0.0,
                    max_value=float(micrometa.target),
                    value=float(min(micrometa.current, micrometa.target)),
                )
                notes = st.text_area("Notas")
                evidence = st.text_input("Evidencia")
                links = st.text_area("Enlaces (uno por línea)")
                submitted = st.form_submit_button("Guardar avance")

        if submitted:
            updated = record_micrometa_progress(
                micrometa,
                float(value),
                notes=notes,
                evidence=evidence,
                links=links.splitlines(),
            )
            save_goals(replace_goal(goals, update_micrometa(goal, updated)))
            st.rerun()


def render_micrometas_view() -> None:
    st.header("Micrometas")
    all_goals = get_goals()
    goals = [goal for goal in all_goals if goal.micrometas]
    if not goals:
        st.info("Las micrometas se crean a partir del plan de un diagnóstico del coach.")
        return

    for goal in goals:
        st.subheader(goal.title)
        st.caption(f"{micrometa_completion_ratio(goal) * 100:.0f}% de micrometas completadas")
        for micrometa in goal.micrometas:
            _render_micrometa(micrometa, goal, all_goals)


__all__ = ["render_goals_view", "render_micrometas_view"]
