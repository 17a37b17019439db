from __future__ import annotations

import streamlit as st

from brutalytics.charts import build_goal_status_figure
from brutalytics.dashboard import main_focus_goals, summarize_goals
from brutalytics.state import get_goals
from brutalytics.ui.common import format_deadline, render_progress


def render_dashboard() -> None:
    st.header("Dashboard de Mando")
    goals = get_goals()
    summary = summarize_goals(goals)

    columns = st.columns(4)
    columns[0].metric("Metas", summary.total)
    columns[1].metric("Completadas", summary.completed)
    columns[2].metric("En progreso", summary.in_progress)
    columns[3].metric("Urgentes", summary.urgent)

    if not goals:
        st.info("Todavía no hay metas. Habla con el coach para obtener tu primer diagnóstico.")
        return

    chart_column, focus_column = st.columns([2, 3])
    with chart_column:
        st.plotly_chart(build_goal_status_figure(summary), use_container_width=True)

    with focus_column:
        st.subheader("Foco Principal")
        focus = main_focus_goals(goals)
        if not focus:
            st.success("Todas tus metas están completadas. Es hora de un nuevo desafío.")
        for goal in focus:
            with st.container(border=True):
                st.markdown(f"**{goal.title}**")
                st.markdown(f"<div class='goal-meta'>{format_deadline(goal)}</div>", unsafe_allow_html=True)
                render_progress(goal)


__all__ = ["render_dashboard"]
