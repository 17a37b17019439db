"""Resource library and strategic profile views."""

from __future__ import annotations

from datetime import datetime, timezone

import streamlit as st

from brutalytics.resources import RESOURCES
from brutalytics.state import get_profile, save_profile


def render_resources_view() -> None:
    st.header("Arsenal Estratégico")
    st.caption("Herramientas que el coach puede recomendarte durante el diagnóstico.")
    columns = st.columns(2)
    for index, resource in enumerate(RESOURCES):
        with columns[index % 2]:
            with st.container(border=True):
                st.subheader(f"{resource.icon} {resource.title}")
                st.caption(resource.subtitle)
                st.write(resource.description)


def render_profile_view() -> None:
    st.header("Perfil Estratégico")
    profile = get_profile()
    with st.form("profile_form"):
        mission = st.text_area(
            "Misión personal",
            value=profile.mission,
            placeholder="¿Cuál es tu propósito fundamental?",
        )
        values = st.text_input(
            "Valores fundamentales",
            value=profile.values,
            placeholder="Ej: Integridad, Audacia, Enfoque Implacable",
        )
        submitted = st.form_submit_button("Guardar perfil")

    if submitted:
        save_profile(
            profile.model_copy(
                update={"mission": mission.strip(), "values": values.strip(), "updated_at": datetime.now(timezone.utc)}
            )
        )
        st.success("Perfil guardado.")


__all__ = ["render_profile_view", "render_resources_view"]
