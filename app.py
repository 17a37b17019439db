from __future__ import annotations

import logging

import streamlit as st

from brutalytics.constants import SS_SERVICES, SS_STORAGE_LOADED
from brutalytics.services import AppServices, build_services
from brutalytics.state import (
    configure_storage,
    get_goals,
    get_transcript,
    init_state,
    load_persisted_state,
    save_goals,
)
from brutalytics.storage import FileStorageBackend
from brutalytics.ui.chat import render_chat
from brutalytics.ui.common import _inject_dark_theme_styles
from brutalytics.ui.dashboard import render_dashboard
from brutalytics.ui.goals import render_goals_view, render_micrometas_view
from brutalytics.ui.library import render_profile_view, render_resources_view
from brutalytics.ui.notifications import render_notification_panel, toast_new_notifications

LOGGER = logging.getLogger(__name__)

PAGES: tuple[tuple[str, str], ...] = (
    ("coach", "🧠 Coach"),
    ("dashboard", "📊 Dashboard"),
    ("metas", "🎯 Metas"),
    ("micrometas", "🧩 Micrometas"),
    ("recursos", "📚 Recursos"),
    ("perfil", "👤 Perfil"),
)


def _bootstrap_storage() -> FileStorageBackend:
    backend = FileStorageBackend()
    configure_storage(backend)
    if not st.session_state.get(SS_STORAGE_LOADED, False):
        load_persisted_state()
        st.session_state[SS_STORAGE_LOADED] = True
    return backend


def _get_services() -> AppServices:
    services = st.session_state.get(SS_SERVICES)
    if isinstance(services, AppServices):
        return services

    services = build_services(load_goals=get_goals, save_goals=save_goals, transcript=get_transcript())
    services.store.cleanup_old_notifications()
    st.session_state[SS_SERVICES] = services
    return services


def render_navigation() -> str:
    labels = dict(PAGES)
    return st.sidebar.radio(
        "Navegación",
        options=[key for key, _ in PAGES],
        format_func=lambda key: labels[key],
        key="navigation",
    )


def main() -> None:
    st.set_page_config(
        page_title="Brutalytics",
        page_icon="🧠",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    _inject_dark_theme_styles()
    _bootstrap_storage()
    init_state()

    services = _get_services()
    toast_new_notifications(services.scheduler.poll_once())

    st.sidebar.title("Brutalytics")
    selection = render_navigation()
    render_notification_panel(services.store)

    if selection == "coach":
        render_chat(services)
    elif selection == "dashboard":
        render_dashboard()
    elif selection == "metas":
        render_goals_view(services)
    elif selection == "micrometas":
        render_micrometas_view()
    elif selection == "recursos":
        render_resources_view()
    else:
        render_profile_view()


if __name__ == "__main__":
    main()
