from __future__ import annotations

import streamlit as st

from brutalytics.models import Notification
from brutalytics.notifications import NotificationStore
from brutalytics.ui.common import NOTIFICATION_PRIORITY_ICONS


def _render_notification(notification: Notification, store: NotificationStore) -> None:
    icon = NOTIFICATION_PRIORITY_ICONS.get(notification.priority, "🔔") if notification.priority else "🔔"
    with st.container(border=True):
        weight = "**" if not notification.is_read else ""
        st.markdown(f"{icon} {weight}{notification.title}{weight}")
        st.caption(notification.created_at.strftime("%d/%m/%Y %H:%M"))
        st.write(notification.message)
        if notification.action_required:
            st.caption("Requiere acción")

        columns = st.columns(2)
        if not notification.is_read and columns[0].button("Leída", key=f"read_{notification.id}"):
            store.mark_as_read(notification.id)
            st.rerun()
        if columns[1].button("Eliminar", key=f"delete_{notification.id}"):
            store.delete_notification(notification.id)
            st.rerun()


def render_notification_panel(store: NotificationStore) -> None:
    unread = store.unread_count()
    with st.sidebar.expander(f"🔔 Notificaciones ({unread})", expanded=False):
        notifications = store.get_all_notifications()
        if not notifications:
            st.caption("Sin notificaciones.")
            return

        if unread and st.button("Marcar todas como leídas", key="notifications_read_all"):
            store.mark_all_as_read()
            st.rerun()

        for notification in notifications:
            _render_notification(notification, store)


def toast_new_notifications(notifications: list[Notification]) -> None:
    for notification in notifications:
        icon = NOTIFICATION_PRIORITY_ICONS.get(notification.priority, "🔔") if notification.priority else "🔔"
        st.toast(notification.title, icon=icon)


__all__ = ["render_notification_panel", "toast_new_notifications"]
