from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import streamlit as st

from brutalytics.goals import days_until_deadline, format_amount, progress_ratio
from brutalytics.models import Goal, Micrometa, MicrometaPriority, NotificationPriority

PRIORITY_COLORS = {
    MicrometaPriority.HIGH: "#E4572E",
    MicrometaPriority.MEDIUM: "#F2C14E",
    MicrometaPriority.LOW: "#7D8CA3",
}

NOTIFICATION_PRIORITY_ICONS = {
    NotificationPriority.CRITICAL: "🚨",
    NotificationPriority.HIGH: "🔥",
    NotificationPriority.MEDIUM: "🔔",
    NotificationPriority.LOW: "💬",
}


def priority_badge(priority: MicrometaPriority) -> str:
    return f"<span style='color:{PRIORITY_COLORS[priority]}; font-weight:600'>{priority.label}</span>"


def format_deadline(item: Goal | Micrometa, *, now: Optional[datetime] = None) -> str:
    days = days_until_deadline(item, now=now)
    if item.deadline is None or days is None:
        return "Sin fecha límite"
    deadline = item.deadline if item.deadline.tzinfo else item.deadline.replace(tzinfo=timezone.utc)
    label = deadline.strftime("%d/%m/%Y")
    if days < 0:
        return f"{label} (vencida hace {-days} días)"
    if days == 0:
        return f"{label} (vence hoy)"
    return f"{label} ({days} días restantes)"


def render_progress(item: Goal | Micrometa) -> None:
    ratio = progress_ratio(item)
    label = f"{format_amount(item.current)} / {format_amount(item.target)} {item.unit}".strip()
    st.progress(min(max(ratio, 0.0), 1.0), text=f"{label} ({ratio * 100:.1f}%)")


def _inject_dark_theme_styles() -> None:
    st.markdown(
        """
        <style>
            :root {
                --brutal-primary: #e4572e;
                --brutal-surface: #1a1a22;
                --brutal-surface-alt: #121218;
                --brutal-border: #34343f;
                --brutal-text: #f1f1f1;
                --brutal-muted: #a9a9b8;
            }

            .stApp {
                background: linear-gradient(160deg, #15151c 0%, #0f0f14 60%, #0b0b0f 100%);
                color: var(--brutal-text);
            }

            .block-container {
                padding-top: 1.2rem;
                max-width: 1200px;
            }

            h1, h2, h3, h4, h5, h6, label, p {
                color: var(--brutal-text);
            }

            div[data-testid="stMetric"] {
                background: linear-gradient(145deg, var(--brutal-surface), var(--brutal-surface-alt));
                border: 1px solid var(--brutal-border);
                border-radius: 14px;
                padding: 12px;
            }

            div[data-testid="stVerticalBlockBorderWrapper"] {
                border: 1px solid var(--brutal-border);
                background: linear-gradient(145deg, var(--brutal-surface), var(--brutal-surface-alt));
                border-radius: 14px;
            }

            .coach-label {
                color: var(--brutal-primary);
                font-weight: 700;
                text-transform: uppercase;
                letter-spacing: 0.05em;
                font-size: 0.8rem;
            }

            .goal-meta {
                color: var(--brutal-muted);
                font-size: 0.9rem;
            }

            .stButton > button {
                border-radius: 10px;
                border: 1px solid var(--brutal-primary);
            }
        </style>
        """,
        unsafe_allow_html=True,
    )


__all__ = [
    "NOTIFICATION_PRIORITY_ICONS",
    "format_deadline",
    "priority_badge",
    "render_progress",
]
