from __future__ import annotations

import plotly.graph_objects as go

from brutalytics.dashboard import GoalsSummary
from brutalytics.goals import format_amount
from brutalytics.models import Goal

PRIMARY_COLOR = "#E4572E"
COMPLETED_COLOR = "#2FBF71"
TARGET_COLOR = "#F2C14E"
FONT_COLOR = "#F1F1F1"
GRID_COLOR = "#3A3A46"


def _apply_dark_theme(figure: go.Figure) -> go.Figure:
    figure.update_layout(
        template="plotly_dark",
        font=dict(color=FONT_COLOR),
        plot_bgcolor="rgba(0,0,0,0)",
        paper_bgcolor="rgba(0,0,0,0)",
        xaxis=dict(gridcolor=GRID_COLOR, zerolinecolor=GRID_COLOR),
        yaxis=dict(gridcolor=GRID_COLOR, zerolinecolor=GRID_COLOR),
    )
    return figure


def build_goal_status_figure(summary: GoalsSummary) -> go.Figure:
    """Donut with completed vs. in-progress goals."""

    pie = go.Pie(
        labels=["Completadas", "En Progreso"],
        values=[summary.completed, summary.in_progress],
        hole=0.6,
        marker=dict(colors=[COMPLETED_COLOR, PRIMARY_COLOR]),
        textinfo="label+value",
        sort=False,
    )
    figure = go.Figure(data=[pie])
    figure.update_layout(
        title_text="Estado de tus metas",
        showlegend=False,
        margin=dict(t=60, r=10, b=10, l=10),
        annotations=[dict(text=f"{summary.total}<br>metas", showarrow=False, font=dict(size=18))],
    )
    _apply_dark_theme(figure)
    return figure


def build_goal_progress_figure(goal: Goal) -> go.Figure:
    """Line chart of the recorded progress with the target as a dashed reference."""

    history = sorted(goal.progress_history, key=lambda entry: entry.date)
    dates = [entry.date for entry in history]
    values = [entry.value for entry in history]

    figure = go.Figure(
        data=[
            go.Scatter(
                x=dates,
                y=values,
                mode="lines+markers",
                name=goal.metric,
                line=dict(color=PRIMARY_COLOR, width=3),
                hovertemplate=f"<b>%{{x|%Y-%m-%d}}</b><br>%{{y}} {goal.unit}<extra></extra>",
            )
        ]
    )
    figure.add_hline(
        y=goal.target,
        line_dash="dash",
        line_color=TARGET_COLOR,
        annotation_text=f"Objetivo: {format_amount(goal.target)} {goal.unit}".strip(),
    )
    figure.update_layout(
        title_text=goal.title,
        xaxis_title="Fecha",
        yaxis_title=goal.unit or goal.metric,
        margin=dict(t=60, r=10, b=40, l=10),
        showlegend=False,
    )
    figure.update_yaxes(rangemode="tozero")
    _apply_dark_theme(figure)
    return figure


__all__ = [
    "COMPLETED_COLOR",
    "PRIMARY_COLOR",
    "build_goal_progress_figure",
    "build_goal_status_figure",
]
