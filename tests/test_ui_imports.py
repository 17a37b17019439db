from __future__ import annotations

import importlib

import pytest


@pytest.mark.parametrize(
    ("module_name", "attribute"),
    [
        ("brutalytics.ui.chat", "render_chat"),
        ("brutalytics.ui.dashboard", "render_dashboard"),
        ("brutalytics.ui.goals", "render_goals_view"),
        ("brutalytics.ui.goals", "render_micrometas_view"),
        ("brutalytics.ui.library", "render_resources_view"),
        ("brutalytics.ui.notifications", "render_notification_panel"),
        ("app", "main"),
    ],
)
def test_views_are_importable(module_name: str, attribute: str) -> None:
    module = importlib.import_module(module_name)

    assert callable(getattr(module, attribute))
