from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from brutalytics.coach.prompts import build_system_prompt
from brutalytics.resources import RESOURCES, find_resource, initial_goals, resource_titles


def test_resource_titles_follow_library_order() -> None:
    assert resource_titles() == [resource.title for resource in RESOURCES]
    assert len(resource_titles()) == 4


@pytest.mark.parametrize("title", ["Matriz de Eisenhower", "  matriz de eisenhower  ", "MATRIZ DE EISENHOWER"])
def test_find_resource_ignores_case_and_whitespace(title: str) -> None:
    resource = find_resource(title)

    assert resource is not None
    assert resource.id == 1


@pytest.mark.parametrize("title", [None, "", "Recurso inventado"])
def test_unknown_resource_is_none(title: str | None) -> None:
    assert find_resource(title) is None


def test_system_prompt_lists_every_resource() -> None:
    prompt = build_system_prompt(resource_titles())

    for title in resource_titles():
        assert title in prompt


def test_initial_goals_are_scheduled_a_week_out(now: datetime) -> None:
    goals = initial_goals(now)

    assert {goal.title for goal in goals} == {"Cerrar Ronda Serie A", "Incrementar MRR"}
    assert all(goal.next_reminder == now + timedelta(days=7) for goal in goals)
    assert all(len(goal.progress_history) == 1 for goal in goals)
