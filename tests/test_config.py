from __future__ import annotations

import pytest

from brutalytics.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, PLACEHOLDER_API_KEY, CoachSettings


def test_from_env_reads_only_the_given_mapping() -> None:
    settings = CoachSettings.from_env(
        {
            "GEMINI_API_KEY": "secret",
            "GEMINI_MODEL": "gemini-pro",
            "GEMINI_TIMEOUT_SECONDS": "12.5",
        }
    )

    assert settings.api_key == "secret"
    assert settings.has_credential
    assert settings.timeout_seconds == 12.5
    assert settings.endpoint == f"{DEFAULT_BASE_URL}/models/gemini-pro:generateContent"


def test_missing_key_is_a_valid_state() -> None:
    settings = CoachSettings.from_env({})

    assert settings.api_key == ""
    assert not settings.has_credential
    assert settings.timeout_seconds == DEFAULT_TIMEOUT_SECONDS


@pytest.mark.parametrize("api_key", ["  ", PLACEHOLDER_API_KEY, f" {PLACEHOLDER_API_KEY} "])
def test_placeholder_or_blank_key_has_no_credential(api_key: str) -> None:
    assert not CoachSettings(api_key=api_key).has_credential


def test_invalid_timeout_falls_back_and_base_url_is_trimmed() -> None:
    settings = CoachSettings.from_env(
        {"GEMINI_TIMEOUT_SECONDS": "soon", "GEMINI_BASE_URL": "http://localhost:8080/v1/"}
    )

    assert settings.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
    assert settings.endpoint.startswith("http://localhost:8080/v1/models/")
