from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import streamlit as st
from streamlit.errors import StreamlitSecretNotFoundError

DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT_SECONDS = 30.0
PLACEHOLDER_API_KEY = "tu_api_key_de_gemini_aqui"


def _get_secret(name: str, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    if env is not None:
        return env.get(name) or None

    try:
        value = st.secrets.get(name)
        if value:
            return str(value)
    except StreamlitSecretNotFoundError:
        value = None
    return os.getenv(name)


@dataclass(frozen=True)
class CoachSettings:
    """Connection settings for the text-generation endpoint, read once at startup."""

    api_key: str = ""
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def has_credential(self) -> bool:
        key = self.api_key.strip()
        return bool(key) and key != PLACEHOLDER_API_KEY

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CoachSettings":
        """Build settings from Streamlit secrets or the environment.

        Passing ``env`` bypasses ``st.secrets`` and reads only that mapping.
        A missing API key is a valid state and yields an empty credential.
        """

        raw_timeout = _get_secret("GEMINI_TIMEOUT_SECONDS", env)
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
        except ValueError:
            timeout = DEFAULT_TIMEOUT_SECONDS

        return cls(
            api_key=_get_secret("GEMINI_API_KEY", env) or "",
            model=_get_secret("GEMINI_MODEL", env) or DEFAULT_MODEL,
            base_url=_get_secret("GEMINI_BASE_URL", env) or DEFAULT_BASE_URL,
            timeout_seconds=timeout,
        )


__all__ = [
    "CoachSettings",
    "DEFAULT_BASE_URL",
    "DEFAULT_MODEL",
    "DEFAULT_TIMEOUT_SECONDS",
    "PLACEHOLDER_API_KEY",
]
