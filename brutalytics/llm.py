from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional, Sequence

import httpx

from brutalytics.config import CoachSettings

LOGGER = logging.getLogger(__name__)

DEFAULT_GENERATION_CONFIG: dict[str, float | int] = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 2048,
}
PING_GENERATION_CONFIG: dict[str, float | int] = {"maxOutputTokens": 10}
PING_PROMPT = 'Responde solo con "OK" si puedes leer este mensaje.'
SAFETY_SETTINGS: tuple[dict[str, str], ...] = tuple(
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
)
DEFAULT_MAX_ATTEMPTS = 2
_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
_BACKOFF_FACTOR = 1.6


class CoachServiceError(RuntimeError):
    """Base class for failures of the coach text-generation pipeline."""

    kind = "error"


class ConfigurationError(CoachServiceError):
    """Raised when no API credential is configured."""

    kind = "no-key"


class RemoteUnavailableError(CoachServiceError):
    """Raised on transport failures or non-success HTTP responses."""

    kind = "connection"


class MalformedResponseError(CoachServiceError):
    """Raised when the model output cannot be turned into a coach response."""

    kind = "malformed"


def extract_candidate_text(payload: Any) -> str:
    """Return the text of the first candidate of a ``generateContent`` response."""

    if not isinstance(payload, Mapping):
        raise MalformedResponseError("Respuesta inválida de la API de Gemini: el cuerpo no es un objeto.")

    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], Mapping):
        raise MalformedResponseError("Respuesta inválida de la API de Gemini: sin candidatos.")

    content = candidates[0].get("content") or {}
    parts = content.get("parts") if isinstance(content, Mapping) else None
    for part in parts or []:
        if isinstance(part, Mapping) and part.get("text"):
            return str(part["text"])

    raise MalformedResponseError("Respuesta de Gemini sin contenido de texto válido.")


class GeminiClient:
    """Thin HTTP client for the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        settings: CoachSettings,
        *,
        client: Optional[httpx.Client] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = 1.0,
    ) -> None:
        self.settings = settings
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=settings.timeout_seconds)
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = max(0.0, backoff_seconds)

    def close(self) -> None:
        """Close the HTTP client when this instance created it."""

        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _post(self, payload: Mapping[str, object]) -> httpx.Response:
        return self._client.post(
            self.settings.endpoint,
            headers={"x-goog-api-key": self.settings.api_key, "content-type": "application/json"},
            json=payload,
        )

    def generate_content(
        self,
        contents: Sequence[Mapping[str, object]],
        *,
        generation_config: Optional[Mapping[str, float | int]] = None,
        safety_settings: Sequence[Mapping[str, str]] = SAFETY_SETTINGS,
    ) -> Any:
        """POST the contents and return the decoded JSON body, retrying transient failures."""

        if not self.settings.has_credential:
            raise ConfigurationError("API Key de Gemini no configurada. Configura GEMINI_API_KEY.")

        payload: dict[str, object] = {
            "contents": list(contents),
            "generationConfig": dict(generation_config or DEFAULT_GENERATION_CONFIG),
            "safetySettings": list(safety_settings),
        }

        delay = self.backoff_seconds
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = self._post(payload)
            except httpx.HTTPError as exc:
                last_error = exc
                LOGGER.warning("Intento %s contra Gemini falló: %s", attempt, exc)
            else:
                if response.is_success:
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise MalformedResponseError("La API de Gemini devolvió un cuerpo no JSON.") from exc

                LOGGER.warning(
                    "Error de API Gemini (intento %s): %s - %s",
                    attempt,
                    response.status_code,
                    response.text[:500],
                )
                last_error = RemoteUnavailableError(f"Error de API Gemini: {response.status_code}")
                if response.status_code not in _RETRYABLE_STATUS_CODES:
                    break

            if attempt < self.max_attempts:
                time.sleep(delay)
                delay *= _BACKOFF_FACTOR

        raise RemoteUnavailableError("No se pudo contactar la API de Gemini.") from last_error

    def generate_text(
        self,
        contents: Sequence[Mapping[str, object]],
        *,
        generation_config: Optional[Mapping[str, float | int]] = None,
    ) -> str:
        payload = self.generate_content(contents, generation_config=generation_config)
        return extract_candidate_text(payload)

    def ping(self) -> bool:
        """Issue a minimal request and report whether the endpoint answered successfully."""

        payload = {
            "contents": [{"role": "user", "parts": [{"text": PING_PROMPT}]}],
            "generationConfig": PING_GENERATION_CONFIG,
        }
        try:
            response = self._post(payload)
        except httpx.HTTPError as exc:
            LOGGER.warning("Error probando la conexión con Gemini: %s", exc)
            return False
        return response.is_success


__all__ = [
    "CoachServiceError",
    "ConfigurationError",
    "DEFAULT_GENERATION_CONFIG",
    "GeminiClient",
    "MalformedResponseError",
    "RemoteUnavailableError",
    "SAFETY_SETTINGS",
    "extract_candidate_text",
]
