from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from brutalytics.coach.parser import ParseOutcome, parse_coach_text
from brutalytics.coach.prompts import build_contents
from brutalytics.llm import (
    CoachServiceError,
    ConfigurationError,
    GeminiClient,
    MalformedResponseError,
)
from brutalytics.models import CoachResponse, ConnectionStatus, ConversationMessage
from brutalytics.resources import resource_titles

LOGGER = logging.getLogger(__name__)


class ReplySource(str, Enum):
    STRICT = "strict"
    HEURISTIC = "heuristic"
    OFFLINE = "offline"


@dataclass(frozen=True)
class CoachReply:
    """Renderable coach reply plus where it came from."""

    response: CoachResponse
    source: ReplySource
    error_kind: Optional[str] = None

    @property
    def is_offline(self) -> bool:
        return self.source is ReplySource.OFFLINE


def offline_response() -> CoachResponse:
    """Canned in-persona reply used whenever the remote coach is unavailable."""

    return CoachResponse(
        truth="Hay un problema técnico con la IA. Pero eso no es excusa para no avanzar.",
        plan=[
            "Verifica tu conexión a internet",
            "Revisa que tu API Key de Gemini esté configurada correctamente",
            "Mientras tanto, enfócate en lo que SÍ puedes controlar",
        ],
        challenge=(
            "¿Qué acción específica puedes tomar HOY para avanzar hacia tu objetivo, "
            "independientemente de los problemas técnicos?"
        ),
        meta="Resuelve el problema técnico en las próximas 24 horas",
    )


def is_offline_response(response: CoachResponse) -> bool:
    return response == offline_response()


class ResponseInterpreter:
    """Turn a conversation transcript into a structured coach response."""

    def __init__(self, client: GeminiClient, *, resources: Optional[Sequence[str]] = None) -> None:
        self.client = client
        self.resources: list[str] = list(resources) if resources is not None else resource_titles()

    def set_resources(self, titles: Sequence[str]) -> None:
        self.resources = list(titles)

    def _interpret(self, history: Sequence[ConversationMessage]) -> tuple[CoachResponse, ParseOutcome]:
        if not self.client.settings.has_credential:
            raise ConfigurationError("API Key de Gemini no configurada. Configura GEMINI_API_KEY.")

        text = self.client.generate_text(build_contents(history, self.resources))
        LOGGER.debug("Texto de respuesta de Gemini: %s", text)

        result = parse_coach_text(text)
        if result.response is None:
            raise MalformedResponseError("Error al procesar la respuesta del coach.")
        return result.response, result.outcome

    def get_coach_response(self, history: Sequence[ConversationMessage]) -> CoachResponse:
        """Return the decoded response or raise a :class:`CoachServiceError`."""

        response, _ = self._interpret(history)
        return response

    def respond(self, history: Sequence[ConversationMessage]) -> CoachReply:
        """Like :meth:`get_coach_response` but never raises; failures yield the offline reply."""

        try:
            response, outcome = self._interpret(history)
        except CoachServiceError as exc:
            LOGGER.warning("Coach sin respuesta utilizable (%s): %s", exc.kind, exc)
            return CoachReply(offline_response(), ReplySource.OFFLINE, error_kind=exc.kind)

        source = ReplySource.STRICT if outcome is ParseOutcome.STRICT else ReplySource.HEURISTIC
        return CoachReply(response, source)

    def test_connection(self) -> ConnectionStatus:
        if not self.client.settings.has_credential:
            return ConnectionStatus.NO_KEY
        return ConnectionStatus.CONNECTED if self.client.ping() else ConnectionStatus.ERROR


__all__ = ["CoachReply", "ReplySource", "ResponseInterpreter", "is_offline_response", "offline_response"]
