from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from pydantic import ValidationError

from brutalytics.coach.interpreter import CoachReply, ResponseInterpreter
from brutalytics.constants import CONVERSATION_HISTORY_LIMIT, cap_list_tail
from brutalytics.models import CoachResponse, ConversationMessage

LOGGER = logging.getLogger(__name__)


class SessionBusyError(RuntimeError):
    """Raised when a message is submitted while another request is in flight."""


@dataclass(frozen=True)
class PendingRequest:
    token: int
    history: tuple[ConversationMessage, ...]


def decode_model_message(message: ConversationMessage) -> Optional[CoachResponse]:
    """Return the structured response stored in a model turn, if it holds one."""

    if message.role != "model":
        return None
    try:
        return CoachResponse.model_validate_json(message.text)
    except ValidationError:
        return None


def diagnosis_fingerprint(response: CoachResponse) -> str:
    """Stable identifier of a diagnosis, used to offer goal creation only once."""

    return hashlib.sha1(response.model_dump_json(by_alias=True).encode("utf-8")).hexdigest()


class ChatSession:
    """Append-only chat transcript with a busy flag and request fencing.

    Every submitted request gets a monotonically increasing token. A reply is
    only appended when its token is still the current one, so a slow reply
    for an abandoned request can never overwrite newer state.
    """

    def __init__(self, interpreter: ResponseInterpreter, transcript: Iterable[ConversationMessage] = ()) -> None:
        self.interpreter = interpreter
        self._transcript: list[ConversationMessage] = list(transcript)
        self._token = 0
        self._in_flight: Optional[int] = None
        self.last_reply: Optional[CoachReply] = None

    @property
    def transcript(self) -> tuple[ConversationMessage, ...]:
        return tuple(self._transcript)

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    def submit(self, text: str) -> PendingRequest:
        if self.busy:
            raise SessionBusyError("Ya hay una respuesta del coach en curso.")

        message = text.strip()
        if not message:
            raise ValueError("El mensaje no puede estar vacío.")

        self._transcript.append(ConversationMessage.from_user(message))
        self._transcript = cap_list_tail(self._transcript, CONVERSATION_HISTORY_LIMIT)
        self._token += 1
        self._in_flight = self._token
        return PendingRequest(token=self._token, history=tuple(self._transcript))

    def complete(self, token: int, reply: CoachReply) -> bool:
        """Append the reply for ``token``; stale replies are dropped and ``False`` is returned."""

        if token != self._in_flight:
            LOGGER.info("Descartando respuesta obsoleta del coach (token %s).", token)
            return False

        payload = reply.response.model_dump_json(by_alias=True)
        self._transcript.append(ConversationMessage.from_model(payload))
        self._in_flight = None
        self.last_reply = reply
        return True

    def cancel(self) -> None:
        """Abandon the in-flight request; its reply will be discarded."""

        self._in_flight = None

    def send(self, text: str) -> CoachReply:
        pending = self.submit(text)
        try:
            reply = self.interpreter.respond(pending.history)
        except Exception:
            self.cancel()
            raise
        self.complete(pending.token, reply)
        return reply

    def reset(self) -> None:
        self._transcript = []
        self._in_flight = None
        self.last_reply = None

    def latest_diagnosis(self) -> Optional[CoachResponse]:
        for message in reversed(self._transcript):
            response = decode_model_message(message)
            if response is not None and response.is_diagnosis:
                return response
        return None


__all__ = [
    "ChatSession",
    "PendingRequest",
    "SessionBusyError",
    "decode_model_message",
    "diagnosis_fingerprint",
]
