from brutalytics.coach.interpreter import (
    CoachReply,
    ReplySource,
    ResponseInterpreter,
    is_offline_response,
    offline_response,
)
from brutalytics.coach.parser import ParseOutcome, ParseResult, parse_coach_text
from brutalytics.coach.session import ChatSession, PendingRequest, SessionBusyError

__all__ = [
    "ChatSession",
    "CoachReply",
    "ParseOutcome",
    "ParseResult",
    "PendingRequest",
    "ReplySource",
    "ResponseInterpreter",
    "SessionBusyError",
    "is_offline_response",
    "offline_response",
    "parse_coach_text",
]
