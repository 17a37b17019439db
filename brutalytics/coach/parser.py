"""Two-stage parser that turns free model output into a :class:`CoachResponse`.

Stage one decodes strict JSON and validates it against the response schema.
Stage two only runs when the text is not JSON at all: it scans the lines for
Spanish/English labels ("Verdad:", "Plan:", "Reto:", "Meta:") and treats
unlabelled questions as the challenge. The tagged :class:`ParseResult` lets
callers tell a strict decode from a best-effort one.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from brutalytics.models import CoachResponse

LOGGER = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$")
_LABEL_PREFIX = re.compile(r"^.*?[:=]\s*")
_LIST_ITEM = re.compile(r"^(?:[-*•]|\d+[.)])\s+")

_TRUTH_MARKERS = ("verdad", "truth", "realidad")
_PLAN_MARKERS = ("plan", "paso", "acción", "accion", "step")
_CHALLENGE_MARKERS = ("desafío", "desafio", "challenge", "reto")
_META_MARKERS = ("meta", "objetivo")

FILLER_TRUTH = "Necesito más información para darte una respuesta específica."
FILLER_PLAN = ("Reflexiona sobre lo que realmente quieres lograr",)
FILLER_CHALLENGE = "¿Qué es lo que realmente te está impidiendo avanzar?"
FILLER_META = "Define una meta específica en las próximas 24 horas"

QUESTION_ONLY_TRUTH = "La IA está funcionando pero no está devolviendo el formato esperado. Esto es temporal."
QUESTION_ONLY_PLAN = (
    "Revisa tu conexión a internet",
    "Verifica que tu API Key esté configurada correctamente",
    "Mientras tanto, enfócate en lo que puedes controlar",
)
QUESTION_ONLY_META = "Resuelve el problema técnico en las próximas 24 horas"


class ParseOutcome(str, Enum):
    STRICT = "strict"
    HEURISTIC = "heuristic"
    UNRECOVERABLE = "unrecoverable"


@dataclass(frozen=True)
class ParseResult:
    outcome: ParseOutcome
    response: Optional[CoachResponse] = None

    @property
    def ok(self) -> bool:
        return self.response is not None


UNRECOVERABLE = ParseResult(ParseOutcome.UNRECOVERABLE)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` or ``` ... ``` block."""

    clean = text.strip()
    if clean.startswith("```"):
        clean = _FENCE_OPEN.sub("", clean, count=1)
        clean = _FENCE_CLOSE.sub("", clean, count=1)
    return clean.strip()


def _parse_strict(text: str) -> Optional[ParseResult]:
    """Return ``None`` when the text is not JSON so the heuristic stage can run."""

    try:
        data = json.loads(text)
    except ValueError:
        return None

    if not isinstance(data, dict):
        LOGGER.warning("Respuesta JSON del coach no es un objeto: %r", type(data).__name__)
        return UNRECOVERABLE

    try:
        return ParseResult(ParseOutcome.STRICT, CoachResponse.model_validate(data))
    except ValidationError as exc:
        LOGGER.warning("Respuesta del coach incumple el esquema: %s", exc.errors(include_url=False))
        return UNRECOVERABLE


def _label_value(line: str) -> str:
    return _LABEL_PREFIX.sub("", line, count=1).strip().strip("*#").strip()


def _is_question(line: str) -> bool:
    has_question_mark = "?" in line or "¿" in line
    return has_question_mark and ":" not in line and "=" not in line


def _parse_heuristic(text: str) -> ParseResult:
    truth = ""
    plan: list[str] = []
    challenge = ""
    meta = ""
    questions: list[str] = []
    in_plan = False

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if in_plan and _LIST_ITEM.match(line):
            item = _LIST_ITEM.sub("", line, count=1).strip()
            if item:
                plan.append(item)
            continue
        in_plan = False

        if _is_question(line):
            questions.append(line)
            continue

        lowered = line.casefold()
        if any(marker in lowered for marker in _TRUTH_MARKERS):
            truth = _label_value(line)
        elif any(marker in lowered for marker in _PLAN_MARKERS):
            action = _label_value(line)
            if action:
                plan.append(action)
            in_plan = True
        elif any(marker in lowered for marker in _CHALLENGE_MARKERS):
            challenge = _label_value(line)
        elif any(marker in lowered for marker in _META_MARKERS):
            meta = _label_value(line)

    if truth or plan or challenge:
        response = CoachResponse(
            truth=truth or FILLER_TRUTH,
            plan=plan or list(FILLER_PLAN),
            challenge=challenge or (questions[-1] if questions else FILLER_CHALLENGE),
            meta=meta or FILLER_META,
        )
        return ParseResult(ParseOutcome.HEURISTIC, response)

    if "?" in text or "¿" in text:
        response = CoachResponse(
            truth=QUESTION_ONLY_TRUTH,
            plan=list(QUESTION_ONLY_PLAN),
            challenge=text.strip(),
            meta=QUESTION_ONLY_META,
        )
        return ParseResult(ParseOutcome.HEURISTIC, response)

    return UNRECOVERABLE


def parse_coach_text(text: str) -> ParseResult:
    """Decode model output, falling back to line heuristics when it is not JSON."""

    clean = strip_code_fences(text or "")
    if not clean:
        return UNRECOVERABLE

    strict = _parse_strict(clean)
    if strict is not None:
        return strict

    LOGGER.warning("Respuesta del coach no es JSON válido; aplicando extracción heurística.")
    LOGGER.debug("Texto sin procesar: %s", clean)
    return _parse_heuristic(clean)


__all__ = ["ParseOutcome", "ParseResult", "parse_coach_text", "strip_code_fences"]
