"""Build a trackable goal out of the free-text ``meta`` of a coach diagnosis.

Extraction is an ordered list of :class:`GoalMatcher` strategies. Each one
inspects the text and either returns a :class:`GoalDraft` or ``None``; the
first draft wins. Deadlines come from the first duration found in the text
("en 3 semanas", "dos meses", "la próxima semana") and are not checked for
lying in the future.
"""

from __future__ import annotations

import logging
import re
from calendar import monthrange
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Literal, Optional, Sequence

from brutalytics.constants import GOAL_TITLE_MAX_CHARS, MICROMETA_TITLE_MAX_CHARS
from brutalytics.goals import derive_status, new_goal_id
from brutalytics.models import Goal, Micrometa, MicrometaPriority, ReminderFrequency

LOGGER = logging.getLogger(__name__)

DurationUnit = Literal["day", "week", "month", "year"]

_NUMBER = r"(\d+(?:[.,]\d+)*)"

_CURRENCY_CODES = {
    "usd": "USD",
    "mxn": "MXN",
    "eur": "EUR",
    "cop": "COP",
    "ars": "ARS",
    "clp": "CLP",
    "pen": "PEN",
    "dólares": "USD",
    "dolares": "USD",
    "pesos": "MXN",
    "euros": "EUR",
}

_CURRENCY_PATTERN = re.compile(
    r"\$?\s*" + _NUMBER + r"\s*(" + "|".join(_CURRENCY_CODES) + r")\b",
    re.IGNORECASE,
)
_ACTIVITY_PATTERN = re.compile(
    r"(\d+)\s*(?:entrenamientos?|sesi[oó]n(?:es)?|veces)\s+(?:por|a\s+la|al)\s+(semana|d[ií]a|mes)\b",
    re.IGNORECASE,
)
_USERS_PATTERN = re.compile(_NUMBER + r"\s*usuarios?\b", re.IGNORECASE)
_COMMENTS_PATTERN = re.compile(_NUMBER + r"\s*comentarios?\b", re.IGNORECASE)
_HOURS_PATTERN = re.compile(_NUMBER + r"\s*horas?\b", re.IGNORECASE)
_NUMERIC_DURATION_PATTERN = re.compile(r"(\d+)\s*(d[ií]as|semanas|meses)\b", re.IGNORECASE)

_NUMBER_WORDS = {
    "un": 1,
    "una": 1,
    "uno": 1,
    "dos": 2,
    "tres": 3,
    "cuatro": 4,
    "cinco": 5,
    "seis": 6,
    "siete": 7,
    "ocho": 8,
    "nueve": 9,
    "diez": 10,
    "once": 11,
    "doce": 12,
    "quince": 15,
    "veinte": 20,
    "treinta": 30,
}

_DURATION_UNITS: dict[str, DurationUnit] = {
    "día": "day",
    "dia": "day",
    "días": "day",
    "dias": "day",
    "semana": "week",
    "semanas": "week",
    "mes": "month",
    "meses": "month",
    "año": "year",
    "años": "year",
    "ano": "year",
    "anos": "year",
}

_UNIT_ALTERNATION = r"(d[ií]as?|semanas?|mes(?:es)?|a[ñn]os?)"
_DURATION_PATTERN = re.compile(
    r"\b(\d+|" + "|".join(_NUMBER_WORDS) + r")\s+" + _UNIT_ALTERNATION + r"\b",
    re.IGNORECASE,
)
_NEXT_PERIOD_PATTERN = re.compile(
    r"\b(?:pr[oó]xim[oa]|siguiente)\s+(semana|mes|a[ñn]o)\b",
    re.IGNORECASE,
)

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+|\n")

_URGENCY_KEYWORDS = ("urgente", "inmediato", "hoy", "primero", "crítico", "critico", "ya mismo")
_DEFERRAL_KEYWORDS = ("después", "despues", "luego", "eventualmente", "más adelante", "mas adelante", "largo plazo", "opcional")


@dataclass(frozen=True)
class Duration:
    amount: int
    unit: DurationUnit

    def apply(self, start: datetime) -> datetime:
        """Add the duration; months and years move the calendar and clamp the day."""

        if self.unit == "day":
            return start + timedelta(days=self.amount)
        if self.unit == "week":
            return start + timedelta(weeks=self.amount)
        months = self.amount if self.unit == "month" else self.amount * 12
        return _add_months(start, months)


@dataclass(frozen=True)
class GoalDraft:
    """Creatable goal fields produced by a matcher."""

    metric: str
    target: float
    unit: str
    title: str = ""
    deadline: Optional[datetime] = None
    rule: str = ""


@dataclass(frozen=True)
class GoalMatcher:
    name: str
    build: Callable[[str], Optional[GoalDraft]]


def _add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _to_number(raw: str) -> float:
    """Read ``5,000`` and ``5.000`` as thousands, ``2.5`` as a decimal."""

    cleaned = raw.replace(",", "")
    if re.fullmatch(r"\d{1,3}(?:\.\d{3})+", cleaned):
        cleaned = cleaned.replace(".", "")
    return float(cleaned)


def _positive(match: Optional[re.Match[str]]) -> Optional[float]:
    if match is None:
        return None
    value = _to_number(match.group(1))
    return value if value > 0 else None


def find_duration(text: str) -> Optional[Duration]:
    """Return the first positive duration mentioned in ``text``."""

    for match in _DURATION_PATTERN.finditer(text):
        raw_amount = match.group(1).casefold()
        amount = int(raw_amount) if raw_amount.isdigit() else _NUMBER_WORDS[raw_amount]
        if amount <= 0:
            continue
        return Duration(amount=amount, unit=_DURATION_UNITS[match.group(2).casefold()])

    next_period = _NEXT_PERIOD_PATTERN.search(text)
    if next_period is not None:
        return Duration(amount=1, unit=_DURATION_UNITS[next_period.group(1).casefold()])
    return None


def _match_currency(text: str) -> Optional[GoalDraft]:
    for match in _CURRENCY_PATTERN.finditer(text):
        amount = _positive(match)
        if amount is not None:
            code = _CURRENCY_CODES[match.group(2).casefold()]
            return GoalDraft(metric="Ingresos Generados", target=amount, unit=code)
    return None


def _match_activity(text: str) -> Optional[GoalDraft]:
    match = _ACTIVITY_PATTERN.search(text)
    count = _positive(match)
    if match is None or count is None:
        return None
    period = match.group(2).casefold().replace("dia", "día")
    return GoalDraft(metric="Frecuencia de Actividad", target=count, unit=f"por {period}")


def _count_matcher(pattern: re.Pattern[str], metric: str, unit: str) -> Callable[[str], Optional[GoalDraft]]:
    def build(text: str) -> Optional[GoalDraft]:
        count = _positive(pattern.search(text))
        if count is None:
            return None
        return GoalDraft(metric=metric, target=count, unit=unit)

    return build


def _progress_draft() -> GoalDraft:
    return GoalDraft(metric="Progreso", target=100.0, unit="%")


def _match_numeric_duration(text: str) -> Optional[GoalDraft]:
    return _progress_draft() if _positive(_NUMERIC_DURATION_PATTERN.search(text)) else None


def _match_any_duration(text: str) -> Optional[GoalDraft]:
    return _progress_draft() if find_duration(text) is not None else None


def _match_completion(text: str) -> Optional[GoalDraft]:
    if not text.strip():
        return None
    return GoalDraft(metric="Cumplimiento", target=1.0, unit="completado")


GOAL_MATCHERS: tuple[GoalMatcher, ...] = (
    GoalMatcher("currency", _match_currency),
    GoalMatcher("activity", _match_activity),
    GoalMatcher("users", _count_matcher(_USERS_PATTERN, "Usuarios Registrados", "usuarios")),
    GoalMatcher("comments", _count_matcher(_COMMENTS_PATTERN, "Comentarios", "comentarios")),
    GoalMatcher("hours", _count_matcher(_HOURS_PATTERN, "Horas Invertidas", "horas")),
    GoalMatcher("numeric-duration", _match_numeric_duration),
    GoalMatcher("duration", _match_any_duration),
    GoalMatcher("completion", _match_completion),
)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def goal_title(meta: str) -> str:
    """First sentence of the meta text, shortened for display."""

    first = _SENTENCE_END.split(meta.strip(), maxsplit=1)[0].strip()
    return _truncate(first, GOAL_TITLE_MAX_CHARS)


def extract_goal_draft(
    meta: Optional[str],
    *,
    now: Optional[datetime] = None,
    matchers: Sequence[GoalMatcher] = GOAL_MATCHERS,
) -> Optional[GoalDraft]:
    """Run the matchers in order and complete the winning draft with title and deadline."""

    text = (meta or "").strip()
    if not text:
        return None

    for matcher in matchers:
        draft = matcher.build(text)
        if draft is None:
            continue
        start = now or datetime.now(timezone.utc)
        duration = find_duration(text)
        LOGGER.debug("Meta %r reconocida por la regla %s.", text, matcher.name)
        return replace(
            draft,
            title=goal_title(text),
            deadline=duration.apply(start) if duration is not None else None,
            rule=matcher.name,
        )
    return None


def _contains_keyword(text: str, keywords: Sequence[str]) -> bool:
    lowered = text.casefold()
    return any(re.search(r"\b" + re.escape(keyword) + r"\b", lowered) for keyword in keywords)


def micrometa_priority(action: str, position: int) -> MicrometaPriority:
    if position == 0 or _contains_keyword(action, _URGENCY_KEYWORDS):
        return MicrometaPriority.HIGH
    if _contains_keyword(action, _DEFERRAL_KEYWORDS):
        return MicrometaPriority.LOW
    return MicrometaPriority.MEDIUM


def build_micrometas(plan: Sequence[str], parent_goal_id: int, *, now: datetime) -> list[Micrometa]:
    micrometas: list[Micrometa] = []
    actions = [action.strip() for action in plan if action and action.strip()]
    for position, action in enumerate(actions):
        priority = micrometa_priority(action, position)
        micrometas.append(
            Micrometa(
                id=parent_goal_id * 100 + position + 1,
                parent_goal_id=parent_goal_id,
                title=_truncate(action, MICROMETA_TITLE_MAX_CHARS),
                description=action,
                priority=priority,
                created_at=now,
                last_updated=now,
                deadline=now + priority.deadline_offset,
            )
        )
    return micrometas


def extract_goal(
    meta: Optional[str],
    plan: Sequence[str] = (),
    *,
    existing: Sequence[Goal] = (),
    now: Optional[datetime] = None,
) -> Optional[Goal]:
    """Create a goal with one micrometa per plan action, or ``None`` for empty meta."""

    timestamp = now or datetime.now(timezone.utc)
    draft = extract_goal_draft(meta, now=timestamp)
    if draft is None:
        return None

    goal_id = new_goal_id((goal.id for goal in existing), now=now)
    frequency = ReminderFrequency.WEEKLY
    return Goal(
        id=goal_id,
        title=draft.title,
        metric=draft.metric,
        current=0.0,
        target=draft.target,
        unit=draft.unit,
        status=derive_status(0.0, draft.target),
        created_at=timestamp,
        last_updated=timestamp,
        reminder_frequency=frequency,
        next_reminder=timestamp + frequency.interval,
        deadline=draft.deadline,
        micrometas=build_micrometas(plan, goal_id, now=timestamp),
    )


__all__ = [
    "Duration",
    "GOAL_MATCHERS",
    "GoalDraft",
    "GoalMatcher",
    "build_micrometas",
    "extract_goal",
    "extract_goal_draft",
    "find_duration",
    "goal_title",
    "micrometa_priority",
]
