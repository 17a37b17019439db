from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GoalStatus(str, Enum):
    """Lifecycle state of a goal or micrometa, always derived from progress."""

    IN_PROGRESS = "En Progreso"
    COMPLETED = "Completado"


class ReminderFrequency(str, Enum):
    """Cadence for routine goal reminders."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def label(self) -> str:
        if self is ReminderFrequency.DAILY:
            return "Diario"
        if self is ReminderFrequency.WEEKLY:
            return "Semanal"
        return "Mensual"

    @property
    def interval(self) -> timedelta:
        if self is ReminderFrequency.DAILY:
            return timedelta(days=1)
        if self is ReminderFrequency.WEEKLY:
            return timedelta(days=7)
        return timedelta(days=30)


class MicrometaPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        if self is MicrometaPriority.HIGH:
            return "Prioridad Alta"
        if self is MicrometaPriority.MEDIUM:
            return "Prioridad Media"
        return "Prioridad Baja"

    @property
    def deadline_offset(self) -> timedelta:
        if self is MicrometaPriority.HIGH:
            return timedelta(days=14)
        if self is MicrometaPriority.MEDIUM:
            return timedelta(days=30)
        return timedelta(days=60)


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    REMINDER = "reminder"
    ACHIEVEMENT = "achievement"
    MOTIVATION = "motivation"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MotivationType(str, Enum):
    ENCOURAGEMENT = "encouragement"
    CHALLENGE = "challenge"
    REFLECTION = "reflection"
    CELEBRATION = "celebration"
    URGENT = "urgent"


class ConnectionStatus(str, Enum):
    """Result of probing the text-generation endpoint."""

    NO_KEY = "no-key"
    CONNECTED = "connected"
    ERROR = "error"


class MessagePart(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class ConversationMessage(BaseModel):
    """One turn of the chat transcript, immutable once appended."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    parts: tuple[MessagePart, ...] = ()

    @classmethod
    def from_user(cls, text: str) -> "ConversationMessage":
        return cls(role="user", parts=(MessagePart(text=text),))

    @classmethod
    def from_model(cls, text: str) -> "ConversationMessage":
        return cls(role="model", parts=(MessagePart(text=text),))

    @property
    def text(self) -> str:
        return "\n".join(part.text for part in self.parts)


class CoachResponse(BaseModel):
    """Structured reply of the coach persona.

    A reply with a non-empty ``plan`` is a final diagnosis and must carry a
    ``truth``. A reply without a plan is a follow-up question that only needs
    a ``challenge``.
    """

    model_config = ConfigDict(populate_by_name=True)

    truth: str = ""
    plan: List[str] = Field(default_factory=list)
    challenge: str
    suggested_resource: Optional[str] = Field(default=None, alias="suggestedResource")
    suggestion_context: Optional[str] = Field(default=None, alias="suggestionContext")
    meta: Optional[str] = None

    @field_validator("truth", "challenge", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("plan", mode="before")
    @classmethod
    def _coerce_plan(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        items: list[str] = []
        for item in value:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                items.append(text)
        return items

    @field_validator("suggested_resource", "suggestion_context", "meta", mode="before")
    @classmethod
    def _coerce_optional(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @model_validator(mode="after")
    def _check_invariants(self) -> "CoachResponse":
        if not self.challenge:
            raise ValueError("challenge must not be empty")
        if self.plan and not self.truth:
            raise ValueError("a diagnosis with a plan must include the truth")
        return self

    @property
    def is_diagnosis(self) -> bool:
        return bool(self.plan)


class ProgressEntry(BaseModel):
    date: datetime = Field(default_factory=_utcnow)
    value: float
    notes: Optional[str] = None


class MicrometaProgressEntry(ProgressEntry):
    evidence: Optional[str] = None
    links: List[str] = Field(default_factory=list)


class Micrometa(BaseModel):
    """Sub-goal derived from one action item of a diagnosis plan."""

    id: int
    parent_goal_id: int
    title: str
    description: str = ""
    current: float = 0.0
    target: float = Field(default=100.0, gt=0)
    unit: str = "%"
    status: GoalStatus = GoalStatus.IN_PROGRESS
    created_at: datetime = Field(default_factory=_utcnow)
    last_updated: datetime = Field(default_factory=_utcnow)
    progress_history: List[MicrometaProgressEntry] = Field(default_factory=list)
    priority: MicrometaPriority = MicrometaPriority.MEDIUM
    deadline: Optional[datetime] = None


class Goal(BaseModel):
    """User-defined numeric target with progress tracking."""

    id: int
    title: str
    metric: str
    current: float = 0.0
    target: float = Field(gt=0)
    unit: str = ""
    status: GoalStatus = GoalStatus.IN_PROGRESS
    created_at: datetime = Field(default_factory=_utcnow)
    last_updated: datetime = Field(default_factory=_utcnow)
    progress_history: List[ProgressEntry] = Field(default_factory=list)
    reminder_frequency: ReminderFrequency = ReminderFrequency.WEEKLY
    next_reminder: datetime = Field(default_factory=lambda: _utcnow() + timedelta(days=7))
    deadline: Optional[datetime] = None
    micrometas: List[Micrometa] = Field(default_factory=list)


class Notification(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    goal_id: Optional[int] = None
    created_at: datetime = Field(default_factory=_utcnow)
    is_read: bool = False
    priority: Optional[NotificationPriority] = None
    action_required: bool = False
    action_url: Optional[str] = None


class CoachReminder(BaseModel):
    """Insistence message scheduled for a goal."""

    id: str
    goal_id: int
    message: str
    scheduled_for: datetime
    is_completed: bool = False
    motivation_type: MotivationType = MotivationType.ENCOURAGEMENT


class StrategicProfile(BaseModel):
    """Mission and core values the user wants the coach to keep in mind."""

    mission: str = ""
    values: str = ""
    updated_at: Optional[datetime] = None


class Resource(BaseModel):
    """Static entry of the strategic resource library."""

    id: int
    title: str
    subtitle: str
    icon: str
    description: str


__all__ = [
    "CoachReminder",
    "CoachResponse",
    "ConnectionStatus",
    "ConversationMessage",
    "Goal",
    "GoalStatus",
    "MessagePart",
    "Micrometa",
    "MicrometaPriority",
    "MicrometaProgressEntry",
    "MotivationType",
    "Notification",
    "NotificationPriority",
    "NotificationType",
    "ProgressEntry",
    "ReminderFrequency",
    "Resource",
    "StrategicProfile",
]
