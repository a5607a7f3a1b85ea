"""
Interview session, answer and round models for CampusPrep
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, computed_field, model_validator

from campusprep.models.question import Question


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionKind(str, Enum):
    """Session kinds; each has its own pool, quotas and persisted snapshot."""

    PRACTICE = "practice"  # Categorized pool with quotas and follow-ups
    QUICK = "quick"  # Starter pool, no quotas
    TECHNICAL = "technical"  # Company technical round
    HR = "hr"  # Company HR / behavioral round


class SessionEvent(str, Enum):
    """Signals emitted by a session engine to its listeners."""

    TIME_UP = "time_up"  # Advisory only, never submits
    STAY_VISIBLE = "stay_visible"  # Face not detected advisory
    SESSION_SUBMITTED = "session_submitted"
    ROUND_COMPLETE = "round_complete"


class MediaStatus(str, Enum):
    """Camera/microphone guard state."""

    NOT_REQUESTED = "not_requested"
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"
    RELEASED = "released"


class BehavioralMetrics(BaseModel):
    """Engagement signals for an answer, each a percentage."""

    face_detected_percentage: float = Field(default=0.0, ge=0, le=100)
    eye_contact_score: float = Field(default=0.0, ge=0, le=100)
    head_stability: float = Field(default=0.0, ge=0, le=100)
    camera_on_duration: float = Field(default=0.0, ge=0, le=100)
    mic_activity: float = Field(default=0.0, ge=0, le=100)
    speaking_percentage: float = Field(default=0.0, ge=0, le=100)


class Answer(BaseModel):
    """The answer held in one question slot. Empty transcript = unanswered."""

    question_id: str
    transcript: str = ""
    time_taken_ms: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=utc_now)
    behavioral_metrics: BehavioralMetrics = Field(default_factory=BehavioralMetrics)

    @property
    def is_answered(self) -> bool:
        return bool(self.transcript.strip())


class SessionSnapshot(BaseModel):
    """Serialized, resumable state of one session."""

    kind: SessionKind = SessionKind.PRACTICE
    questions: list[Question] = Field(default_factory=list)
    answers: list[Answer | str] = Field(default_factory=list)
    current_index: int = 0
    show_all_questions: bool = False
    active: bool = False
    submitted: bool = False
    saved_at_epoch_ms: int = 0

    @model_validator(mode="after")
    def _align_answers(self) -> "SessionSnapshot":
        """Re-derive one Answer per question and clamp the index."""
        aligned: list[Answer] = []
        for i, question in enumerate(self.questions):
            stored: Any = self.answers[i] if i < len(self.answers) else ""
            if isinstance(stored, str):
                aligned.append(Answer(question_id=question.id, transcript=stored))
            else:
                aligned.append(stored)
        self.answers = aligned

        if self.questions:
            self.current_index = max(0, min(self.current_index, len(self.questions) - 1))
        else:
            self.current_index = 0
        return self

    def answer_list(self) -> list[Answer]:
        return [a for a in self.answers if isinstance(a, Answer)]


class RoundStatus(str, Enum):
    """Round lifecycle states."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def display_text(self) -> str:
        texts = {
            "not-started": "Not Started",
            "in-progress": "In Progress",
            "completed": "Completed",
            "failed": "Failed",
        }
        return texts.get(self.value, self.value)


class Round(BaseModel):
    """One phase of an interview track."""

    id: str
    name: str
    description: str = ""
    status: RoundStatus = RoundStatus.NOT_STARTED

    @computed_field
    @property
    def status_text(self) -> str:
        return self.status.display_text


def default_rounds() -> list[Round]:
    """The rounds every company/role track runs through, in order."""
    return [
        Round(
            id="technical",
            name="Technical Interview",
            description="In-depth technical questions related to your role",
        ),
        Round(
            id="hr",
            name="HR / Behavioral",
            description="Personality and cultural fit assessment",
        ),
        Round(
            id="gd",
            name="Group Discussion (GD)",
            description="Collaborative discussion with AI participants",
        ),
    ]


class SessionStatus(BaseModel):
    """Live view of a session for clients."""

    session_id: str
    user_id: str
    kind: SessionKind
    questions: list[Question]
    answers: list[Answer]
    current_index: int
    show_all_questions: bool
    active: bool
    submitted: bool

    # Timers
    time_remaining_seconds: int
    time_up: bool = False
    elapsed_seconds: int = 0
    clock_running: bool = False

    # Media and engagement
    media_status: MediaStatus = MediaStatus.NOT_REQUESTED
    camera_enabled: bool = False
    microphone_enabled: bool = False
    face_detected: bool = False
    stay_visible_advisory: bool = False
    engagement_seconds: float = 0.0

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a.is_answered)
