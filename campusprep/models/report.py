"""
Report models for CampusPrep

Defines the record handed to the external report sink.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from campusprep.models.companies import FeedbackBundle
from campusprep.models.evaluation import Scores
from campusprep.models.interview import BehavioralMetrics, utc_now


class AnswerPreview(BaseModel):
    """Stored form of an answer; the transcript is truncated."""

    question_id: str
    question_text: str = ""
    transcript_preview: str
    time_taken_ms: int
    score: int = Field(..., ge=0, le=100)


class Report(BaseModel):
    """Final scored record for one session or round."""

    # Metadata
    session_id: str
    student_id: str
    generated_at: datetime = Field(default_factory=utc_now)

    # Interview info
    company: str
    role: str
    interview_type: str
    interviewer_name: str

    # Timing
    total_duration_ms: int = 0
    average_answer_seconds: int = 0

    # === SCORES ===

    scores: Scores
    behavioral_metrics: BehavioralMetrics = Field(default_factory=BehavioralMetrics)
    answers: list[AnswerPreview] = Field(default_factory=list)

    # === QUALITATIVE FEEDBACK ===

    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    behavioral_feedback: list[str] = Field(default_factory=list)
    company_feedback: FeedbackBundle = Field(default_factory=FeedbackBundle)


class ReportSummary(BaseModel):
    """Condensed report for quick view."""

    session_id: str
    overall_score: int
    confidence_level: str
    top_strength: str
    top_improvement_area: str
    report_id: str | None = None
