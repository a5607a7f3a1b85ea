"""
Evaluation models for CampusPrep

Defines the score structures produced by the scoring engine.
"""

from enum import Enum

from pydantic import BaseModel, Field

from campusprep.models.interview import BehavioralMetrics


class ConfidenceLevel(str, Enum):
    """Readiness tier derived from the overall score."""

    JOB_READY = "Job-Ready"  # 85+
    INTERMEDIATE = "Intermediate"  # 70-84
    BEGINNER = "Beginner"  # 50-69
    NEEDS_IMPROVEMENT = "Needs Improvement"  # below 50

    @property
    def description(self) -> str:
        descriptions = {
            "Job-Ready": "Ready to take on real interviews with confidence.",
            "Intermediate": "Solid foundation; a little more practice will close the gaps.",
            "Beginner": "Building blocks are there; keep practicing regularly.",
            "Needs Improvement": "Focus on the fundamentals before the next attempt.",
        }
        return descriptions.get(self.value, "")


class Scores(BaseModel):
    """Aggregate session scores, each an integer percentage."""

    technical: int = Field(default=0, ge=0, le=100)
    communication: int = Field(default=0, ge=0, le=100)
    engagement: int = Field(default=0, ge=0, le=100)
    overall: int = Field(default=0, ge=0, le=100)
    confidence_level: ConfidenceLevel = ConfidenceLevel.NEEDS_IMPROVEMENT


class AnswerScore(BaseModel):
    """Per-answer breakdown behind the session scores."""

    question_id: str
    word_count: int
    sentence_count: int
    time_score: float
    word_score: float
    technical: float
    communication: float


class SessionEvaluation(BaseModel):
    """Complete evaluation of one session."""

    scores: Scores
    answer_scores: list[AnswerScore] = Field(default_factory=list)
    average_metrics: BehavioralMetrics = Field(default_factory=BehavioralMetrics)
    answered_count: int = 0
    total_questions: int = 0
    total_time_taken_ms: int = 0
