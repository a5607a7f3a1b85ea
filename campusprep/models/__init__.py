"""
Data models and schemas for CampusPrep

Contains Pydantic models for:
- Questions and question pools
- Answers, sessions and rounds
- Scores and evaluations
- Reports and company feedback
"""

from campusprep.models.question import (
    Question,
    QuestionCategory,
    WordCountRange,
    WordCountStatus,
)
from campusprep.models.interview import (
    Answer,
    BehavioralMetrics,
    MediaStatus,
    Round,
    RoundStatus,
    SessionEvent,
    SessionKind,
    SessionSnapshot,
    SessionStatus,
)
from campusprep.models.evaluation import (
    AnswerScore,
    ConfidenceLevel,
    Scores,
    SessionEvaluation,
)
from campusprep.models.report import AnswerPreview, Report, ReportSummary
from campusprep.models.companies import Company, FeedbackBundle, TrackRole
from campusprep.models.question_bank import SessionProfile, get_session_profile

__all__ = [
    # Question
    "Question",
    "QuestionCategory",
    "WordCountRange",
    "WordCountStatus",
    # Interview
    "Answer",
    "BehavioralMetrics",
    "MediaStatus",
    "Round",
    "RoundStatus",
    "SessionEvent",
    "SessionKind",
    "SessionSnapshot",
    "SessionStatus",
    # Evaluation
    "AnswerScore",
    "ConfidenceLevel",
    "Scores",
    "SessionEvaluation",
    # Report
    "AnswerPreview",
    "Report",
    "ReportSummary",
    # Companies
    "Company",
    "FeedbackBundle",
    "TrackRole",
    # Pools
    "SessionProfile",
    "get_session_profile",
]
