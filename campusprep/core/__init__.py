"""
Core business logic modules for CampusPrep

Contains:
- Question Selector: Practice set selection from categorized pools
- Session Engine: Timed question/answer session lifecycle
- Engagement Sampler: Camera/mic/face-presence accumulation
- Evaluation Engine: Scoring and readiness tiers
- Session Store: Snapshot persistence with TTL
- Round Tracker: Round state machine per interview track
- Report Compiler: Final report compilation and hand-off
- Interview Orchestrator: Sessions, tracks and navigation signals
"""

from campusprep.core.evaluation_engine import EvaluationEngine
from campusprep.core.interview_orchestrator import InterviewOrchestrator
from campusprep.core.question_selector import QuestionSelector, select_question_set
from campusprep.core.report_compiler import ReportCompiler
from campusprep.core.round_tracker import RoundTracker, RoundTransitionError
from campusprep.core.session_engine import InterviewSessionEngine
from campusprep.core.session_store import SessionPersistence

__all__ = [
    "EvaluationEngine",
    "InterviewOrchestrator",
    "InterviewSessionEngine",
    "QuestionSelector",
    "ReportCompiler",
    "RoundTracker",
    "RoundTransitionError",
    "SessionPersistence",
    "select_question_set",
]
