"""
Evaluation Engine for CampusPrep

Pure scoring functions from answers and engagement totals to session
scores and a readiness tier, plus the EvaluationEngine that assembles
them into a SessionEvaluation.
"""

import logging
import math
import re
from collections.abc import Sequence

from campusprep.core.engagement import EngagementAccumulator
from campusprep.models.evaluation import (
    AnswerScore,
    ConfidenceLevel,
    Scores,
    SessionEvaluation,
)
from campusprep.models.interview import Answer, BehavioralMetrics

logger = logging.getLogger(__name__)

TIME_LIMIT_MS = 300_000
TARGET_WORDS = 200
TARGET_SENTENCES = 3

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


# ============================================================================
# HELPERS
# ============================================================================

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def count_words(text: str) -> int:
    return len(text.split())


def count_sentences(text: str) -> int:
    """Non-empty segments between sentence terminators."""
    return sum(1 for part in _SENTENCE_SPLIT.split(text) if part.strip())


# ============================================================================
# PER-ANSWER SCORES
# ============================================================================

def time_score(time_taken_ms: int) -> float:
    return clamp(100 - time_taken_ms / TIME_LIMIT_MS * 100)


def word_score(word_count: int) -> float:
    return clamp(word_count / TARGET_WORDS * 100)


def technical_score(answer: Answer) -> float:
    return 0.4 * time_score(answer.time_taken_ms) + 0.6 * word_score(count_words(answer.transcript))


def communication_score(answer: Answer) -> float:
    words = count_words(answer.transcript)
    word_closeness = clamp(100 - abs(TARGET_WORDS - words))
    sentence_adequacy = clamp(count_sentences(answer.transcript) / TARGET_SENTENCES * 100)
    return 0.6 * word_closeness + 0.4 * sentence_adequacy


def answer_report_score(answer: Answer) -> int:
    """
    Score shown next to each answer in a report.

    Blends answer speed with the behavioral signals captured while answering.
    """
    metrics = answer.behavioral_metrics
    behavior = (
        0.3 * metrics.face_detected_percentage
        + 0.3 * metrics.eye_contact_score
        + 0.4 * metrics.mic_activity
    )
    return int(clamp(round_half_up(0.4 * time_score(answer.time_taken_ms) + 0.6 * behavior)))


def score_answer(answer: Answer) -> AnswerScore:
    return AnswerScore(
        question_id=answer.question_id,
        word_count=count_words(answer.transcript),
        sentence_count=count_sentences(answer.transcript),
        time_score=time_score(answer.time_taken_ms),
        word_score=word_score(count_words(answer.transcript)),
        technical=technical_score(answer),
        communication=communication_score(answer),
    )


# ============================================================================
# SESSION SCORES
# ============================================================================

def engagement_score(accumulator: EngagementAccumulator) -> int:
    if accumulator.total_duration <= 0:
        return 0
    return int(clamp(round_half_up(
        0.4 * accumulator.face_pct
        + 0.3 * accumulator.speaking_pct
        + 0.3 * accumulator.camera_on_pct
    )))


def overall_score(technical: int, communication: int, engagement: int) -> int:
    return int(clamp(round_half_up(0.5 * technical + 0.3 * communication + 0.2 * engagement)))


def confidence_level_for(overall: int) -> ConfidenceLevel:
    if overall >= 85:
        return ConfidenceLevel.JOB_READY
    if overall >= 70:
        return ConfidenceLevel.INTERMEDIATE
    if overall >= 50:
        return ConfidenceLevel.BEGINNER
    return ConfidenceLevel.NEEDS_IMPROVEMENT


def score_session(
    answers: Sequence[Answer],
    accumulator: EngagementAccumulator | None = None,
) -> Scores:
    """
    Aggregate scores for a session.

    Args:
        answers: Answer slots; unanswered slots are ignored
        accumulator: Engagement totals for the session

    Returns:
        Integer Scores; all zeros when nothing was answered
    """
    answered = [a for a in answers if a.is_answered]
    if not answered:
        return Scores()

    technical = round_half_up(sum(technical_score(a) for a in answered) / len(answered))
    communication = round_half_up(sum(communication_score(a) for a in answered) / len(answered))
    engagement = engagement_score(accumulator) if accumulator is not None else 0
    overall = overall_score(technical, communication, engagement)

    return Scores(
        technical=int(clamp(technical)),
        communication=int(clamp(communication)),
        engagement=engagement,
        overall=overall,
        confidence_level=confidence_level_for(overall),
    )


def average_behavioral_metrics(answers: Sequence[Answer]) -> BehavioralMetrics:
    """Per-field mean across answers, rounded; zeros for no answers."""
    if not answers:
        return BehavioralMetrics()

    fields = BehavioralMetrics.model_fields.keys()
    averages = {
        name: round_half_up(
            sum(getattr(a.behavioral_metrics, name) for a in answers) / len(answers)
        )
        for name in fields
    }
    return BehavioralMetrics(**averages)


class EvaluationEngine:
    """
    Central evaluation component for practice sessions.

    Responsibilities:
    - Score individual answers
    - Aggregate session scores and readiness tier
    - Average behavioral metrics across answers
    """

    def evaluate(
        self,
        answers: Sequence[Answer],
        accumulator: EngagementAccumulator | None = None,
    ) -> SessionEvaluation:
        answered = [a for a in answers if a.is_answered]
        scores = score_session(answers, accumulator)

        evaluation = SessionEvaluation(
            scores=scores,
            answer_scores=[score_answer(a) for a in answered],
            average_metrics=average_behavioral_metrics(answered),
            answered_count=len(answered),
            total_questions=len(answers),
            total_time_taken_ms=sum(a.time_taken_ms for a in answered),
        )

        logger.info(
            f"Evaluated session: {evaluation.answered_count}/{evaluation.total_questions} answered, "
            f"overall {scores.overall} ({scores.confidence_level.value})"
        )
        return evaluation
