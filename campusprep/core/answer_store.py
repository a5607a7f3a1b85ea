"""
Answer Store - ordered answers, one slot per question.
"""

import logging
from datetime import datetime

from campusprep.models.interview import Answer, BehavioralMetrics, utc_now
from campusprep.models.question import Question

logger = logging.getLogger(__name__)


class AnswerStore:
    """Holds exactly one Answer per question, aligned by index."""

    def __init__(self, questions: list[Question] | None = None):
        self._question_ids: list[str] = []
        self._answers: list[Answer] = []
        self.reset(questions or [])

    def __len__(self) -> int:
        return len(self._answers)

    def reset(self, questions: list[Question]) -> None:
        """One empty slot per question."""
        self._question_ids = [q.id for q in questions]
        self._answers = [Answer(question_id=qid) for qid in self._question_ids]

    def restore(self, questions: list[Question], answers: list[Answer]) -> None:
        """Load persisted answers, padding or truncating to the question count."""
        self.reset(questions)
        for i, answer in enumerate(answers[: len(self._answers)]):
            self._answers[i] = answer.model_copy(update={"question_id": self._question_ids[i]})

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._answers):
            raise IndexError(f"Answer index {index} out of range (0..{len(self._answers) - 1})")

    def edit(self, index: int, transcript: str) -> Answer:
        """Replace the transcript draft at ``index``; last write wins."""
        self._check_index(index)
        self._answers[index] = self._answers[index].model_copy(
            update={"transcript": transcript, "timestamp": utc_now()}
        )
        return self._answers[index]

    def record(
        self,
        index: int,
        transcript: str,
        time_taken_ms: int,
        metrics: BehavioralMetrics | None = None,
        timestamp: datetime | None = None,
    ) -> Answer:
        """Store a submitted answer with its timing and engagement metrics."""
        self._check_index(index)
        answer = Answer(
            question_id=self._question_ids[index],
            transcript=transcript,
            time_taken_ms=max(0, int(time_taken_ms)),
            timestamp=timestamp or utc_now(),
            behavioral_metrics=metrics or BehavioralMetrics(),
        )
        self._answers[index] = answer
        logger.debug(f"Recorded answer for {answer.question_id} ({answer.time_taken_ms} ms)")
        return answer

    def get(self, index: int) -> Answer:
        self._check_index(index)
        return self._answers[index]

    @property
    def answers(self) -> list[Answer]:
        return list(self._answers)

    @property
    def transcripts(self) -> list[str]:
        return [a.transcript for a in self._answers]

    @property
    def answered(self) -> list[Answer]:
        return [a for a in self._answers if a.is_answered]
