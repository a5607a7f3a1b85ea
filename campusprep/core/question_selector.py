"""
Question Selector for CampusPrep

Builds the fixed-size practice set for a session from a categorized pool:
category quotas first, then follow-ups of selected parents, then backfill,
then a uniform shuffle.
"""

import logging
import random
from collections.abc import Mapping, Sequence

from campusprep.models.question import Question, QuestionCategory
from campusprep.models.question_bank import DEFAULT_QUOTAS, SessionProfile

logger = logging.getLogger(__name__)


def select_question_set(
    pool: Sequence[Question],
    target_size: int = 15,
    quotas: Mapping[QuestionCategory, int] | None = None,
    rng: random.Random | None = None,
) -> list[Question]:
    """
    Select a practice set from a question pool.

    Args:
        pool: Candidate questions, in priority order
        target_size: Size of the returned set
        quotas: Per-category counts taken before anything else
        rng: Random source for the final shuffle

    Returns:
        At most ``target_size`` unique questions. Follow-ups only appear
        together with their parent question. A pool smaller than the
        target yields the whole (shuffled) pool.
    """
    if not pool or target_size <= 0:
        return []

    if quotas is None:
        quotas = DEFAULT_QUOTAS
    rng = rng or random.Random()

    if len(pool) < target_size:
        logger.warning(
            f"Question pool has {len(pool)} questions, fewer than target {target_size}"
        )

    selected: list[Question] = []
    selected_ids: set[str] = set()

    def take(question: Question) -> None:
        selected.append(question)
        selected_ids.add(question.id)

    # Category quotas
    for category, quota in quotas.items():
        candidates = [
            q for q in pool
            if q.category == category and not q.is_follow_up and q.id not in selected_ids
        ]
        for question in candidates[:max(0, quota)]:
            if len(selected) >= target_size:
                break
            take(question)

    # Follow-ups whose parent made it in
    for question in pool:
        if not question.is_follow_up or question.id in selected_ids:
            continue
        if question.follow_up_to in selected_ids and len(selected) < target_size:
            take(question)

    # Backfill in pool order; repeat so a follow-up listed before its
    # parent still becomes eligible once the parent is taken
    progressed = True
    while progressed and len(selected) < target_size:
        progressed = False
        for question in pool:
            if len(selected) >= target_size:
                break
            if question.id in selected_ids:
                continue
            if question.is_follow_up and question.follow_up_to not in selected_ids:
                continue
            take(question)
            progressed = True

    # Fisher-Yates
    rng.shuffle(selected)
    return selected[:target_size]


class QuestionSelector:
    """Draws question sets for a session profile."""

    def __init__(self, profile: SessionProfile, rng: random.Random | None = None):
        self.profile = profile
        self.rng = rng or random.Random()

    def select(self) -> list[Question]:
        questions = select_question_set(
            self.profile.pool,
            target_size=self.profile.target_size,
            quotas=self.profile.quotas,
            rng=self.rng,
        )
        logger.debug(
            f"Selected {len(questions)} questions for {self.profile.kind.value} session"
        )
        return questions
