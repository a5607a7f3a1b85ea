import random

import pytest

from campusprep.core.question_selector import QuestionSelector, select_question_set
from campusprep.models.interview import SessionKind
from campusprep.models.question import Question, QuestionCategory as C
from campusprep.models.question_bank import PRACTICE_POOL, get_session_profile


def _q(qid: str, category: C, follow_up_to: str | None = None) -> Question:
    return Question(id=qid, text=f"Question {qid}", category=category, follow_up_to=follow_up_to)


def _pool_with_two_follow_ups() -> list[Question]:
    """20 questions; motivation and future are one short of their quota."""
    return [
        _q("i1", C.ICEBREAKER), _q("i2", C.ICEBREAKER), _q("i3", C.ICEBREAKER),
        _q("b1", C.BACKGROUND), _q("b2", C.BACKGROUND), _q("b3", C.BACKGROUND),
        _q("m1", C.MOTIVATION), _q("m2", C.MOTIVATION),
        _q("s1", C.SKILLS), _q("s2", C.SKILLS), _q("s3", C.SKILLS),
        _q("f1", C.FUTURE), _q("f2", C.FUTURE),
        _q("h1", C.BEHAVIORAL), _q("h2", C.BEHAVIORAL), _q("h3", C.BEHAVIORAL),
        _q("h4", C.BEHAVIORAL), _q("h5", C.BEHAVIORAL),
        _q("m1-follow", C.MOTIVATION, follow_up_to="m1"),
        _q("s1-follow", C.SKILLS, follow_up_to="s1"),
    ]


QUOTAS_15 = {
    C.ICEBREAKER: 1,
    C.BACKGROUND: 2,
    C.MOTIVATION: 3,
    C.SKILLS: 3,
    C.FUTURE: 3,
    C.BEHAVIORAL: 3,
}


def test_selects_both_eligible_follow_ups():
    pool = _pool_with_two_follow_ups()
    selected = select_question_set(pool, 15, QUOTAS_15, rng=random.Random(1))
    ids = [q.id for q in selected]

    assert len(selected) == 15
    assert len(set(ids)) == 15
    assert "m1-follow" in ids
    assert "s1-follow" in ids


def test_follow_up_always_has_parent():
    pool = _pool_with_two_follow_ups()
    for seed in range(25):
        for target in (3, 8, 13, 15, 20):
            selected = select_question_set(pool, target, QUOTAS_15, rng=random.Random(seed))
            ids = {q.id for q in selected}
            assert len(selected) == min(target, len(pool))
            assert len(ids) == len(selected)
            for q in selected:
                if q.is_follow_up:
                    assert q.follow_up_to in ids


def test_follow_up_without_parent_in_pool_is_never_selected():
    pool = [
        _q("a", C.ICEBREAKER),
        _q("b", C.SKILLS),
        _q("orphan", C.SKILLS, follow_up_to="missing"),
    ]
    selected = select_question_set(pool, 3, {}, rng=random.Random(3))
    assert [q.id for q in selected if q.id == "orphan"] == []
    assert len(selected) == 2


def test_follow_up_listed_before_parent_is_backfilled():
    pool = [
        _q("child", C.SKILLS, follow_up_to="parent"),
        _q("parent", C.SKILLS),
    ]
    selected = select_question_set(pool, 2, {}, rng=random.Random(0))
    assert {q.id for q in selected} == {"child", "parent"}


def test_small_pool_returns_whole_pool_shuffled(caplog):
    pool = [_q("a", C.ICEBREAKER), _q("b", C.SKILLS), _q("c", C.FUTURE)]
    with caplog.at_level("WARNING"):
        selected = select_question_set(pool, 15, rng=random.Random(5))
    assert sorted(q.id for q in selected) == ["a", "b", "c"]
    assert "fewer than target" in caplog.text


def test_empty_pool_returns_empty_set():
    assert select_question_set([], 15) == []


def test_zero_target_returns_empty_set():
    assert select_question_set(PRACTICE_POOL, 0) == []


def test_default_practice_set_contents():
    selected = select_question_set(PRACTICE_POOL, 15, rng=random.Random(11))
    ids = {q.id for q in selected}

    # Quotas take 14; the first eligible follow-up fills the last slot
    assert ids == {
        "q1", "q3", "q4", "q6", "q7", "q8", "q9", "q10", "q11",
        "q12", "q13", "q15", "q16", "q17", "q18",
    }


def test_shuffle_uses_injected_rng():
    first = select_question_set(PRACTICE_POOL, 15, rng=random.Random(42))
    second = select_question_set(PRACTICE_POOL, 15, rng=random.Random(42))
    assert [q.id for q in first] == [q.id for q in second]


@pytest.mark.parametrize("kind", list(SessionKind))
def test_selector_honours_profile_size(kind):
    profile = get_session_profile(kind)
    selected = QuestionSelector(profile, rng=random.Random(9)).select()
    assert len(selected) == min(profile.target_size, len(profile.pool))
