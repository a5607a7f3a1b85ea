import pytest

from campusprep.core.round_tracker import RoundTracker, RoundTransitionError
from campusprep.models.interview import Round, RoundStatus


def test_rounds_start_not_started_in_order():
    tracker = RoundTracker()
    assert [r.id for r in tracker.rounds] == ["technical", "hr", "gd"]
    assert all(r.status == RoundStatus.NOT_STARTED for r in tracker.rounds)
    assert tracker.progress == 0.0
    assert tracker.active_round is None


def test_start_then_complete():
    tracker = RoundTracker()
    started = tracker.start("technical")
    assert started.status == RoundStatus.IN_PROGRESS
    assert tracker.active_round.id == "technical"
    assert tracker.progress == pytest.approx(1 / 6)

    completed = tracker.complete("technical")
    assert completed.status == RoundStatus.COMPLETED
    assert tracker.active_round is None
    assert tracker.progress == pytest.approx(1 / 3)

    # Other rounds untouched
    assert tracker.get("hr").status == RoundStatus.NOT_STARTED


def test_complete_on_not_started_is_rejected():
    tracker = RoundTracker()
    with pytest.raises(RoundTransitionError):
        tracker.complete("hr")
    assert tracker.get("hr").status == RoundStatus.NOT_STARTED


def test_completed_round_never_reopens():
    tracker = RoundTracker()
    tracker.start("gd")
    tracker.complete("gd")
    with pytest.raises(RoundTransitionError):
        tracker.start("gd")
    with pytest.raises(RoundTransitionError):
        tracker.fail("gd")


def test_only_one_round_in_progress():
    tracker = RoundTracker()
    tracker.start("technical")
    with pytest.raises(RoundTransitionError):
        tracker.start("hr")
    assert tracker.get("hr").status == RoundStatus.NOT_STARTED


def test_fail_is_terminal():
    tracker = RoundTracker()
    tracker.start("hr")
    assert tracker.fail("hr").status == RoundStatus.FAILED
    with pytest.raises(RoundTransitionError):
        tracker.complete("hr")
    # A failed round frees the track for the next one
    tracker.start("technical")


def test_is_finished_when_all_terminal():
    tracker = RoundTracker()
    for round_id in ("technical", "hr"):
        tracker.start(round_id)
        tracker.complete(round_id)
    assert not tracker.is_finished
    tracker.start("gd")
    tracker.fail("gd")
    assert tracker.is_finished
    assert tracker.progress == pytest.approx(2 / 3)


def test_unknown_round():
    with pytest.raises(KeyError):
        RoundTracker().start("coding")


def test_duplicate_round_ids_rejected():
    with pytest.raises(ValueError):
        RoundTracker([Round(id="a", name="A"), Round(id="a", name="A again")])


def test_returned_rounds_are_copies():
    tracker = RoundTracker()
    tracker.rounds[0].status = RoundStatus.COMPLETED
    assert tracker.get("technical").status == RoundStatus.NOT_STARTED


def test_round_status_text():
    tracker = RoundTracker()
    assert tracker.get("hr").status_text == "Not Started"
    tracker.start("hr")
    assert tracker.fail("hr").status_text == "Failed"
    assert tracker.get("hr").model_dump()["status_text"] == "Failed"
