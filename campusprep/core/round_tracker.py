"""
Round Tracker - State machine for the rounds of one interview track.

States:
    NOT_STARTED → IN_PROGRESS → COMPLETED
                       ↓
                     FAILED

Completed and failed rounds are terminal. Only one round of a track may be
in progress at a time.
"""

import logging

from campusprep.models.interview import Round, RoundStatus, default_rounds

logger = logging.getLogger(__name__)


class RoundTransitionError(Exception):
    """Raised when an invalid round transition is attempted."""
    pass


class RoundTracker:
    """Tracks the lifecycle of a fixed, ordered set of rounds."""

    VALID_TRANSITIONS: dict[RoundStatus, list[RoundStatus]] = {
        RoundStatus.NOT_STARTED: [RoundStatus.IN_PROGRESS],
        RoundStatus.IN_PROGRESS: [RoundStatus.COMPLETED, RoundStatus.FAILED],
        RoundStatus.COMPLETED: [],  # Terminal state
        RoundStatus.FAILED: [],  # Terminal state
    }

    def __init__(self, rounds: list[Round] | None = None):
        rounds = rounds if rounds is not None else default_rounds()
        ids = [r.id for r in rounds]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate round ids: {ids}")
        self._rounds: list[Round] = [r.model_copy() for r in rounds]

    @property
    def rounds(self) -> list[Round]:
        return [r.model_copy() for r in self._rounds]

    def get(self, round_id: str) -> Round:
        for r in self._rounds:
            if r.id == round_id:
                return r
        raise KeyError(f"Unknown round: {round_id}")

    @property
    def active_round(self) -> Round | None:
        for r in self._rounds:
            if r.status == RoundStatus.IN_PROGRESS:
                return r
        return None

    @property
    def progress(self) -> float:
        """Fraction of the track done; a round in progress counts as half."""
        if not self._rounds:
            return 0.0
        done = sum(1 for r in self._rounds if r.status == RoundStatus.COMPLETED)
        started = sum(1 for r in self._rounds if r.status == RoundStatus.IN_PROGRESS)
        return (done + 0.5 * started) / len(self._rounds)

    @property
    def is_finished(self) -> bool:
        return all(
            r.status in (RoundStatus.COMPLETED, RoundStatus.FAILED) for r in self._rounds
        )

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def start(self, round_id: str) -> Round:
        active = self.active_round
        if active is not None and active.id != round_id:
            raise RoundTransitionError(
                f"Cannot start {round_id}: round {active.id} is already in progress"
            )
        return self._transition(round_id, RoundStatus.IN_PROGRESS)

    def complete(self, round_id: str) -> Round:
        return self._transition(round_id, RoundStatus.COMPLETED)

    def fail(self, round_id: str) -> Round:
        return self._transition(round_id, RoundStatus.FAILED)

    def _transition(self, round_id: str, new_status: RoundStatus) -> Round:
        r = self.get(round_id)
        old_status = r.status

        valid_next = self.VALID_TRANSITIONS.get(old_status, [])
        if new_status not in valid_next:
            raise RoundTransitionError(
                f"Invalid transition for round {round_id} from {old_status.value} "
                f"to {new_status.value}. Valid transitions: {[s.value for s in valid_next]}"
            )

        r.status = new_status
        logger.info(f"Round {round_id}: {old_status.value} → {new_status.value}")
        return r.model_copy()
