"""
Group Discussion round - a timed discussion with AI participants.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable
from uuid import uuid4

from pydantic import BaseModel

from campusprep.core.timers import PeriodicTask, QuestionCountdown
from campusprep.models.interview import SessionEvent

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "The impact of AI on future careers"
DEFAULT_DURATION_SECONDS = 300


class Participant(BaseModel):
    id: int
    name: str
    is_speaking: bool = False


class DiscussionStatus(BaseModel):
    discussion_id: str
    topic: str
    participants: list[Participant]
    active: bool
    ended: bool
    time_remaining_seconds: int


def default_participants() -> list[Participant]:
    return [
        Participant(id=1, name="You"),
        Participant(id=2, name="AI Participant 1"),
        Participant(id=3, name="AI Participant 2"),
        Participant(id=4, name="AI Participant 3"),
    ]


DiscussionListener = Callable[["GroupDiscussionSession", SessionEvent, dict[str, Any]], Awaitable[None]]


class GroupDiscussionSession:
    """
    Countdown-bound discussion. Reaching zero stops the discussion with a
    TIME_UP event; ending it explicitly emits ROUND_COMPLETE.
    """

    def __init__(
        self,
        topic: str = DEFAULT_TOPIC,
        duration_seconds: int = DEFAULT_DURATION_SECONDS,
        participants: list[Participant] | None = None,
        tick_seconds: float = 1.0,
        run_timers: bool = True,
    ):
        self.discussion_id = f"gd_{uuid4().hex[:12]}"
        self.topic = topic
        self.participants = participants if participants is not None else default_participants()
        self.countdown = QuestionCountdown(duration_seconds)
        self.active = False
        self.ended = False
        self._run_timers = run_timers
        self._task = PeriodicTask(f"{self.discussion_id}:countdown", tick_seconds, self.tick)
        self._listeners: list[DiscussionListener] = []

    def status(self) -> DiscussionStatus:
        return DiscussionStatus(
            discussion_id=self.discussion_id,
            topic=self.topic,
            participants=[p.model_copy() for p in self.participants],
            active=self.active,
            ended=self.ended,
            time_remaining_seconds=self.countdown.remaining_seconds,
        )

    def start(self) -> DiscussionStatus:
        if self.ended:
            raise ValueError(f"Discussion {self.discussion_id} has already ended")
        if self.countdown.expired:
            return self.status()
        self.active = True
        if self._run_timers:
            try:
                asyncio.get_running_loop()
                self._task.start()
            except RuntimeError:
                pass
        logger.info(f"Group discussion {self.discussion_id} started: {self.topic}")
        return self.status()

    def toggle_speaking(self, participant_id: int) -> Participant:
        for participant in self.participants:
            if participant.id == participant_id:
                participant.is_speaking = not participant.is_speaking
                return participant
        raise KeyError(f"Unknown participant: {participant_id}")

    async def tick(self) -> bool:
        """One second off the countdown; returns True when time ran out."""
        if not self.active:
            return False
        if self.countdown.tick():
            self.active = False
            logger.info(f"Group discussion {self.discussion_id} ran out of time")
            await self._emit(SessionEvent.TIME_UP, {"discussion_id": self.discussion_id})
            # tick usually runs inside this task; cancel only after listeners ran
            self._task.cancel()
            return True
        return False

    async def end(self) -> DiscussionStatus:
        """Finish the discussion; the round it belongs to is then complete."""
        if self.ended:
            return self.status()
        self.active = False
        self.ended = True
        self._task.cancel()
        logger.info(f"Group discussion {self.discussion_id} ended")
        await self._emit(SessionEvent.ROUND_COMPLETE, {"discussion_id": self.discussion_id})
        return self.status()

    async def close(self) -> None:
        self.active = False
        self._task.cancel()

    def on_event(self, callback: DiscussionListener) -> None:
        """Register a callback for discussion events."""
        self._listeners.append(callback)

    async def _emit(self, event: SessionEvent, payload: dict[str, Any]) -> None:
        for callback in self._listeners:
            try:
                await callback(self, event, payload)
            except Exception as e:
                logger.error(f"Event callback error for {event.value}: {e}")
