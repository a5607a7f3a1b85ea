"""
Interview Session Engine - one timed run through a selected question set.

The engine owns the selected questions, the answer slots, the three
periodic callbacks (session clock, question countdown, engagement
sampler) and the media stream. Every observable mutation is followed by a
snapshot through SessionPersistence so the session can be resumed.

Lifecycle:
    NEW --initialize--> ACTIVE --submit--> SUBMITTED
     \\                    \\                  \\
      `------------------- close ------------> CLOSED
"""

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable
from uuid import uuid4

from campusprep.config import Settings, get_settings
from campusprep.core.answer_store import AnswerStore
from campusprep.core.engagement import (
    EngagementSampler,
    PerceptionSource,
    ReportedPerceptionSource,
    SimulatedPerceptionSource,
)
from campusprep.core.evaluation_engine import EvaluationEngine
from campusprep.core.media import (
    MediaConstraints,
    MediaDevice,
    MediaPermissionDenied,
    MediaStream,
    MediaUnsupported,
    SimulatedMediaDevice,
)
from campusprep.core.question_selector import QuestionSelector
from campusprep.core.session_store import SessionPersistence
from campusprep.core.timers import PeriodicTask, QuestionCountdown, SessionClock
from campusprep.models.evaluation import SessionEvaluation
from campusprep.models.interview import (
    Answer,
    MediaStatus,
    SessionEvent,
    SessionSnapshot,
    SessionStatus,
)
from campusprep.models.question import Question
from campusprep.models.question_bank import SessionProfile

logger = logging.getLogger(__name__)

EventListener = Callable[["InterviewSessionEngine", SessionEvent, dict[str, Any]], Awaitable[None]]


class SessionNotInitializedError(Exception):
    """Raised when an operation runs before initialize() or after close()."""
    pass


class AnswerRequiredError(Exception):
    """Raised when submitting an empty answer."""
    pass


class SessionAlreadySubmittedError(Exception):
    """Raised when mutating answers of a submitted session."""
    pass


class InterviewSessionEngine:
    """
    Drives one practice or round session.

    Timers only run inside an event loop; ``run_timers=False`` leaves the
    periodic callbacks to be driven manually through the ``tick_*`` methods.
    """

    def __init__(
        self,
        user_id: str,
        profile: SessionProfile,
        persistence: SessionPersistence | None = None,
        media_device: MediaDevice | None = None,
        perception: PerceptionSource | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        run_timers: bool = True,
        session_id: str | None = None,
    ):
        self.settings = settings or get_settings()
        self.session_id = session_id or f"sess_{uuid4().hex[:12]}"
        self.user_id = user_id
        self.profile = profile
        self.persistence = persistence
        self.media_device = media_device or SimulatedMediaDevice()
        self.rng = rng or random.Random()
        self._clock = clock
        self._run_timers = run_timers

        self.perception = perception or SimulatedPerceptionSource(
            face_probability=self.settings.simulated_face_probability,
            speaking_probability=self.settings.simulated_speaking_probability,
            rng=self.rng,
        )
        self.selector = QuestionSelector(profile, rng=self.rng)
        self.evaluation_engine = EvaluationEngine()

        # Session state
        self.questions: list[Question] = []
        self.answers = AnswerStore()
        self.current_index = 0
        self.show_all_questions = False
        self.active = False
        self.submitted = False

        # Timers and engagement
        self.countdown = QuestionCountdown(self.settings.question_time_limit_seconds)
        self.session_clock = SessionClock()
        self.sampler = EngagementSampler(
            self.perception,
            interval_seconds=self.settings.engagement_sample_interval_seconds,
            advisory_clear_seconds=self.settings.advisory_clear_seconds,
            advisory_threshold=self.settings.advisory_trigger_threshold,
            rng=self.rng,
            clock=clock,
        )
        self._question_started_at = clock()

        # Media
        self.stream: MediaStream | None = None
        self.media_status = MediaStatus.NOT_REQUESTED

        self._tasks = {
            "clock": PeriodicTask(
                f"{self.session_id}:clock", self.settings.clock_tick_seconds, self.tick_clock
            ),
            "countdown": PeriodicTask(
                f"{self.session_id}:countdown", self.settings.clock_tick_seconds, self.tick_countdown
            ),
            "sampler": PeriodicTask(
                f"{self.session_id}:sampler",
                self.settings.engagement_sample_interval_seconds,
                self.tick_sampler,
            ),
        }

        self._init_lock = asyncio.Lock()
        self._initialized = False
        self._closed = False
        self._listeners: list[EventListener] = []

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def current_question(self) -> Question | None:
        if not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def camera_enabled(self) -> bool:
        return self.stream is not None and self.stream.video_enabled

    @property
    def microphone_enabled(self) -> bool:
        return self.stream is not None and self.stream.audio_enabled

    def task_running(self, name: str) -> bool:
        return self._tasks[name].running

    # =========================================================================
    # SESSION SETUP
    # =========================================================================

    async def initialize(self) -> SessionStatus:
        """
        Restore the persisted session or start a fresh one.

        Runs once per engine; later calls return the current status.
        """
        async with self._init_lock:
            if self._closed:
                raise SessionNotInitializedError(f"Session {self.session_id} is closed")
            if self._initialized:
                logger.debug(f"Session {self.session_id} already initialized")
                return self.status()

            snapshot = await self.persistence.load() if self.persistence else None
            if snapshot is not None and snapshot.questions:
                self._restore(snapshot)
                logger.info(
                    f"Restored session {self.session_id} for {self.user_id} "
                    f"at question {self.current_index + 1}/{len(self.questions)}"
                )
                self._initialized = True
                self._sync_timers()
            else:
                self._initialized = True
                await self.start_new_session()

            return self.status()

    def _restore(self, snapshot: SessionSnapshot) -> None:
        self.questions = list(snapshot.questions)
        self.answers.restore(self.questions, snapshot.answer_list())
        self.current_index = snapshot.current_index
        self.show_all_questions = snapshot.show_all_questions
        self.active = snapshot.active
        self.submitted = snapshot.submitted
        self._activate_question()
        if self.active and not self.submitted:
            self.session_clock.start()

    async def start_new_session(self) -> SessionStatus:
        """Fresh question set, empty answers, clock running."""
        self._require_initialized()
        self.questions = self.selector.select()
        self.answers.reset(self.questions)
        self.current_index = 0
        self.show_all_questions = False
        self.active = True
        self.submitted = False
        self.session_clock.reset()
        self.session_clock.start()
        self.sampler.reset()
        self._activate_question()
        self._sync_timers()

        logger.info(
            f"Started {self.profile.kind.value} session {self.session_id} "
            f"with {len(self.questions)} questions"
        )
        await self._save()
        return self.status()

    async def restart(self) -> SessionStatus:
        return await self.start_new_session()

    async def reshuffle(self) -> SessionStatus:
        """Draw a new question set and clear the answers, keeping the clock."""
        self._require_initialized()
        self._require_not_submitted()
        self.questions = self.selector.select()
        self.answers.reset(self.questions)
        self.current_index = 0
        self._activate_question()
        await self._save()
        return self.status()

    # =========================================================================
    # NAVIGATION
    # =========================================================================

    async def next_question(self) -> bool:
        self._require_initialized()
        if self.current_index >= len(self.questions) - 1:
            return False
        await self._move_to(self.current_index + 1)
        return True

    async def previous_question(self) -> bool:
        self._require_initialized()
        if self.current_index <= 0:
            return False
        await self._move_to(self.current_index - 1)
        return True

    async def go_to(self, index: int) -> None:
        self._require_initialized()
        if not 0 <= index < len(self.questions):
            raise IndexError(f"Question index {index} out of range (0..{len(self.questions) - 1})")
        await self._move_to(index)

    async def _move_to(self, index: int) -> None:
        if index != self.current_index:
            self.current_index = index
            self._activate_question()
        await self._save()

    async def toggle_view_all(self) -> bool:
        self._require_initialized()
        self.show_all_questions = not self.show_all_questions
        if self.show_all_questions:
            self.current_index = 0
            self._activate_question()
        await self._save()
        return self.show_all_questions

    def _activate_question(self) -> None:
        self.countdown.reset()
        self.sampler.clear_advisory()
        self._question_started_at = self._clock()

    # =========================================================================
    # ANSWERS
    # =========================================================================

    async def edit_answer(self, transcript: str, index: int | None = None) -> Answer:
        """Update the draft answer for a question (the current one by default)."""
        self._require_initialized()
        self._require_not_submitted()
        answer = self.answers.edit(self.current_index if index is None else index, transcript)
        await self._save()
        return answer

    async def submit_answer(self, transcript: str | None = None) -> Answer:
        """
        Record the current question's answer with timing and engagement.

        Args:
            transcript: Final answer text; defaults to the current draft

        Raises:
            AnswerRequiredError: If the answer is blank
        """
        self._require_initialized()
        self._require_not_submitted()
        if self.current_question is None:
            raise AnswerRequiredError("There is no question to answer")

        text = self.answers.get(self.current_index).transcript if transcript is None else transcript
        if not text.strip():
            raise AnswerRequiredError("Please provide an answer before submitting")

        time_taken_ms = int((self._clock() - self._question_started_at) * 1000)
        answer = self.answers.record(
            self.current_index,
            text,
            time_taken_ms=time_taken_ms,
            metrics=self.sampler.accumulator.to_metrics(),
        )
        logger.info(
            f"Session {self.session_id}: answered {answer.question_id} in {time_taken_ms} ms"
        )
        await self._save()
        return answer

    # =========================================================================
    # MEDIA AND ENGAGEMENT
    # =========================================================================

    async def enable_media(self, video: bool = True, audio: bool = True) -> MediaStatus:
        """
        Acquire the camera/microphone stream. Safe to call again to retry.

        Raises:
            MediaPermissionDenied: The user refused access
            MediaUnsupported: No capture device is available
        """
        self._require_initialized()
        if self.stream is not None and not self.stream.released:
            return self.media_status

        try:
            self.stream = await self.media_device.acquire(MediaConstraints(video=video, audio=audio))
        except MediaPermissionDenied:
            self.media_status = MediaStatus.DENIED
            logger.warning(f"Session {self.session_id}: media permission denied")
            raise
        except MediaUnsupported:
            self.media_status = MediaStatus.UNSUPPORTED
            logger.warning(f"Session {self.session_id}: media unsupported")
            raise

        self.media_status = MediaStatus.GRANTED
        self._sync_timers()
        logger.info(f"Session {self.session_id}: media stream {self.stream.id} acquired")
        return self.media_status

    def toggle_camera(self) -> bool:
        """Enable or disable the video track. Returns the new camera state."""
        if self.stream is None or self.stream.released:
            return False
        self.stream.set_video(not self.stream.video_enabled)
        self._sync_timers()
        return self.camera_enabled

    def toggle_microphone(self) -> bool:
        """Enable or disable the audio track. Returns the new microphone state."""
        if self.stream is None or self.stream.released:
            return False
        self.stream.set_audio(not self.stream.audio_enabled)
        return self.microphone_enabled

    def report_signals(self, face: bool | None = None, speaking: bool | None = None) -> bool:
        """Feed client-observed signals. Ignored unless signals are client-reported."""
        if not isinstance(self.perception, ReportedPerceptionSource):
            logger.debug(f"Session {self.session_id}: ignoring reported signals")
            return False
        self.perception.update(face=face, speaking=speaking)
        return True

    # =========================================================================
    # CLOCK
    # =========================================================================

    def toggle_clock(self) -> bool:
        self._require_initialized()
        running = self.session_clock.toggle()
        self._sync_timers()
        return running

    def reset_clock(self) -> None:
        self._require_initialized()
        self.session_clock.reset()
        self._sync_timers()

    # =========================================================================
    # PERIODIC CALLBACKS
    # =========================================================================

    def tick_clock(self) -> None:
        if self.active and not self.submitted:
            self.session_clock.tick()

    async def tick_countdown(self) -> bool:
        """One second off the question countdown; emits TIME_UP once."""
        if not self.active or self.submitted or self.current_question is None:
            return False
        if self.countdown.tick():
            await self._emit(SessionEvent.TIME_UP, {
                "question_id": self.current_question.id,
                "index": self.current_index,
            })
            return True
        return False

    async def tick_sampler(self) -> bool:
        """One engagement sample; emits STAY_VISIBLE when the advisory fires."""
        if self.submitted or not self.camera_enabled:
            return False
        if self.sampler.tick(microphone_enabled=self.microphone_enabled):
            await self._emit(SessionEvent.STAY_VISIBLE, {
                "clear_after_seconds": self.sampler.advisory_clear_seconds,
            })
            return True
        return False

    def _sync_timers(self) -> None:
        """Start or cancel each periodic task to match the session phase."""
        if not self._run_timers:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return

        live = self._initialized and not self._closed and self.active and not self.submitted
        wanted = {
            "clock": live and self.session_clock.running,
            "countdown": live,
            "sampler": live and self.camera_enabled,
        }
        for name, should_run in wanted.items():
            if should_run:
                self._tasks[name].start()
            else:
                self._tasks[name].cancel()

    # =========================================================================
    # COMPLETION
    # =========================================================================

    async def submit(self) -> SessionStatus:
        """Finish the session and emit SESSION_SUBMITTED. Repeat calls are no-ops."""
        self._require_initialized()
        if self.submitted:
            return self.status()

        self.submitted = True
        self.session_clock.pause()
        self._sync_timers()
        await self._save()

        logger.info(
            f"Session {self.session_id} submitted: "
            f"{len(self.answers.answered)}/{len(self.questions)} answered"
        )
        await self._emit(SessionEvent.SESSION_SUBMITTED, {
            "answered": len(self.answers.answered),
            "total": len(self.questions),
        })
        return self.status()

    def evaluate(self) -> SessionEvaluation:
        return self.evaluation_engine.evaluate(self.answers.answers, self.sampler.accumulator)

    async def close(self) -> None:
        """Cancel all periodic callbacks and release the media stream."""
        if self._closed:
            return
        self._closed = True
        for task in self._tasks.values():
            task.cancel()
        if self.stream is not None:
            try:
                await self.media_device.release(self.stream)
            finally:
                self.media_status = MediaStatus.RELEASED
        logger.info(f"Session {self.session_id} closed")

    # =========================================================================
    # STATE
    # =========================================================================

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            kind=self.profile.kind,
            questions=self.questions,
            answers=self.answers.answers,
            current_index=self.current_index,
            show_all_questions=self.show_all_questions,
            active=self.active,
            submitted=self.submitted,
        )

    def status(self) -> SessionStatus:
        return SessionStatus(
            session_id=self.session_id,
            user_id=self.user_id,
            kind=self.profile.kind,
            questions=self.questions,
            answers=self.answers.answers,
            current_index=self.current_index,
            show_all_questions=self.show_all_questions,
            active=self.active,
            submitted=self.submitted,
            time_remaining_seconds=self.countdown.remaining_seconds,
            time_up=self.countdown.expired,
            elapsed_seconds=self.session_clock.elapsed_seconds,
            clock_running=self.session_clock.running,
            media_status=self.media_status,
            camera_enabled=self.camera_enabled,
            microphone_enabled=self.microphone_enabled,
            face_detected=self.sampler.last_face_detected,
            stay_visible_advisory=self.sampler.advisory_active,
            engagement_seconds=self.sampler.accumulator.total_duration,
        )

    async def _save(self) -> None:
        if self.persistence is not None:
            await self.persistence.save(self.snapshot())

    def _require_initialized(self) -> None:
        if self._closed:
            raise SessionNotInitializedError(f"Session {self.session_id} is closed")
        if not self._initialized:
            raise SessionNotInitializedError(f"Session {self.session_id} is not initialized")

    def _require_not_submitted(self) -> None:
        if self.submitted:
            raise SessionAlreadySubmittedError(f"Session {self.session_id} was already submitted")

    # =========================================================================
    # EVENT CALLBACKS
    # =========================================================================

    def on_event(self, callback: EventListener) -> None:
        """Register a callback for session events."""
        self._listeners.append(callback)

    async def _emit(self, event: SessionEvent, payload: dict[str, Any]) -> None:
        for callback in self._listeners:
            try:
                await callback(self, event, payload)
            except Exception as e:
                logger.error(f"Event callback error for {event.value}: {e}")
