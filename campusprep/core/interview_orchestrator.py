"""
Interview Orchestrator - registry of practice sessions and interview tracks.

This is the central coordinator. It creates session engines for practice
runs and for the rounds of a (company, role) track, moves rounds through
their state machine when a session is submitted or a discussion ends, and
relays those signals to registered navigation listeners.
"""

import logging
import random
from typing import Awaitable, Callable
from uuid import uuid4

from campusprep.config import Settings, get_settings
from campusprep.core.engagement import PerceptionSource, ReportedPerceptionSource
from campusprep.core.group_discussion import GroupDiscussionSession
from campusprep.core.media import MediaDevice, SimulatedMediaDevice
from campusprep.core.report_compiler import ReportCompiler
from campusprep.core.report_sink import InMemoryReportSink
from campusprep.core.round_tracker import RoundTracker
from campusprep.core.session_engine import InterviewSessionEngine
from campusprep.core.session_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SessionPersistence,
    session_key,
)
from campusprep.models.companies import Company
from campusprep.models.interview import Round, SessionEvent, SessionKind
from campusprep.models.question_bank import get_session_profile
from campusprep.models.report import Report

logger = logging.getLogger(__name__)

# Round id -> session kind; rounds missing here run as group discussions
ROUND_SESSION_KINDS: dict[str, SessionKind] = {
    "technical": SessionKind.TECHNICAL,
    "hr": SessionKind.HR,
}
GROUP_DISCUSSION_ROUND = "gd"


class SessionNotFoundError(Exception):
    """Raised when a session id is unknown."""
    pass


class TrackNotFoundError(Exception):
    """Raised when a track id is unknown."""
    pass


class InterviewTrack:
    """One student's run through the rounds of a company/role interview."""

    def __init__(self, user_id: str, company: str, role: str):
        self.track_id = f"trk_{uuid4().hex[:12]}"
        self.user_id = user_id
        self.company_name = company
        self.company = Company.from_name(company)
        self.role = role
        self.tracker = RoundTracker()
        self.round_sessions: dict[str, str] = {}  # round id -> session id

    @property
    def rounds(self) -> list[Round]:
        return self.tracker.rounds


class InterviewOrchestrator:
    """
    Coordinates sessions, rounds and reports.

    Listeners:
    - on_round_complete(track_id, round): a round reached Completed
    - on_session_submitted(session_id): a session was submitted
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        report_compiler: ReportCompiler | None = None,
        media_device_factory: Callable[[], MediaDevice] = SimulatedMediaDevice,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        run_timers: bool = True,
    ):
        self.settings = settings or get_settings()
        self.store = store or InMemoryKeyValueStore()
        self.report_compiler = report_compiler or ReportCompiler(
            InMemoryReportSink(), settings=self.settings
        )
        self.media_device_factory = media_device_factory
        self.rng = rng
        self.run_timers = run_timers

        self._sessions: dict[str, InterviewSessionEngine] = {}
        self._discussions: dict[str, GroupDiscussionSession] = {}
        self._practice: dict[tuple[str, SessionKind], str] = {}
        self._tracks: dict[str, InterviewTrack] = {}
        self._session_rounds: dict[str, tuple[str, str]] = {}  # session id -> (track, round)

        self._round_complete_callbacks: list[Callable[[str, Round], Awaitable[None]]] = []
        self._session_submitted_callbacks: list[Callable[[str], Awaitable[None]]] = []

    # =========================================================================
    # SESSION MANAGEMENT
    # =========================================================================

    def _build_engine(
        self,
        user_id: str,
        kind: SessionKind,
        storage_owner: str,
        client_signals: bool,
    ) -> InterviewSessionEngine:
        target = self.settings.practice_target_size if kind == SessionKind.PRACTICE else None
        perception: PerceptionSource | None = ReportedPerceptionSource() if client_signals else None
        persistence = SessionPersistence(
            self.store,
            session_key(self.settings.persistence_key_prefix, storage_owner, kind),
            ttl_ms=self.settings.session_ttl_ms,
        )
        engine = InterviewSessionEngine(
            user_id=user_id,
            profile=get_session_profile(kind, target),
            persistence=persistence,
            media_device=self.media_device_factory(),
            perception=perception,
            settings=self.settings,
            rng=self.rng,
            run_timers=self.run_timers,
        )
        engine.on_event(self._handle_session_event)
        self._sessions[engine.session_id] = engine
        return engine

    async def open_practice_session(
        self,
        user_id: str,
        kind: SessionKind = SessionKind.PRACTICE,
        client_signals: bool = False,
    ) -> InterviewSessionEngine:
        """
        The user's live session of a kind, resuming a persisted one if present.

        Args:
            user_id: Owner of the session
            kind: Session kind (pool and quotas)
            client_signals: Engagement comes from client reports, not simulation

        Returns:
            An initialized InterviewSessionEngine
        """
        existing_id = self._practice.get((user_id, kind))
        if existing_id is not None:
            engine = self._sessions.get(existing_id)
            if engine is not None and not engine.closed:
                return engine

        engine = self._build_engine(user_id, kind, user_id, client_signals)
        await engine.initialize()
        self._practice[(user_id, kind)] = engine.session_id
        logger.info(f"Opened {kind.value} session {engine.session_id} for {user_id}")
        return engine

    def get_session(self, session_id: str) -> InterviewSessionEngine:
        engine = self._sessions.get(session_id)
        if engine is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return engine

    def list_sessions(self) -> list[InterviewSessionEngine]:
        return list(self._sessions.values())

    async def close_session(self, session_id: str) -> None:
        """Tear the session down; its snapshot stays resumable."""
        self.get_session(session_id)
        await self._release(session_id)

    async def _release(self, runner_id: str) -> None:
        """Forget a session or discussion, then close it."""
        runner = self._sessions.pop(runner_id, None) or self._discussions.pop(runner_id, None)
        self._session_rounds.pop(runner_id, None)
        for key, value in list(self._practice.items()):
            if value == runner_id:
                del self._practice[key]
        if runner is not None:
            await runner.close()

    # =========================================================================
    # TRACKS AND ROUNDS
    # =========================================================================

    def create_track(self, user_id: str, company: str, role: str) -> InterviewTrack:
        track = InterviewTrack(user_id=user_id, company=company, role=role)
        self._tracks[track.track_id] = track
        logger.info(f"Created track {track.track_id}: {company}/{role} for {user_id}")
        return track

    def get_track(self, track_id: str) -> InterviewTrack:
        track = self._tracks.get(track_id)
        if track is None:
            raise TrackNotFoundError(f"Track not found: {track_id}")
        return track

    def list_tracks(self, user_id: str | None = None) -> list[InterviewTrack]:
        return [t for t in self._tracks.values() if user_id is None or t.user_id == user_id]

    async def start_round(
        self,
        track_id: str,
        round_id: str,
        client_signals: bool = False,
    ) -> InterviewSessionEngine | GroupDiscussionSession:
        """
        Start a round and create the session that runs it.

        Raises:
            TrackNotFoundError: Unknown track
            RoundTransitionError: The round is not startable
        """
        track = self.get_track(track_id)
        track.tracker.start(round_id)

        if round_id in ROUND_SESSION_KINDS:
            kind = ROUND_SESSION_KINDS[round_id]
            engine = self._build_engine(
                track.user_id, kind, f"{track.user_id}.{track_id}", client_signals
            )
            self._session_rounds[engine.session_id] = (track_id, round_id)
            track.round_sessions[round_id] = engine.session_id
            await engine.initialize()
            return engine

        discussion = GroupDiscussionSession(
            tick_seconds=self.settings.clock_tick_seconds,
            run_timers=self.run_timers,
        )
        discussion.on_event(self._handle_discussion_event)
        self._discussions[discussion.discussion_id] = discussion
        self._session_rounds[discussion.discussion_id] = (track_id, round_id)
        track.round_sessions[round_id] = discussion.discussion_id
        return discussion

    def get_discussion(self, discussion_id: str) -> GroupDiscussionSession:
        discussion = self._discussions.get(discussion_id)
        if discussion is None:
            raise SessionNotFoundError(f"Discussion not found: {discussion_id}")
        return discussion

    async def complete_round(self, track_id: str, round_id: str) -> Round:
        track = self.get_track(track_id)
        completed = track.tracker.complete(round_id)
        await self._notify_round_complete(track_id, completed)
        return completed

    async def abandon_round(self, track_id: str, round_id: str) -> Round:
        """Close the round's session and mark the round Failed."""
        track = self.get_track(track_id)
        failed = track.tracker.fail(round_id)

        session_id = track.round_sessions.get(round_id)
        if session_id is not None:
            await self._release(session_id)

        logger.info(f"Track {track_id}: round {round_id} abandoned")
        return failed

    async def close_track(self, track_id: str) -> None:
        """Close every session the track started and forget the track."""
        track = self.get_track(track_id)
        for runner_id in track.round_sessions.values():
            await self._release(runner_id)
        del self._tracks[track_id]
        logger.info(f"Closed track {track_id}")

    # =========================================================================
    # REPORTS
    # =========================================================================

    def compile_report(self, session_id: str) -> Report:
        engine = self.get_session(session_id)
        company: str | Company = Company.GENERIC
        role = "general"
        if session_id in self._session_rounds:
            track = self.get_track(self._session_rounds[session_id][0])
            company = track.company_name
            role = track.role

        return self.report_compiler.compile(
            session_id=session_id,
            student_id=engine.user_id,
            company=company,
            role=role,
            interview_type=engine.profile.kind.value,
            answers=engine.answers.answers,
            questions=engine.questions,
            accumulator=engine.sampler.accumulator,
        )

    async def submit_report(self, session_id: str) -> str:
        """Hand the compiled report to the sink, compiling it first if needed."""
        if self.report_compiler.get_report(session_id) is None:
            self.compile_report(session_id)
        return await self.report_compiler.submit(session_id)

    # =========================================================================
    # EVENT HANDLING
    # =========================================================================

    async def _handle_session_event(self, engine, event: SessionEvent, payload: dict) -> None:
        if event != SessionEvent.SESSION_SUBMITTED:
            return

        for callback in self._session_submitted_callbacks:
            try:
                await callback(engine.session_id)
            except Exception as e:
                logger.error(f"Session submitted callback error: {e}")

        if engine.session_id in self._session_rounds:
            track_id, round_id = self._session_rounds[engine.session_id]
            await self.complete_round(track_id, round_id)

    async def _handle_discussion_event(self, discussion, event: SessionEvent, payload: dict) -> None:
        if event != SessionEvent.ROUND_COMPLETE:
            return
        track_id, round_id = self._session_rounds[discussion.discussion_id]
        await self.complete_round(track_id, round_id)

    async def _notify_round_complete(self, track_id: str, completed: Round) -> None:
        for callback in self._round_complete_callbacks:
            try:
                await callback(track_id, completed)
            except Exception as e:
                logger.error(f"Round complete callback error: {e}")

    def on_round_complete(self, callback: Callable[[str, Round], Awaitable[None]]) -> None:
        """Register a callback for completed rounds."""
        self._round_complete_callbacks.append(callback)

    def on_session_submitted(self, callback: Callable[[str], Awaitable[None]]) -> None:
        """Register a callback for submitted sessions."""
        self._session_submitted_callbacks.append(callback)

    # =========================================================================
    # SHUTDOWN
    # =========================================================================

    async def close(self) -> None:
        """Close every live session and the report sink."""
        runners = [*self._sessions.items(), *self._discussions.items()]
        for runner_id, runner in runners:
            try:
                await runner.close()
            except Exception as e:
                logger.error(f"Failed to close {runner_id}: {e}")

        try:
            await self.report_compiler.sink.close()
        except Exception as e:
            logger.error(f"Failed to close report sink: {e}")

        self._sessions.clear()
        self._discussions.clear()
        self._practice.clear()
        self._session_rounds.clear()
        self._tracks.clear()
