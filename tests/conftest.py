import random

import pytest

from campusprep.config import Settings
from campusprep.core.engagement import ReportedPerceptionSource
from campusprep.core.media import SimulatedMediaDevice
from campusprep.core.session_engine import InterviewSessionEngine
from campusprep.core.session_store import InMemoryKeyValueStore, SessionPersistence
from campusprep.models.interview import SessionKind
from campusprep.models.question_bank import get_session_profile


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEpochClock:
    """Epoch-milliseconds clock for persistence tests."""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, storage_backend="memory", report_sink_url="")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def make_engine(settings, clock, store):
    """Builds session engines that share one store and clock, without timers."""

    def _make(
        kind: SessionKind = SessionKind.PRACTICE,
        user_id: str = "student-1",
        seed: int = 7,
        media_device: SimulatedMediaDevice | None = None,
        perception=None,
    ) -> InterviewSessionEngine:
        persistence = SessionPersistence(
            store, f"mockInterviewSession:{user_id}:{kind.value}", ttl_ms=settings.session_ttl_ms
        )
        return InterviewSessionEngine(
            user_id=user_id,
            profile=get_session_profile(kind),
            persistence=persistence,
            media_device=media_device or SimulatedMediaDevice(),
            perception=perception if perception is not None else ReportedPerceptionSource(),
            settings=settings,
            rng=random.Random(seed),
            clock=clock,
            run_timers=False,
        )

    return _make
