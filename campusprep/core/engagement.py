"""
Engagement Sampler for CampusPrep

Samples camera, microphone and face-presence signals at a fixed interval
while the camera is on, and accumulates them into durations that the
scoring engine turns into percentages.
"""

import logging
import random
import time
from typing import Callable, Protocol

from pydantic import BaseModel, Field

from campusprep.models.interview import BehavioralMetrics

logger = logging.getLogger(__name__)

EYE_CONTACT_FACE = 85.0
EYE_CONTACT_NO_FACE = 60.0
HEAD_STABILITY = 75.0
MIC_ACTIVITY_ON = 90.0


# ============================================================================
# PERCEPTION SOURCES
# ============================================================================

class PerceptionSource(Protocol):
    """Answers the two questions the sampler asks on every tick."""

    def face_detected(self) -> bool: ...

    def is_speaking(self) -> bool: ...


class SimulatedPerceptionSource:
    """Random perception, used when no client reports real signals."""

    def __init__(
        self,
        face_probability: float = 0.9,
        speaking_probability: float = 0.5,
        rng: random.Random | None = None,
    ):
        self.face_probability = face_probability
        self.speaking_probability = speaking_probability
        self.rng = rng or random.Random()

    def face_detected(self) -> bool:
        return self.rng.random() < self.face_probability

    def is_speaking(self) -> bool:
        return self.rng.random() < self.speaking_probability


class ReportedPerceptionSource:
    """Holds the latest signals reported by the client."""

    def __init__(self, face: bool = False, speaking: bool = False):
        self._face = face
        self._speaking = speaking

    def update(self, face: bool | None = None, speaking: bool | None = None) -> None:
        if face is not None:
            self._face = face
        if speaking is not None:
            self._speaking = speaking

    def face_detected(self) -> bool:
        return self._face

    def is_speaking(self) -> bool:
        return self._speaking


# ============================================================================
# ACCUMULATOR
# ============================================================================

def _percentage(part: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return min(100.0, part / total * 100)


class EngagementAccumulator(BaseModel):
    """Running engagement totals. Durations are in seconds."""

    total_duration: float = Field(default=0.0, ge=0)
    camera_on_duration: float = Field(default=0.0, ge=0)
    face_detected_duration: float = Field(default=0.0, ge=0)
    speaking_duration: float = Field(default=0.0, ge=0)

    # Latest instantaneous readings
    eye_contact_score: float = 0.0
    head_stability: float = 0.0
    mic_activity: float = 0.0

    @property
    def face_pct(self) -> float:
        return _percentage(self.face_detected_duration, self.total_duration)

    @property
    def speaking_pct(self) -> float:
        return _percentage(self.speaking_duration, self.total_duration)

    @property
    def camera_on_pct(self) -> float:
        return _percentage(self.camera_on_duration, self.total_duration)

    def to_metrics(self) -> BehavioralMetrics:
        """Snapshot of the accumulator as per-answer metrics."""
        return BehavioralMetrics(
            face_detected_percentage=round(self.face_pct),
            eye_contact_score=self.eye_contact_score,
            head_stability=self.head_stability,
            camera_on_duration=round(self.camera_on_pct),
            mic_activity=self.mic_activity,
            speaking_percentage=round(self.speaking_pct),
        )


# ============================================================================
# SAMPLER
# ============================================================================

class EngagementSampler:
    """
    Folds one observation per tick into an accumulator.

    The owning session schedules ``tick`` every ``interval_seconds`` while
    the camera is enabled. A missing face occasionally raises a "stay
    visible" advisory which clears itself after ``advisory_clear_seconds``.
    """

    def __init__(
        self,
        source: PerceptionSource,
        interval_seconds: float = 2.0,
        advisory_clear_seconds: float = 3.0,
        advisory_threshold: float = 0.7,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.interval_seconds = interval_seconds
        self.advisory_clear_seconds = advisory_clear_seconds
        self.advisory_threshold = advisory_threshold
        self.rng = rng or random.Random()
        self._clock = clock

        self.accumulator = EngagementAccumulator()
        self.last_face_detected = False
        self._advisory_raised_at: float | None = None

    @property
    def advisory_active(self) -> bool:
        if self._advisory_raised_at is None:
            return False
        if self._clock() - self._advisory_raised_at >= self.advisory_clear_seconds:
            self._advisory_raised_at = None
            return False
        return True

    def clear_advisory(self) -> None:
        self._advisory_raised_at = None

    def reset(self) -> None:
        self.accumulator = EngagementAccumulator()
        self.last_face_detected = False
        self._advisory_raised_at = None

    def tick(self, microphone_enabled: bool) -> bool:
        """
        Take one sample.

        Args:
            microphone_enabled: Whether the audio track is currently enabled

        Returns:
            True when this tick raised the stay-visible advisory
        """
        face = self.source.face_detected()
        speaking = self.source.is_speaking()
        self.last_face_detected = face

        acc = self.accumulator
        acc.total_duration += self.interval_seconds
        acc.camera_on_duration += self.interval_seconds
        if face:
            acc.face_detected_duration += self.interval_seconds
        if speaking:
            acc.speaking_duration += self.interval_seconds
        acc.eye_contact_score = EYE_CONTACT_FACE if face else EYE_CONTACT_NO_FACE
        acc.head_stability = HEAD_STABILITY
        acc.mic_activity = MIC_ACTIVITY_ON if microphone_enabled else 0.0

        if not face and self.rng.random() > self.advisory_threshold:
            self._advisory_raised_at = self._clock()
            logger.debug("Face not detected, raising stay-visible advisory")
            return True
        return False
