import random

import pytest

from campusprep.core.engagement import (
    EngagementAccumulator,
    EngagementSampler,
    ReportedPerceptionSource,
    SimulatedPerceptionSource,
)


class FixedRandom(random.Random):
    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class StepClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_accumulator_percentages_guard_zero_total():
    acc = EngagementAccumulator()
    assert acc.face_pct == 0.0
    assert acc.speaking_pct == 0.0
    assert acc.camera_on_pct == 0.0
    metrics = acc.to_metrics()
    assert metrics.face_detected_percentage == 0


def test_tick_accumulates_durations_and_readings():
    source = ReportedPerceptionSource(face=True, speaking=True)
    sampler = EngagementSampler(source, interval_seconds=2.0, rng=FixedRandom(0.0))

    sampler.tick(microphone_enabled=True)
    source.update(face=False, speaking=False)
    sampler.tick(microphone_enabled=False)

    acc = sampler.accumulator
    assert acc.total_duration == 4.0
    assert acc.camera_on_duration == 4.0
    assert acc.face_detected_duration == 2.0
    assert acc.speaking_duration == 2.0
    assert acc.face_pct == pytest.approx(50.0)
    assert acc.speaking_pct == pytest.approx(50.0)
    assert acc.camera_on_pct == pytest.approx(100.0)

    # Latest instantaneous readings
    assert acc.eye_contact_score == 60.0
    assert acc.head_stability == 75.0
    assert acc.mic_activity == 0.0


def test_eye_contact_and_mic_when_face_visible():
    sampler = EngagementSampler(ReportedPerceptionSource(face=True), rng=FixedRandom(0.0))
    sampler.tick(microphone_enabled=True)
    assert sampler.accumulator.eye_contact_score == 85.0
    assert sampler.accumulator.mic_activity == 90.0


def test_advisory_raised_only_when_face_missing_and_draw_exceeds_threshold():
    clock = StepClock()
    visible = EngagementSampler(
        ReportedPerceptionSource(face=True), rng=FixedRandom(0.99), clock=clock
    )
    assert visible.tick(microphone_enabled=True) is False

    low_draw = EngagementSampler(
        ReportedPerceptionSource(face=False), rng=FixedRandom(0.5), clock=clock
    )
    assert low_draw.tick(microphone_enabled=True) is False
    assert not low_draw.advisory_active

    high_draw = EngagementSampler(
        ReportedPerceptionSource(face=False), rng=FixedRandom(0.8), clock=clock
    )
    assert high_draw.tick(microphone_enabled=True) is True
    assert high_draw.advisory_active


def test_advisory_clears_after_delay():
    clock = StepClock()
    sampler = EngagementSampler(
        ReportedPerceptionSource(face=False),
        advisory_clear_seconds=3.0,
        rng=FixedRandom(0.9),
        clock=clock,
    )
    sampler.tick(microphone_enabled=False)
    clock.now = 2.9
    assert sampler.advisory_active
    clock.now = 3.0
    assert not sampler.advisory_active


def test_metrics_snapshot_from_accumulator():
    acc = EngagementAccumulator(
        total_duration=10,
        camera_on_duration=10,
        face_detected_duration=9,
        speaking_duration=3,
        eye_contact_score=85,
        head_stability=75,
        mic_activity=90,
    )
    metrics = acc.to_metrics()
    assert metrics.face_detected_percentage == 90
    assert metrics.speaking_percentage == 30
    assert metrics.camera_on_duration == 100
    assert metrics.eye_contact_score == 85


def test_simulated_source_follows_probabilities():
    always = SimulatedPerceptionSource(face_probability=1.0, speaking_probability=0.0)
    assert all(always.face_detected() for _ in range(20))
    assert not any(always.is_speaking() for _ in range(20))


def test_reset_clears_totals():
    sampler = EngagementSampler(ReportedPerceptionSource(face=True), rng=FixedRandom(0.0))
    sampler.tick(microphone_enabled=True)
    sampler.reset()
    assert sampler.accumulator.total_duration == 0
    assert sampler.last_face_detected is False
