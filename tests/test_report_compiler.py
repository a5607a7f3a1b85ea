import json

import httpx
import pytest

from campusprep.core.engagement import EngagementAccumulator
from campusprep.core.report_compiler import ReportCompiler, truncate_transcript
from campusprep.core.report_sink import (
    HttpReportSink,
    InMemoryReportSink,
    ReportSubmitError,
    create_report_sink,
)
from campusprep.models.companies import Company
from campusprep.models.interview import Answer, BehavioralMetrics
from campusprep.models.question_bank import PRACTICE_POOL


class FlakySink(InMemoryReportSink):
    """Fails the first ``failures`` submissions."""

    def __init__(self, failures: int = 1):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    async def submit(self, report):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise ReportSubmitError("service unavailable")
        return await super().submit(report)


def _strong_answers() -> list[Answer]:
    text = " ".join(
        " ".join(["word"] * 66) + "." for _ in range(3)
    ) + " closing words."
    metrics = BehavioralMetrics(face_detected_percentage=95, eye_contact_score=85, mic_activity=90)
    return [
        Answer(question_id=q.id, transcript=text, time_taken_ms=60_000, behavioral_metrics=metrics)
        for q in PRACTICE_POOL[:3]
    ]


def _weak_answers() -> list[Answer]:
    return [
        Answer(question_id=q.id, transcript="Not sure really.", time_taken_ms=280_000)
        for q in PRACTICE_POOL[:2]
    ]


def _engaged() -> EngagementAccumulator:
    return EngagementAccumulator(
        total_duration=100, camera_on_duration=100, face_detected_duration=95, speaking_duration=80
    )


@pytest.fixture
def compiler(settings):
    return ReportCompiler(InMemoryReportSink(), settings=settings)


def test_truncate_transcript():
    assert truncate_transcript("short", 100) == "short"
    assert truncate_transcript("x" * 100, 100) == "x" * 100
    assert truncate_transcript("x" * 150, 100) == "x" * 100 + "..."


def test_strong_session_report(compiler):
    report = compiler.compile(
        "sess_1",
        "student-1",
        "google",
        "frontend",
        "technical",
        _strong_answers(),
        questions=PRACTICE_POOL[:3],
        accumulator=_engaged(),
    )

    assert report.company == "Google"
    assert report.role == "Frontend Engineer"
    assert report.interviewer_name == "Alex Thompson"
    assert report.average_answer_seconds == 60
    assert report.total_duration_ms == 180_000
    assert report.scores.technical >= 80
    assert report.scores.communication >= 80
    assert report.scores.engagement >= 80
    assert "Strong technical knowledge and problem-solving skills" in report.strengths
    assert "Efficient response time management" in report.strengths
    assert "Strong problem-solving skills" in report.strengths
    assert report.behavioral_feedback == ["Excellent behavioral engagement throughout the interview"]
    assert report.answers[0].question_text == PRACTICE_POOL[0].text
    assert report.answers[0].transcript_preview.endswith("...")
    assert len(report.answers[0].transcript_preview) == 103


def test_weak_session_report(compiler):
    report = compiler.compile(
        "sess_2", "student-1", "amazon", "backend", "hr", _weak_answers()
    )

    assert "Work on technical depth and accuracy in answers" in report.improvements
    assert "Improve response structure and clarity" in report.improvements
    assert "Enhance engagement with better camera presence and eye contact" in report.improvements
    assert "Practice more concise responses to improve time management" in report.improvements
    assert "Practice more scalability questions" in report.improvements
    assert report.behavioral_feedback == [
        "Work on maintaining better engagement and professional presence"
    ]


def test_unknown_company_uses_generic_feedback(compiler):
    report = compiler.compile(
        "sess_3", "student-1", "Initech", "Data Wrangler", "technical", _weak_answers()
    )

    assert report.company == "Initech"
    assert report.role == "Data Wrangler"
    assert report.interviewer_name == "AI Interviewer"
    assert report.company_feedback.tips == ["Review company values", "Practice regularly"]


def test_generic_enum_label(compiler):
    report = compiler.compile("sess_4", "s", Company.GENERIC, "general", "practice", [])
    assert report.company == "Company"
    assert report.answers == []
    assert report.scores.overall == 0


def test_behavioral_feedback_middle_tier(compiler):
    metrics = BehavioralMetrics(face_detected_percentage=70, eye_contact_score=60, mic_activity=60)
    answers = [Answer(question_id="q1", transcript="Fine.", behavioral_metrics=metrics)]
    report = compiler.compile("sess_5", "s", "generic", "general", "practice", answers)
    assert report.behavioral_feedback == ["Good behavioral engagement, could improve consistency"]


@pytest.mark.asyncio
async def test_submit_requires_compiled_report(compiler):
    with pytest.raises(KeyError):
        await compiler.submit("missing")


@pytest.mark.asyncio
async def test_failed_submit_keeps_report_for_retry(settings):
    sink = FlakySink(failures=1)
    compiler = ReportCompiler(sink, settings=settings)
    report = compiler.compile("sess_6", "s", "microsoft", "ml", "technical", _strong_answers())

    with pytest.raises(ReportSubmitError):
        await compiler.submit("sess_6")
    assert compiler.get_report("sess_6") is report
    assert compiler.get_report_id("sess_6") is None

    report_id = await compiler.submit("sess_6")
    assert sink.reports[report_id] is report
    assert compiler.get_summary("sess_6").report_id == report_id


def test_summary(compiler):
    assert compiler.get_summary("none") is None
    compiler.compile("sess_7", "s", "google", "frontend", "technical", _weak_answers())
    summary = compiler.get_summary("sess_7")
    assert summary.overall_score == compiler.get_report("sess_7").scores.overall
    assert summary.top_improvement_area == "Work on technical depth and accuracy in answers"


# =============================================================================
# HTTP SINK
# =============================================================================


def _report(compiler):
    return compiler.compile("sess_http", "s", "google", "frontend", "technical", _strong_answers())


@pytest.mark.asyncio
async def test_http_sink_posts_report(compiler, settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"id": "ext-42"})

    sink = HttpReportSink(
        base_url="https://reports.example.test/api/",
        token="secret",
        transport=httpx.MockTransport(handler),
        settings=settings,
    )
    try:
        report_id = await sink.submit(_report(compiler))
    finally:
        await sink.close()

    assert report_id == "ext-42"
    assert seen["path"] == "/api/reports"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"]["session_id"] == "sess_http"
    assert seen["body"]["scores"]["overall"] >= 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, json={"stored": True}),
        httpx.Response(200, content=b"not json"),
    ],
)
async def test_http_sink_failures(compiler, settings, response):
    sink = HttpReportSink(
        base_url="https://reports.example.test",
        transport=httpx.MockTransport(lambda request: response),
        settings=settings,
    )
    try:
        with pytest.raises(ReportSubmitError):
            await sink.submit(_report(compiler))
    finally:
        await sink.close()


@pytest.mark.asyncio
async def test_http_sink_connection_error(compiler, settings):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    sink = HttpReportSink(
        base_url="https://reports.example.test",
        transport=httpx.MockTransport(handler),
        settings=settings,
    )
    try:
        with pytest.raises(ReportSubmitError):
            await sink.submit(_report(compiler))
    finally:
        await sink.close()


@pytest.mark.asyncio
async def test_create_report_sink(settings):
    assert isinstance(create_report_sink(settings), InMemoryReportSink)
    configured = settings.model_copy(update={"report_sink_url": "https://reports.example.test"})
    sink = create_report_sink(configured)
    assert isinstance(sink, HttpReportSink)
    assert sink.base_url == "https://reports.example.test"
    await sink.close()
