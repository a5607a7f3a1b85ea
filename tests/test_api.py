import random

import pytest
from fastapi.testclient import TestClient

from campusprep.api import dependencies
from campusprep.core.interview_orchestrator import InterviewOrchestrator
from campusprep.core.media import SimulatedMediaDevice
from campusprep.core.report_compiler import ReportCompiler
from campusprep.core.report_sink import InMemoryReportSink, ReportSubmitError
from main import app


class FailingSink(InMemoryReportSink):
    async def submit(self, report):
        raise ReportSubmitError("report service unavailable")


def _install(settings, store, sink=None, media_permission=True) -> InterviewOrchestrator:
    orchestrator = InterviewOrchestrator(
        store=store,
        report_compiler=ReportCompiler(sink or InMemoryReportSink(), settings=settings),
        media_device_factory=lambda: SimulatedMediaDevice(permission=media_permission),
        settings=settings,
        rng=random.Random(5),
        run_timers=False,
    )
    dependencies._orchestrator = orchestrator
    return orchestrator


@pytest.fixture
def client(settings, store):
    _install(settings, store)
    with TestClient(app) as test_client:
        yield test_client
    dependencies._orchestrator = None


def _open(client, user_id="alice", kind="practice") -> dict:
    response = client.post("/api/session", json={"user_id": user_id, "kind": kind})
    assert response.status_code == 200
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_session_flow(client):
    status = _open(client)
    session_id = status["session_id"]
    assert len(status["questions"]) == 15
    assert len(status["answers"]) == 15
    assert status["time_remaining_seconds"] == 300

    # Reopening returns the same live session
    assert _open(client)["session_id"] == session_id

    moved = client.post(f"/api/session/{session_id}/next").json()
    assert moved["current_index"] == 1

    draft = client.put(f"/api/session/{session_id}/answer", json={"transcript": "draft"})
    assert draft.status_code == 200
    assert draft.json()["transcript"] == "draft"

    submitted = client.post(
        f"/api/session/{session_id}/answer",
        json={"transcript": "I built a scheduler. It handled retries."},
    )
    assert submitted.status_code == 200
    assert submitted.json()["question_id"] == status["questions"][1]["id"]

    final = client.post(f"/api/session/{session_id}/submit").json()
    assert final["submitted"] is True

    evaluation = client.get(f"/api/session/{session_id}/evaluation").json()
    assert evaluation["answered_count"] == 1
    assert evaluation["total_questions"] == 15

    late = client.put(f"/api/session/{session_id}/answer", json={"transcript": "late"})
    assert late.status_code == 409
    assert client.post(f"/api/session/{session_id}/reshuffle").status_code == 409


def test_empty_answer_is_rejected(client):
    session_id = _open(client)["session_id"]
    response = client.post(f"/api/session/{session_id}/answer", json={"transcript": "  "})
    assert response.status_code == 400


def test_goto_out_of_range(client):
    session_id = _open(client, kind="hr")["session_id"]
    assert client.post(f"/api/session/{session_id}/goto", json={"index": 2}).json()["current_index"] == 2
    assert client.post(f"/api/session/{session_id}/goto", json={"index": 99}).status_code == 400


def test_view_all_and_clock(client):
    session_id = _open(client)["session_id"]
    client.post(f"/api/session/{session_id}/goto", json={"index": 4})

    view_all = client.post(f"/api/session/{session_id}/view-all").json()
    assert view_all["show_all_questions"] is True
    assert view_all["current_index"] == 0

    paused = client.post(f"/api/session/{session_id}/clock/toggle").json()
    assert paused["clock_running"] is False
    reset = client.post(f"/api/session/{session_id}/clock/reset").json()
    assert reset["elapsed_seconds"] == 0


def test_unknown_session(client):
    assert client.get("/api/session/sess_missing").status_code == 404
    assert client.post("/api/session/sess_missing/next").status_code == 404
    assert client.delete("/api/session/sess_missing").status_code == 404


def test_media_toggles_and_signals(client):
    response = client.post(
        "/api/session", json={"user_id": "alice", "kind": "quick", "client_signals": True}
    )
    session_id = response.json()["session_id"]

    media = client.post(f"/api/session/{session_id}/media", json={})
    assert media.status_code == 200
    assert media.json() == {
        "media_status": "granted",
        "camera_enabled": True,
        "microphone_enabled": True,
    }

    camera = client.post(f"/api/session/{session_id}/camera").json()
    assert camera["camera_enabled"] is False
    microphone = client.post(f"/api/session/{session_id}/microphone").json()
    assert microphone["microphone_enabled"] is False

    signals = client.post(
        f"/api/session/{session_id}/signals", json={"face_detected": True, "speaking": True}
    )
    assert signals.json()["accepted"] is True


def test_media_permission_denied(settings, store):
    _install(settings, store, media_permission=False)
    with TestClient(app) as client:
        session_id = _open(client)["session_id"]
        response = client.post(f"/api/session/{session_id}/media", json={})
        assert response.status_code == 403
        assert "retry" in response.json()["detail"]

        status = client.get(f"/api/session/{session_id}").json()
        assert status["media_status"] == "denied"
    dependencies._orchestrator = None


def test_close_session(client):
    session_id = _open(client)["session_id"]
    assert client.delete(f"/api/session/{session_id}").status_code == 200
    assert client.get(f"/api/session/{session_id}").status_code == 404


# =============================================================================
# TRACKS
# =============================================================================


def test_track_rounds(client):
    track = client.post(
        "/api/track", json={"user_id": "alice", "company": "google", "role": "frontend"}
    ).json()
    track_id = track["track_id"]
    assert track["interviewer_name"] == "Alex Thompson"
    assert [r["id"] for r in track["rounds"]] == ["technical", "hr", "gd"]
    assert track["rounds"][0]["status_text"] == "Not Started"
    assert track["progress"] == 0

    started = client.post(f"/api/track/{track_id}/rounds/technical/start").json()
    assert started["round"]["status"] == "in-progress"
    assert started["round"]["status_text"] == "In Progress"
    session_id = started["session"]["session_id"]

    blocked = client.post(f"/api/track/{track_id}/rounds/hr/start")
    assert blocked.status_code == 409

    client.post(f"/api/session/{session_id}/submit")
    track = client.get(f"/api/track/{track_id}").json()
    assert track["rounds"][0]["status"] == "completed"
    assert track["rounds"][0]["status_text"] == "Completed"
    assert track["progress"] == pytest.approx(1 / 3)
    assert track["active_round"] is None

    gd = client.post(f"/api/track/{track_id}/rounds/gd/start").json()
    discussion_id = gd["discussion"]["discussion_id"]
    assert client.post(f"/api/track/discussion/{discussion_id}/start").json()["active"] is True
    speaking = client.post(f"/api/track/discussion/{discussion_id}/participants/1/speak").json()
    assert speaking["participants"][0]["is_speaking"] is True
    assert client.post(f"/api/track/discussion/{discussion_id}/participants/9/speak").status_code == 404
    assert client.post(f"/api/track/discussion/{discussion_id}/end").json()["ended"] is True

    track = client.get(f"/api/track/{track_id}").json()
    assert track["rounds"][2]["status"] == "completed"


def test_track_errors(client):
    assert client.get("/api/track/trk_missing").status_code == 404
    track_id = client.post(
        "/api/track", json={"user_id": "alice", "company": "amazon", "role": "backend"}
    ).json()["track_id"]
    assert client.post(f"/api/track/{track_id}/rounds/coding/start").status_code == 404
    assert client.post(f"/api/track/{track_id}/rounds/hr/complete").status_code == 409

    client.post(f"/api/track/{track_id}/rounds/hr/start")
    abandoned = client.post(f"/api/track/{track_id}/rounds/hr/abandon").json()
    assert abandoned["status"] == "failed"


def test_close_track(client):
    track_id = client.post(
        "/api/track", json={"user_id": "alice", "company": "google", "role": "frontend"}
    ).json()["track_id"]
    session_id = client.post(f"/api/track/{track_id}/rounds/hr/start").json()["session"]["session_id"]

    assert client.delete(f"/api/track/{track_id}").status_code == 200
    assert client.get(f"/api/track/{track_id}").status_code == 404
    assert client.get(f"/api/session/{session_id}").status_code == 404
    assert client.delete(f"/api/track/{track_id}").status_code == 404


# =============================================================================
# REPORTS
# =============================================================================


def test_report_compile_and_submit(client):
    session_id = _open(client)["session_id"]
    client.post(f"/api/session/{session_id}/answer", json={"transcript": "One. Two. Three."})

    assert client.get(f"/api/report/{session_id}").status_code == 404

    report = client.post(f"/api/report/{session_id}").json()
    assert report["session_id"] == session_id
    assert report["company"] == "Company"
    assert len(report["answers"]) == 1

    submitted = client.post(f"/api/report/{session_id}/submit").json()
    assert submitted["status"] == "submitted"
    assert submitted["report_id"].startswith("rpt_")

    summary = client.get(f"/api/report/{session_id}/summary").json()
    assert summary["report_id"] == submitted["report_id"]
    assert client.get(f"/api/report/{session_id}/answers").status_code == 200


def test_report_submit_failure_is_retryable(settings, store):
    _install(settings, store, sink=FailingSink())
    with TestClient(app) as client:
        session_id = _open(client)["session_id"]
        response = client.post(f"/api/report/{session_id}/submit")
        assert response.status_code == 502
        assert "retry" in response.json()["detail"]
        assert client.get(f"/api/report/{session_id}").status_code == 200
    dependencies._orchestrator = None


def test_report_for_unknown_session(client):
    assert client.post("/api/report/sess_missing").status_code == 404
    assert client.post("/api/report/sess_missing/submit").status_code == 404


# =============================================================================
# METADATA
# =============================================================================


def test_metadata(client):
    companies = client.get("/api/metadata/companies").json()
    assert [c["id"] for c in companies] == ["google", "microsoft", "amazon"]

    kinds = {k["id"]: k for k in client.get("/api/metadata/session-kinds").json()}
    assert kinds["practice"]["target_size"] == 15

    assert client.get("/api/metadata/categories/icebreaker/questions").status_code == 200
    assert client.get("/api/metadata/categories/nonsense/questions").status_code == 404
    assert [r["id"] for r in client.get("/api/metadata/rounds").json()] == ["technical", "hr", "gd"]
    assert len(client.get("/api/metadata/confidence-levels").json()) == 4
