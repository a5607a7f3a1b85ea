"""
Session API endpoints

Handles the practice/round session lifecycle:
- Opening and resuming sessions
- Navigating questions
- Editing and submitting answers
- Media, engagement signals and the session clock
- Submitting and closing sessions
"""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from campusprep.api.dependencies import get_orchestrator
from campusprep.core.interview_orchestrator import SessionNotFoundError
from campusprep.core.media import MediaPermissionDenied, MediaUnsupported
from campusprep.core.session_engine import (
    AnswerRequiredError,
    InterviewSessionEngine,
    SessionAlreadySubmittedError,
    SessionNotInitializedError,
)
from campusprep.models.evaluation import SessionEvaluation
from campusprep.models.interview import Answer, MediaStatus, SessionKind, SessionStatus

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class OpenSessionRequest(BaseModel):
    """Request model for opening a session."""
    user_id: str
    kind: SessionKind = SessionKind.PRACTICE
    client_signals: bool = False


class GoToRequest(BaseModel):
    index: int


class EditAnswerRequest(BaseModel):
    transcript: str
    index: int | None = None


class SubmitAnswerRequest(BaseModel):
    transcript: str | None = None


class MediaRequest(BaseModel):
    video: bool = True
    audio: bool = True


class MediaResponse(BaseModel):
    media_status: MediaStatus
    camera_enabled: bool
    microphone_enabled: bool


class SignalsRequest(BaseModel):
    face_detected: bool | None = None
    speaking: bool | None = None


# ============================================================================
# HELPERS
# ============================================================================

def _get_engine(session_id: str) -> InterviewSessionEngine:
    try:
        return get_orchestrator().get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


def _media_response(engine: InterviewSessionEngine) -> MediaResponse:
    return MediaResponse(
        media_status=engine.media_status,
        camera_enabled=engine.camera_enabled,
        microphone_enabled=engine.microphone_enabled,
    )


# ============================================================================
# SESSION SETUP
# ============================================================================

@router.post("", response_model=SessionStatus)
async def open_session(request: OpenSessionRequest) -> SessionStatus:
    """
    Open the user's session of a kind.

    A persisted session younger than the TTL is resumed; otherwise a new
    question set is drawn.
    """
    engine = await get_orchestrator().open_practice_session(
        user_id=request.user_id,
        kind=request.kind,
        client_signals=request.client_signals,
    )
    return engine.status()


@router.get("/{session_id}", response_model=SessionStatus)
async def get_session_status(session_id: str) -> SessionStatus:
    """Get the current status of a session."""
    return _get_engine(session_id).status()


@router.post("/{session_id}/restart", response_model=SessionStatus)
async def restart_session(session_id: str) -> SessionStatus:
    engine = _get_engine(session_id)
    try:
        return await engine.restart()
    except SessionNotInitializedError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{session_id}/reshuffle", response_model=SessionStatus)
async def reshuffle_session(session_id: str) -> SessionStatus:
    engine = _get_engine(session_id)
    try:
        return await engine.reshuffle()
    except (SessionNotInitializedError, SessionAlreadySubmittedError) as e:
        raise HTTPException(status_code=409, detail=str(e))


# ============================================================================
# NAVIGATION
# ============================================================================

@router.post("/{session_id}/next", response_model=SessionStatus)
async def next_question(session_id: str) -> SessionStatus:
    engine = _get_engine(session_id)
    try:
        await engine.next_question()
    except SessionNotInitializedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return engine.status()


@router.post("/{session_id}/previous", response_model=SessionStatus)
async def previous_question(session_id: str) -> SessionStatus:
    engine = _get_engine(session_id)
    try:
        await engine.previous_question()
    except SessionNotInitializedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return engine.status()


@router.post("/{session_id}/goto", response_model=SessionStatus)
async def go_to_question(session_id: str, request: GoToRequest) -> SessionStatus:
    engine = _get_engine(session_id)
    try:
        await engine.go_to(request.index)
    except IndexError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SessionNotInitializedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return engine.status()


@router.post("/{session_id}/view-all", response_model=SessionStatus)
async def toggle_view_all(session_id: str) -> SessionStatus:
    engine = _get_engine(session_id)
    try:
        await engine.toggle_view_all()
    except SessionNotInitializedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return engine.status()


# ============================================================================
# ANSWERS
# ============================================================================

@router.put("/{session_id}/answer", response_model=Answer)
async def edit_answer(session_id: str, request: EditAnswerRequest) -> Answer:
    """Save a draft answer; the current question unless an index is given."""
    engine = _get_engine(session_id)
    try:
        return await engine.edit_answer(request.transcript, index=request.index)
    except IndexError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (SessionNotInitializedError, SessionAlreadySubmittedError) as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{session_id}/answer", response_model=Answer)
async def submit_answer(session_id: str, request: SubmitAnswerRequest) -> Answer:
    """
    Submit the answer to the current question.

    Timing and engagement metrics are captured at submission.
    """
    engine = _get_engine(session_id)
    try:
        return await engine.submit_answer(request.transcript)
    except AnswerRequiredError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (SessionNotInitializedError, SessionAlreadySubmittedError) as e:
        raise HTTPException(status_code=409, detail=str(e))


# ============================================================================
# MEDIA AND ENGAGEMENT
# ============================================================================

@router.post("/{session_id}/media", response_model=MediaResponse)
async def enable_media(session_id: str, request: MediaRequest) -> MediaResponse:
    """
    Acquire camera and microphone. Call again to retry after a denial.
    """
    engine = _get_engine(session_id)
    try:
        await engine.enable_media(video=request.video, audio=request.audio)
    except MediaPermissionDenied as e:
        raise HTTPException(
            status_code=403,
            detail=f"{e}. Allow camera and microphone access, then retry.",
        )
    except MediaUnsupported as e:
        raise HTTPException(status_code=501, detail=str(e))
    except SessionNotInitializedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _media_response(engine)


@router.post("/{session_id}/camera", response_model=MediaResponse)
async def toggle_camera(session_id: str) -> MediaResponse:
    engine = _get_engine(session_id)
    engine.toggle_camera()
    return _media_response(engine)


@router.post("/{session_id}/microphone", response_model=MediaResponse)
async def toggle_microphone(session_id: str) -> MediaResponse:
    engine = _get_engine(session_id)
    engine.toggle_microphone()
    return _media_response(engine)


@router.post("/{session_id}/signals")
async def report_signals(session_id: str, request: SignalsRequest) -> dict[str, Any]:
    """Report client-observed face presence and speaking."""
    engine = _get_engine(session_id)
    accepted = engine.report_signals(face=request.face_detected, speaking=request.speaking)
    return {"session_id": session_id, "accepted": accepted}


# ============================================================================
# CLOCK
# ============================================================================

@router.post("/{session_id}/clock/toggle", response_model=SessionStatus)
async def toggle_clock(session_id: str) -> SessionStatus:
    engine = _get_engine(session_id)
    try:
        engine.toggle_clock()
    except SessionNotInitializedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return engine.status()


@router.post("/{session_id}/clock/reset", response_model=SessionStatus)
async def reset_clock(session_id: str) -> SessionStatus:
    engine = _get_engine(session_id)
    try:
        engine.reset_clock()
    except SessionNotInitializedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return engine.status()


# ============================================================================
# COMPLETION
# ============================================================================

@router.post("/{session_id}/submit", response_model=SessionStatus)
async def submit_session(session_id: str) -> SessionStatus:
    """Submit the session. A round session also completes its round."""
    engine = _get_engine(session_id)
    try:
        return await engine.submit()
    except SessionNotInitializedError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/{session_id}/evaluation", response_model=SessionEvaluation)
async def get_evaluation(session_id: str) -> SessionEvaluation:
    """Scores for the session as it stands."""
    return _get_engine(session_id).evaluate()


@router.delete("/{session_id}")
async def close_session(session_id: str) -> dict[str, Any]:
    """Stop timers and release media. The snapshot stays resumable."""
    try:
        await get_orchestrator().close_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "closed", "session_id": session_id}
