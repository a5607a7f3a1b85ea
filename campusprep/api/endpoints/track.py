"""
Track API endpoints

Handles company/role interview tracks:
- Creating tracks
- Starting, completing and abandoning rounds
- Running the group discussion round
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from campusprep.api.dependencies import get_orchestrator
from campusprep.core.group_discussion import DiscussionStatus, GroupDiscussionSession
from campusprep.core.interview_orchestrator import (
    InterviewTrack,
    SessionNotFoundError,
    TrackNotFoundError,
)
from campusprep.core.round_tracker import RoundTransitionError
from campusprep.models.interview import Round, SessionStatus

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class CreateTrackRequest(BaseModel):
    """Request model for creating a track."""
    user_id: str
    company: str
    role: str


class TrackResponse(BaseModel):
    """Track with its rounds."""
    track_id: str
    user_id: str
    company: str
    role: str
    interviewer_name: str
    rounds: list[Round]
    progress: float
    active_round: str | None = None
    finished: bool = False
    round_sessions: dict[str, str] = {}


class StartRoundRequest(BaseModel):
    client_signals: bool = False


class StartRoundResponse(BaseModel):
    """Round started, with the session or discussion that runs it."""
    track_id: str
    round: Round
    session: SessionStatus | None = None
    discussion: DiscussionStatus | None = None


# ============================================================================
# HELPERS
# ============================================================================

def _get_track(track_id: str) -> InterviewTrack:
    try:
        return get_orchestrator().get_track(track_id)
    except TrackNotFoundError:
        raise HTTPException(status_code=404, detail="Track not found")


def _get_discussion(discussion_id: str) -> GroupDiscussionSession:
    try:
        return get_orchestrator().get_discussion(discussion_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Discussion not found")


def _track_response(track: InterviewTrack) -> TrackResponse:
    active = track.tracker.active_round
    return TrackResponse(
        track_id=track.track_id,
        user_id=track.user_id,
        company=track.company_name,
        role=track.role,
        interviewer_name=track.company.interviewer_name,
        rounds=track.rounds,
        progress=track.tracker.progress,
        active_round=active.id if active else None,
        finished=track.tracker.is_finished,
        round_sessions=dict(track.round_sessions),
    )


def _check_round(track: InterviewTrack, round_id: str) -> None:
    if round_id not in {r.id for r in track.rounds}:
        raise HTTPException(status_code=404, detail=f"Round not found: {round_id}")


# ============================================================================
# TRACKS
# ============================================================================

@router.post("", response_model=TrackResponse)
async def create_track(request: CreateTrackRequest) -> TrackResponse:
    track = get_orchestrator().create_track(
        user_id=request.user_id,
        company=request.company,
        role=request.role,
    )
    return _track_response(track)


@router.get("/{track_id}", response_model=TrackResponse)
async def get_track(track_id: str) -> TrackResponse:
    return _track_response(_get_track(track_id))


# ============================================================================
# ROUNDS
# ============================================================================

@router.post("/{track_id}/rounds/{round_id}/start", response_model=StartRoundResponse)
async def start_round(
    track_id: str,
    round_id: str,
    request: StartRoundRequest | None = None,
) -> StartRoundResponse:
    """
    Start a round.

    Technical and HR rounds get a session engine; the group discussion
    round gets a discussion.
    """
    track = _get_track(track_id)
    _check_round(track, round_id)
    client_signals = request.client_signals if request else False

    try:
        runner = await get_orchestrator().start_round(track_id, round_id, client_signals)
    except RoundTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    response = StartRoundResponse(track_id=track_id, round=track.tracker.get(round_id).model_copy())
    if isinstance(runner, GroupDiscussionSession):
        response.discussion = runner.status()
    else:
        response.session = runner.status()
    return response


@router.post("/{track_id}/rounds/{round_id}/complete", response_model=Round)
async def complete_round(track_id: str, round_id: str) -> Round:
    track = _get_track(track_id)
    _check_round(track, round_id)
    try:
        return await get_orchestrator().complete_round(track_id, round_id)
    except RoundTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{track_id}/rounds/{round_id}/abandon", response_model=Round)
async def abandon_round(track_id: str, round_id: str) -> Round:
    """Abandon an in-progress round; it is marked failed."""
    track = _get_track(track_id)
    _check_round(track, round_id)
    try:
        return await get_orchestrator().abandon_round(track_id, round_id)
    except RoundTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/{track_id}")
async def close_track(track_id: str) -> dict[str, str]:
    """Close the track and every session its rounds started."""
    try:
        await get_orchestrator().close_track(track_id)
    except TrackNotFoundError:
        raise HTTPException(status_code=404, detail="Track not found")
    return {"status": "closed", "track_id": track_id}


# ============================================================================
# GROUP DISCUSSION
# ============================================================================

@router.get("/discussion/{discussion_id}", response_model=DiscussionStatus)
async def get_discussion(discussion_id: str) -> DiscussionStatus:
    return _get_discussion(discussion_id).status()


@router.post("/discussion/{discussion_id}/start", response_model=DiscussionStatus)
async def start_discussion(discussion_id: str) -> DiscussionStatus:
    discussion = _get_discussion(discussion_id)
    try:
        return discussion.start()
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/discussion/{discussion_id}/participants/{participant_id}/speak", response_model=DiscussionStatus)
async def toggle_participant(discussion_id: str, participant_id: int) -> DiscussionStatus:
    discussion = _get_discussion(discussion_id)
    try:
        discussion.toggle_speaking(participant_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Participant not found")
    return discussion.status()


@router.post("/discussion/{discussion_id}/end", response_model=DiscussionStatus)
async def end_discussion(discussion_id: str) -> DiscussionStatus:
    """End the discussion; its round is completed."""
    return await _get_discussion(discussion_id).end()
