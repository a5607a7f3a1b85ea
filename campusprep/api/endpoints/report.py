"""
Report API endpoints

Handles:
- Report compilation
- Report retrieval
- Hand-off to the report sink, with retry
"""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from campusprep.api.dependencies import get_orchestrator
from campusprep.core.interview_orchestrator import SessionNotFoundError
from campusprep.core.report_sink import ReportSubmitError
from campusprep.models.report import Report, ReportSummary

router = APIRouter()


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class SubmitReportResponse(BaseModel):
    """Response after handing a report to the sink."""
    session_id: str
    report_id: str
    status: str = "submitted"


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/{session_id}", response_model=Report)
async def compile_report(session_id: str) -> Report:
    """
    Compile the report for a session.

    Scores are computed from the answers as they stand; the compiled
    report is kept for submission.
    """
    try:
        return get_orchestrator().compile_report(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


@router.get("/{session_id}", response_model=Report)
async def get_report(session_id: str) -> Report:
    """Get the last compiled report for a session."""
    report = get_orchestrator().report_compiler.get_report(session_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not compiled")
    return report


@router.get("/{session_id}/summary", response_model=ReportSummary)
async def get_report_summary(session_id: str) -> ReportSummary:
    """
    Get a condensed report summary.

    Useful for quick overview before viewing full report.
    """
    summary = get_orchestrator().report_compiler.get_summary(session_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Report not compiled")
    return summary


@router.post("/{session_id}/submit", response_model=SubmitReportResponse)
async def submit_report(session_id: str) -> SubmitReportResponse:
    """
    Hand the report to the sink.

    A failed hand-off answers 502; the compiled report is kept, so calling
    this again retries without re-scoring.
    """
    try:
        report_id = await get_orchestrator().submit_report(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except ReportSubmitError as e:
        raise HTTPException(status_code=502, detail=f"{e}. The report was kept; retry to resend.")

    return SubmitReportResponse(session_id=session_id, report_id=report_id)


@router.get("/{session_id}/answers")
async def get_answer_details(session_id: str) -> dict[str, Any]:
    """
    Get per-answer previews and scores.
    """
    report = get_orchestrator().report_compiler.get_report(session_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not compiled")

    return {
        "session_id": session_id,
        "total_answers": len(report.answers),
        "answers": [a.model_dump() for a in report.answers],
    }
