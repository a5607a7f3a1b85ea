"""
Metadata API endpoints

Provides reference data for:
- Companies
- Roles
- Session kinds
- Question categories
- Rounds
"""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from campusprep.config import get_settings
from campusprep.models.companies import Company, TrackRole, get_feedback_bundle
from campusprep.models.evaluation import ConfidenceLevel
from campusprep.models.interview import SessionKind, default_rounds
from campusprep.models.question import QuestionCategory
from campusprep.models.question_bank import (
    DEFAULT_QUOTAS,
    get_questions_by_category,
    get_session_profile,
)

router = APIRouter()


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class CompanyInfo(BaseModel):
    """Information about a company track."""
    id: str
    name: str
    interviewer_name: str
    tips: list[str]


class SessionKindInfo(BaseModel):
    """How a session kind draws its questions."""
    id: str
    pool_size: int
    target_size: int
    quotas: dict[str, int]


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/companies")
async def get_companies() -> list[CompanyInfo]:
    """Get all companies with dedicated tracks."""
    return [
        CompanyInfo(
            id=company.value,
            name=company.display_name,
            interviewer_name=company.interviewer_name,
            tips=get_feedback_bundle(company).tips,
        )
        for company in Company
        if company != Company.GENERIC
    ]


@router.get("/roles")
async def get_roles() -> list[dict[str, str]]:
    """Get all roles a track can target."""
    return [{"id": role.value, "name": role.display_name} for role in TrackRole]


@router.get("/session-kinds")
async def get_session_kinds() -> list[SessionKindInfo]:
    """Get session kinds with their pools and quotas."""
    settings = get_settings()
    kinds = []

    for kind in SessionKind:
        target = settings.practice_target_size if kind == SessionKind.PRACTICE else None
        profile = get_session_profile(kind, target)
        kinds.append(SessionKindInfo(
            id=kind.value,
            pool_size=len(profile.pool),
            target_size=profile.target_size,
            quotas={c.value: n for c, n in profile.quotas.items()},
        ))

    return kinds


@router.get("/categories")
async def get_categories() -> list[dict[str, Any]]:
    """Get question categories with the default practice quotas."""
    pool = get_session_profile(SessionKind.PRACTICE).pool
    return [
        {
            "id": category.value,
            "quota": DEFAULT_QUOTAS.get(category, 0),
            "pool_count": len(get_questions_by_category(pool, category)),
        }
        for category in QuestionCategory
    ]


@router.get("/categories/{category_id}/questions")
async def get_category_questions(category_id: str) -> dict[str, Any]:
    """Get the practice questions of one category."""
    try:
        category = QuestionCategory(category_id)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown category: {category_id}")

    pool = get_session_profile(SessionKind.PRACTICE).pool
    questions = get_questions_by_category(pool, category)
    return {
        "category": category.value,
        "questions": [q.model_dump() for q in questions],
    }


@router.get("/rounds")
async def get_rounds() -> list[dict[str, str]]:
    """Get the rounds every track runs through."""
    return [{"id": r.id, "name": r.name, "description": r.description} for r in default_rounds()]


@router.get("/confidence-levels")
async def get_confidence_levels() -> list[dict[str, str]]:
    """Get readiness tiers with descriptions."""
    return [
        {"id": level.value, "description": level.description}
        for level in ConfidenceLevel
    ]
