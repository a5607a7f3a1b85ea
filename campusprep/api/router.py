"""
Main API router for CampusPrep

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from campusprep.api.endpoints import metadata, report, session, track

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    session.router,
    prefix="/session",
    tags=["Session"]
)

api_router.include_router(
    track.router,
    prefix="/track",
    tags=["Track"]
)

api_router.include_router(
    report.router,
    prefix="/report",
    tags=["Report"]
)

api_router.include_router(
    metadata.router,
    prefix="/metadata",
    tags=["Metadata"]
)
