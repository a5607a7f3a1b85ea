"""
API layer for CampusPrep

Contains FastAPI routers for:
- Practice and round sessions
- Interview tracks and rounds
- Report compilation and submission
- Metadata for the UI
"""

from campusprep.api.router import api_router

__all__ = ["api_router"]
