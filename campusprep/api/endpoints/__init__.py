"""
API endpoint modules for CampusPrep
"""

from campusprep.api.endpoints import metadata, report, session, track

__all__ = ["metadata", "report", "session", "track"]
