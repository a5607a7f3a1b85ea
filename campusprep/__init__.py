"""
CampusPrep - Student Interview Practice Platform

Interview session engine: question selection, timed multi-round sessions,
engagement sampling, scoring and resumable session state.
"""

__version__ = "0.1.0"
__author__ = "CampusPrep Team"
