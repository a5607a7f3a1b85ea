"""
API Dependencies

Provides dependency injection for API endpoints.
Manages singleton instances of core components.
"""

import logging

from campusprep.config import get_settings
from campusprep.core.interview_orchestrator import InterviewOrchestrator
from campusprep.core.report_compiler import ReportCompiler
from campusprep.core.report_sink import create_report_sink
from campusprep.core.session_store import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
)

logger = logging.getLogger(__name__)


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_orchestrator: InterviewOrchestrator | None = None


def create_store() -> KeyValueStore:
    """Key-value store for session snapshots, per the storage backend setting."""
    settings = get_settings()
    if settings.storage_backend == "file":
        logger.info(f"Persisting sessions under {settings.storage_dir}")
        return FileKeyValueStore(settings.storage_dir)
    if settings.storage_backend != "memory":
        logger.warning(f"Unknown storage backend {settings.storage_backend!r}, using memory")
    return InMemoryKeyValueStore()


def get_orchestrator() -> InterviewOrchestrator:
    """
    Get the interview orchestrator singleton.

    Lazily initializes all required components.
    """
    global _orchestrator

    if _orchestrator is None:
        settings = get_settings()
        report_compiler = ReportCompiler(create_report_sink(settings), settings=settings)
        _orchestrator = InterviewOrchestrator(
            store=create_store(),
            report_compiler=report_compiler,
            settings=settings,
        )

    return _orchestrator


async def cleanup():
    """Cleanup resources on shutdown."""
    global _orchestrator

    if _orchestrator:
        await _orchestrator.close()

    _orchestrator = None
