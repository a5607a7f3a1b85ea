"""
Report sinks for CampusPrep

Where compiled reports go: an in-memory sink for development and tests,
and an HTTP sink posting the report JSON to an external service.
"""

import logging
from typing import Protocol
from uuid import uuid4

import httpx

from campusprep.config import Settings, get_settings
from campusprep.models.report import Report

logger = logging.getLogger(__name__)


class ReportSubmitError(Exception):
    """Raised when a report could not be handed to the sink."""
    pass


class ReportSink(Protocol):
    async def submit(self, report: Report) -> str:
        ...

    async def close(self) -> None:
        ...


class InMemoryReportSink:
    """Keeps submitted reports keyed by generated report id."""

    def __init__(self):
        self.reports: dict[str, Report] = {}

    async def submit(self, report: Report) -> str:
        report_id = f"rpt_{uuid4().hex[:12]}"
        self.reports[report_id] = report
        logger.info(f"Stored report {report_id} for session {report.session_id}")
        return report_id

    async def close(self) -> None:
        pass


class HttpReportSink:
    """
    Posts reports to ``{base_url}/reports``.

    The service answers with JSON containing the stored report ``id``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.base_url = (base_url or settings.report_sink_url).rstrip("/")
        token = token if token is not None else settings.report_sink_token

        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout or settings.report_sink_timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def submit(self, report: Report) -> str:
        try:
            response = await self.client.post(
                "/reports",
                content=report.model_dump_json(),
            )
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Report sink error for session {report.session_id}: {e}")
            raise ReportSubmitError(f"Report submission failed: {e}") from e
        except ValueError as e:
            logger.error(f"Report sink returned invalid JSON: {e}")
            raise ReportSubmitError("Report sink returned an invalid response") from e

        report_id = result.get("id") if isinstance(result, dict) else None
        if not report_id:
            raise ReportSubmitError("Report sink response did not include an id")

        logger.info(f"Submitted report {report_id} for session {report.session_id}")
        return str(report_id)


def create_report_sink(settings: Settings | None = None) -> ReportSink:
    """HTTP sink when a URL is configured, in-memory otherwise."""
    settings = settings or get_settings()
    if settings.report_sink_url:
        return HttpReportSink(settings=settings)
    return InMemoryReportSink()
