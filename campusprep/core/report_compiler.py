"""
Report Compiler for CampusPrep

Assembles the final scored record for a session or round:
- Aggregate scores and readiness tier
- Answer previews with per-answer scores
- Averaged behavioral metrics and timing
- Strengths, improvements and behavioral feedback
- Company-specific feedback bundle
"""

import logging
from collections.abc import Sequence

from campusprep.config import Settings, get_settings
from campusprep.core.engagement import EngagementAccumulator
from campusprep.core.evaluation_engine import (
    EvaluationEngine,
    answer_report_score,
    round_half_up,
)
from campusprep.core.report_sink import ReportSink, ReportSubmitError
from campusprep.models.companies import Company, get_feedback_bundle, role_display_name
from campusprep.models.evaluation import Scores
from campusprep.models.interview import Answer
from campusprep.models.question import Question
from campusprep.models.report import AnswerPreview, Report, ReportSummary

logger = logging.getLogger(__name__)


def truncate_transcript(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class ReportCompiler:
    """
    Builds Reports and hands them to a sink.

    The last compiled report of each session stays cached, so a failed
    hand-off can be retried without scoring again.
    """

    def __init__(self, sink: ReportSink, settings: Settings | None = None):
        self.sink = sink
        self.settings = settings or get_settings()
        self.evaluation_engine = EvaluationEngine()
        self._reports: dict[str, Report] = {}
        self._submitted: dict[str, str] = {}

    # =========================================================================
    # COMPILATION
    # =========================================================================

    def compile(
        self,
        session_id: str,
        student_id: str,
        company: str | Company,
        role: str,
        interview_type: str,
        answers: Sequence[Answer],
        questions: Sequence[Question] = (),
        accumulator: EngagementAccumulator | None = None,
    ) -> Report:
        """
        Compile a report from a finished session.

        Args:
            session_id: Session or round the report covers
            student_id: Owner of the session
            company: Company name; unknown names use the generic feedback
            role: Role id or display name
            interview_type: Round or session kind
            answers: Answer slots; only answered slots are reported
            questions: Questions, for the answer previews
            accumulator: Session engagement totals

        Returns:
            The compiled Report, also cached for submission
        """
        company_key = company if isinstance(company, Company) else Company.from_name(company)
        answered = [a for a in answers if a.is_answered]
        evaluation = self.evaluation_engine.evaluate(answers, accumulator)
        question_text = {q.id: q.text for q in questions}

        total_ms = sum(a.time_taken_ms for a in answered)
        average_seconds = round_half_up(total_ms / len(answered) / 1000) if answered else 0

        previews = [
            AnswerPreview(
                question_id=a.question_id,
                question_text=question_text.get(a.question_id, ""),
                transcript_preview=truncate_transcript(
                    a.transcript, self.settings.transcript_preview_chars
                ),
                time_taken_ms=a.time_taken_ms,
                score=answer_report_score(a),
            )
            for a in answered
        ]

        scores = evaluation.scores
        bundle = get_feedback_bundle(company_key)

        report = Report(
            session_id=session_id,
            student_id=student_id,
            company=self._company_label(company, company_key),
            role=role_display_name(role),
            interview_type=interview_type,
            interviewer_name=company_key.interviewer_name,
            total_duration_ms=total_ms,
            average_answer_seconds=average_seconds,
            scores=scores,
            behavioral_metrics=evaluation.average_metrics,
            answers=previews,
            strengths=self._identify_strengths(scores, average_seconds, bundle.strengths),
            improvements=self._identify_improvements(scores, average_seconds, bundle.improvements),
            behavioral_feedback=self._behavioral_feedback(answered),
            company_feedback=bundle,
        )

        self._reports[session_id] = report
        logger.info(
            f"Compiled report for {session_id}: overall {scores.overall} "
            f"({scores.confidence_level.value})"
        )
        return report

    @staticmethod
    def _company_label(company: str | Company, company_key: Company) -> str:
        """Known companies by display name; others as the caller named them."""
        if isinstance(company, Company) or company_key != Company.GENERIC:
            return company_key.display_name
        return company.strip() or company_key.display_name

    def _identify_strengths(
        self, scores: Scores, average_seconds: int, company_strengths: list[str]
    ) -> list[str]:
        strengths = []

        if scores.technical >= 80:
            strengths.append("Strong technical knowledge and problem-solving skills")
        if scores.communication >= 80:
            strengths.append("Excellent communication and clarity in responses")
        if scores.engagement >= 80:
            strengths.append("Great engagement and professional presentation")
        if average_seconds <= 90:
            strengths.append("Efficient response time management")

        strengths.extend(company_strengths)
        return strengths or ["Good overall performance"]

    def _identify_improvements(
        self, scores: Scores, average_seconds: int, company_improvements: list[str]
    ) -> list[str]:
        improvements = []

        if scores.technical < 60:
            improvements.append("Work on technical depth and accuracy in answers")
        if scores.communication < 60:
            improvements.append("Improve response structure and clarity")
        if scores.engagement < 60:
            improvements.append("Enhance engagement with better camera presence and eye contact")
        if average_seconds > 150:
            improvements.append("Practice more concise responses to improve time management")

        improvements.extend(company_improvements)
        return improvements or ["Continue practicing to refine your skills"]

    def _behavioral_feedback(self, answers: Sequence[Answer]) -> list[str]:
        """One line on engagement, from face presence, eye contact and mic activity."""
        if not answers:
            return ["Work on maintaining better engagement and professional presence"]

        total = sum(
            a.behavioral_metrics.face_detected_percentage
            + a.behavioral_metrics.eye_contact_score
            + a.behavioral_metrics.mic_activity
            for a in answers
        )
        average = total / (len(answers) * 3)

        if average >= 80:
            return ["Excellent behavioral engagement throughout the interview"]
        if average >= 60:
            return ["Good behavioral engagement, could improve consistency"]
        return ["Work on maintaining better engagement and professional presence"]

    # =========================================================================
    # HAND-OFF
    # =========================================================================

    def get_report(self, session_id: str) -> Report | None:
        return self._reports.get(session_id)

    def get_report_id(self, session_id: str) -> str | None:
        return self._submitted.get(session_id)

    async def submit(self, session_id: str) -> str:
        """
        Hand the cached report for a session to the sink.

        Raises:
            KeyError: If no report was compiled for the session
            ReportSubmitError: If the sink rejected it; the report stays cached
        """
        report = self._reports.get(session_id)
        if report is None:
            raise KeyError(f"No compiled report for session {session_id}")

        try:
            report_id = await self.sink.submit(report)
        except ReportSubmitError:
            logger.warning(f"Report for {session_id} kept for retry")
            raise

        self._submitted[session_id] = report_id
        return report_id

    def get_summary(self, session_id: str) -> ReportSummary | None:
        report = self._reports.get(session_id)
        if report is None:
            return None
        return ReportSummary(
            session_id=session_id,
            overall_score=report.scores.overall,
            confidence_level=report.scores.confidence_level.value,
            top_strength=report.strengths[0] if report.strengths else "",
            top_improvement_area=report.improvements[0] if report.improvements else "",
            report_id=self._submitted.get(session_id),
        )
