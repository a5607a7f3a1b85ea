"""
Company and role definitions for CampusPrep

Company-specific interviewer names and feedback bundles, keyed by a typed
enum with an explicit generic fallback.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Company(str, Enum):
    """Companies with dedicated interview tracks."""

    GOOGLE = "google"
    MICROSOFT = "microsoft"
    AMAZON = "amazon"
    GENERIC = "generic"

    @classmethod
    def from_name(cls, name: str | None) -> "Company":
        """Resolve a company name, falling back to GENERIC."""
        key = (name or "").strip().lower()
        for company in cls:
            if company.value == key:
                return company
        return cls.GENERIC

    @property
    def display_name(self) -> str:
        names = {
            "google": "Google",
            "microsoft": "Microsoft",
            "amazon": "Amazon",
            "generic": "Company",
        }
        return names.get(self.value, self.value)

    @property
    def interviewer_name(self) -> str:
        return INTERVIEWER_NAMES[self]


class TrackRole(str, Enum):
    """Roles a student can practice for."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    ML = "ml"

    @property
    def display_name(self) -> str:
        names = {
            "frontend": "Frontend Engineer",
            "backend": "Backend Engineer",
            "ml": "ML Engineer",
        }
        return names.get(self.value, self.value)


def role_display_name(role: str) -> str:
    """Human-readable role name; unknown roles are shown as given."""
    try:
        return TrackRole(role.strip().lower()).display_name
    except ValueError:
        return role


class FeedbackBundle(BaseModel):
    """Static company-specific report feedback."""

    model_config = ConfigDict(frozen=True)

    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)


INTERVIEWER_NAMES: dict[Company, str] = {
    Company.GOOGLE: "Alex Thompson",
    Company.MICROSOFT: "Sarah Johnson",
    Company.AMAZON: "Michael Chen",
    Company.GENERIC: "AI Interviewer",
}


FEEDBACK_BUNDLES: dict[Company, FeedbackBundle] = {
    Company.GOOGLE: FeedbackBundle(
        strengths=[
            "Strong problem-solving skills",
            "Good understanding of algorithms and data structures",
            "Clear communication of technical concepts",
        ],
        improvements=[
            "Practice more system design questions",
            "Work on optimizing time complexity",
            "Improve explanation of trade-offs",
        ],
        tips=[
            "Focus on Google's core values in behavioral questions",
            "Practice coding on a whiteboard",
            "Review Google's engineering principles",
        ],
    ),
    Company.MICROSOFT: FeedbackBundle(
        strengths=[
            "Good OOP knowledge",
            "Clear understanding of design patterns",
            "Strong debugging skills",
        ],
        improvements=[
            "Practice more cloud-related questions",
            "Work on Azure services knowledge",
            "Improve system design explanations",
        ],
        tips=[
            "Focus on Microsoft's leadership principles",
            "Practice coding in C#",
            "Review Microsoft's product ecosystem",
        ],
    ),
    Company.AMAZON: FeedbackBundle(
        strengths=[
            "Good understanding of distributed systems",
            "Clear problem-solving approach",
            "Strong customer focus",
        ],
        improvements=[
            "Practice more scalability questions",
            "Work on AWS services knowledge",
            "Improve behavioral question responses",
        ],
        tips=[
            "Focus on Amazon's leadership principles",
            "Practice STAR method for behavioral questions",
            "Review Amazon's customer obsession culture",
        ],
    ),
    Company.GENERIC: FeedbackBundle(
        strengths=["Good technical knowledge", "Clear communication"],
        improvements=["Practice more questions", "Work on time management"],
        tips=["Review company values", "Practice regularly"],
    ),
}


def get_feedback_bundle(company: Company) -> FeedbackBundle:
    """Feedback bundle for a company, generic when none is defined."""
    return FEEDBACK_BUNDLES.get(company, FEEDBACK_BUNDLES[Company.GENERIC])
