"""
Question pools for CampusPrep

Static, categorized question pools and the per-session-kind selection
profile (pool, category quotas, target size).
"""

from pydantic import BaseModel, ConfigDict, Field

from campusprep.models.interview import SessionKind
from campusprep.models.question import Question, QuestionCategory

C = QuestionCategory


# ============================================================================
# CATEGORY QUOTAS
# ============================================================================

DEFAULT_QUOTAS: dict[QuestionCategory, int] = {
    C.ICEBREAKER: 1,
    C.BACKGROUND: 2,
    C.MOTIVATION: 3,
    C.SKILLS: 3,
    C.FUTURE: 2,
    C.BEHAVIORAL: 3,
}

TECHNICAL_QUOTAS: dict[QuestionCategory, int] = {
    C.ICEBREAKER: 1,
    C.BACKGROUND: 1,
    C.SKILLS: 4,
    C.BEHAVIORAL: 1,
}

HR_QUOTAS: dict[QuestionCategory, int] = {
    C.ICEBREAKER: 1,
    C.MOTIVATION: 1,
    C.FUTURE: 1,
    C.BEHAVIORAL: 2,
}


# ============================================================================
# POOLS
# ============================================================================

PRACTICE_POOL: list[Question] = [
    # Icebreaker
    Question(id="q1", text="Can you tell me about yourself and your background?",
             category=C.ICEBREAKER, competency="Communication", ideal_word_count="150-200 words"),
    Question(id="q2", text="Walk me through your resume.",
             category=C.ICEBREAKER, competency="Communication", ideal_word_count="100-150 words"),

    # Background
    Question(id="q3", text="What inspired you to pursue your field of study?",
             category=C.BACKGROUND, competency="Motivation", ideal_word_count="100-150 words"),
    Question(id="q4", text="What aspects of your education have been most valuable to you?",
             category=C.BACKGROUND, competency="Self-awareness", ideal_word_count="100-150 words"),
    Question(id="q5", text="Describe a project or assignment you're particularly proud of.",
             category=C.BACKGROUND, competency="Achievement", ideal_word_count="150-200 words"),

    # Motivation
    Question(id="q6", text="What motivates you in your academic and professional pursuits?",
             category=C.MOTIVATION, competency="Drive", ideal_word_count="100-150 words"),
    Question(id="q7", text="Tell me about a time when you overcame a significant challenge.",
             category=C.MOTIVATION, competency="Resilience", ideal_word_count="150-200 words"),
    Question(id="q8", text="What do you consider your biggest strength?",
             category=C.MOTIVATION, competency="Self-awareness", ideal_word_count="100-150 words"),

    # Skills
    Question(id="q9", text="How do you stay current with developments in your field?",
             category=C.SKILLS, competency="Learning", ideal_word_count="100-150 words"),
    Question(id="q10", text="Describe a situation where you had to work with a difficult team member.",
             category=C.SKILLS, competency="Teamwork", ideal_word_count="150-200 words"),
    Question(id="q11", text="Tell me about a time you had to solve a complex problem.",
             category=C.SKILLS, competency="Problem-solving", ideal_word_count="150-200 words"),

    # Future
    Question(id="q12", text="Where do you see yourself in 3-5 years?",
             category=C.FUTURE, competency="Goal-setting", ideal_word_count="100-150 words"),
    Question(id="q13", text="How does this opportunity align with your career goals?",
             category=C.FUTURE, competency="Strategic thinking", ideal_word_count="100-150 words"),
    Question(id="q14", text="What skills do you hope to develop in your next role?",
             category=C.FUTURE, competency="Growth mindset", ideal_word_count="100-150 words"),

    # Behavioral
    Question(id="q15", text="Describe a time when you had to adapt to significant changes.",
             category=C.BEHAVIORAL, competency="Adaptability", ideal_word_count="150-200 words"),
    Question(id="q16", text="Tell me about a situation where you had to persuade someone.",
             category=C.BEHAVIORAL, competency="Influence", ideal_word_count="150-200 words"),
    Question(id="q17", text="How do you prioritize your work when dealing with multiple deadlines?",
             category=C.BEHAVIORAL, competency="Time management", ideal_word_count="100-150 words"),

    # Follow-ups
    Question(id="q18", text="You mentioned overcoming a challenge. What would you do differently "
                            "if faced with a similar situation?",
             category=C.BEHAVIORAL, competency="Reflection", ideal_word_count="100-150 words",
             follow_up_to="q7"),
    Question(id="q19", text="How has your biggest strength helped you in your academic or professional life?",
             category=C.MOTIVATION, competency="Application", ideal_word_count="100-150 words",
             follow_up_to="q8"),
    Question(id="q20", text="Can you give me a specific example of how you stay current in your field?",
             category=C.SKILLS, competency="Learning", ideal_word_count="100-150 words",
             follow_up_to="q9"),
]


QUICK_POOL: list[Question] = [
    Question(id="m1", text="Can you tell me about yourself and your background?",
             category=C.ICEBREAKER, competency="Communication", ideal_word_count="150-200 words"),
    Question(id="m2", text="Based on what you've shared, what motivated you to pursue this career path?",
             category=C.MOTIVATION, competency="Motivation", ideal_word_count="100-150 words"),
    Question(id="m3", text="What skills from your previous experiences make you a good fit for this role?",
             category=C.SKILLS, competency="Self-awareness", ideal_word_count="100-150 words"),
    Question(id="m4", text="Can you describe a challenging project you worked on and how you overcame obstacles?",
             category=C.BEHAVIORAL, competency="Resilience", ideal_word_count="150-200 words"),
    Question(id="m5", text="How did you apply the skills from that project in your subsequent work?",
             category=C.SKILLS, competency="Application", ideal_word_count="100-150 words",
             follow_up_to="m4"),
    Question(id="m6", text="What do you consider your biggest professional achievement and why?",
             category=C.BACKGROUND, competency="Achievement", ideal_word_count="100-150 words"),
    Question(id="m7", text="How do you handle feedback and criticism in a professional setting?",
             category=C.BEHAVIORAL, competency="Coachability", ideal_word_count="100-150 words"),
    Question(id="m8", text="Where do you see yourself in 3-5 years, and how does this role align with your goals?",
             category=C.FUTURE, competency="Goal-setting", ideal_word_count="100-150 words"),
    Question(id="m9", text="What interests you most about our company and this position?",
             category=C.MOTIVATION, competency="Company fit", ideal_word_count="100-150 words"),
    Question(id="m10", text="Do you have any questions for me about the role or company?",
             category=C.FUTURE, competency="Curiosity", ideal_word_count="50-100 words"),
]


TECHNICAL_POOL: list[Question] = [
    Question(id="t1", text="Tell me about yourself and the technologies you work with most.",
             category=C.ICEBREAKER, competency="Communication", ideal_word_count="100-150 words"),
    Question(id="t2", text="Describe the most technically complex project you have built.",
             category=C.BACKGROUND, competency="Depth", ideal_word_count="150-200 words"),
    Question(id="t3", text="How would you design a URL shortening service?",
             category=C.SKILLS, competency="System design", ideal_word_count="150-200 words"),
    Question(id="t4", text="Explain the difference between a process and a thread.",
             category=C.SKILLS, competency="Fundamentals", ideal_word_count="100-150 words"),
    Question(id="t5", text="How do you approach debugging a production issue you cannot reproduce locally?",
             category=C.SKILLS, competency="Debugging", ideal_word_count="100-150 words"),
    Question(id="t6", text="What trade-offs do you consider when choosing a data structure?",
             category=C.SKILLS, competency="Problem-solving", ideal_word_count="100-150 words"),
    Question(id="t7", text="How would you make that design handle ten times the traffic?",
             category=C.SKILLS, competency="Scalability", ideal_word_count="100-150 words",
             follow_up_to="t3"),
    Question(id="t8", text="Tell me about a time you disagreed with a technical decision.",
             category=C.BEHAVIORAL, competency="Collaboration", ideal_word_count="150-200 words"),
]


HR_POOL: list[Question] = [
    Question(id="h1", text="Tell me about yourself",
             category=C.ICEBREAKER, competency="Communication", ideal_word_count="150-200 words"),
    Question(id="h2", text="What are your strengths and weaknesses?",
             category=C.BEHAVIORAL, competency="Self-awareness", ideal_word_count="100-150 words"),
    Question(id="h3", text="Why do you want to work at this company?",
             category=C.MOTIVATION, competency="Company fit", ideal_word_count="100-150 words"),
    Question(id="h4", text="Describe a challenging project you worked on",
             category=C.BEHAVIORAL, competency="Resilience", ideal_word_count="150-200 words"),
    Question(id="h5", text="Where do you see yourself in 5 years?",
             category=C.FUTURE, competency="Goal-setting", ideal_word_count="100-150 words"),
]


# ============================================================================
# SESSION PROFILES
# ============================================================================

class SessionProfile(BaseModel):
    """How a session kind draws its question set."""

    model_config = ConfigDict(frozen=True)

    kind: SessionKind
    pool: list[Question]
    quotas: dict[QuestionCategory, int] = Field(default_factory=dict)
    target_size: int = Field(..., ge=0)


SESSION_PROFILES: dict[SessionKind, SessionProfile] = {
    SessionKind.PRACTICE: SessionProfile(
        kind=SessionKind.PRACTICE, pool=PRACTICE_POOL, quotas=DEFAULT_QUOTAS, target_size=15,
    ),
    SessionKind.QUICK: SessionProfile(
        kind=SessionKind.QUICK, pool=QUICK_POOL, quotas={}, target_size=len(QUICK_POOL),
    ),
    SessionKind.TECHNICAL: SessionProfile(
        kind=SessionKind.TECHNICAL, pool=TECHNICAL_POOL, quotas=TECHNICAL_QUOTAS, target_size=6,
    ),
    SessionKind.HR: SessionProfile(
        kind=SessionKind.HR, pool=HR_POOL, quotas=HR_QUOTAS, target_size=5,
    ),
}


def get_session_profile(kind: SessionKind, target_size: int | None = None) -> SessionProfile:
    """Profile for a session kind, optionally overriding the target size."""
    profile = SESSION_PROFILES[kind]
    if target_size is not None and target_size != profile.target_size:
        return profile.model_copy(update={"target_size": target_size})
    return profile


def get_questions_by_category(pool: list[Question], category: QuestionCategory) -> list[Question]:
    """Questions of a category, in pool order."""
    return [q for q in pool if q.category == category]
