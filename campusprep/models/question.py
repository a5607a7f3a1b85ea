"""
Question models for CampusPrep
"""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class QuestionCategory(str, Enum):
    """High-level question categories."""

    ICEBREAKER = "icebreaker"
    BACKGROUND = "background"
    MOTIVATION = "motivation"
    SKILLS = "skills"
    FUTURE = "future"
    BEHAVIORAL = "behavioral"


class WordCountStatus(str, Enum):
    """How an answer's length compares to the ideal range."""

    UNDER = "under"
    WITHIN = "within"
    OVER = "over"
    UNKNOWN = "unknown"


_RANGE_PATTERN = re.compile(r"^\s*(\d+)\s*-\s*(\d+)")


class WordCountRange(BaseModel):
    """Ideal answer length in words."""

    model_config = ConfigDict(frozen=True)

    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "WordCountRange":
        if self.max < self.min:
            raise ValueError(f"max ({self.max}) is below min ({self.min})")
        return self

    @classmethod
    def parse(cls, text: str) -> "WordCountRange":
        """Parse the display form, e.g. ``"100-150 words"``."""
        match = _RANGE_PATTERN.match(text or "")
        if not match:
            raise ValueError(f"Unrecognised word count range: {text!r}")
        return cls(min=int(match.group(1)), max=int(match.group(2)))

    def status_for(self, word_count: int) -> WordCountStatus:
        if word_count < self.min:
            return WordCountStatus.UNDER
        if word_count > self.max:
            return WordCountStatus.OVER
        return WordCountStatus.WITHIN

    def __str__(self) -> str:
        return f"{self.min}-{self.max} words"


class Question(BaseModel):
    """A single practice question. Immutable once loaded from a pool."""

    model_config = ConfigDict(frozen=True)

    # Identification
    id: str = Field(..., description="Unique question ID")

    # Content
    text: str = Field(..., description="The question text")

    # Classification
    category: QuestionCategory = Field(..., description="Question category")
    competency: str = Field(default="", description="Competency being assessed")

    # Answer guidance
    ideal_word_count: WordCountRange | None = Field(
        default=None,
        description="Ideal answer length"
    )

    # Follow-up linkage
    follow_up_to: str | None = Field(
        default=None,
        description="Parent question ID; only selectable alongside the parent"
    )

    @field_validator("ideal_word_count", mode="before")
    @classmethod
    def _parse_word_count(cls, value: Any) -> Any:
        if isinstance(value, str):
            return WordCountRange.parse(value)
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return {"min": value[0], "max": value[1]}
        return value

    @property
    def is_follow_up(self) -> bool:
        return self.follow_up_to is not None

    def word_count_status(self, word_count: int) -> WordCountStatus:
        """Compare an answer length against this question's ideal range."""
        if self.ideal_word_count is None:
            return WordCountStatus.UNKNOWN
        return self.ideal_word_count.status_for(word_count)
