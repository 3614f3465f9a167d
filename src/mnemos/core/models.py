"""Pydantic models for mnemos cards and scheduling results."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import IntEnum, StrEnum
from typing import Annotated
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat a naive timestamp as UTC."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


class Difficulty(StrEnum):
    """Coarse difficulty label of a card. Never changed by the scheduler."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    MASTER = "master"


class QualityRating(IntEnum):
    """SM-2 recall quality grades."""

    BLACKOUT = 0  # Complete blackout
    WRONG_HARD = 1  # Incorrect; the correct one remembered on seeing it
    WRONG_EASY = 2  # Incorrect; the correct one seemed easy to recall
    DIFFICULT = 3  # Correct, recalled with serious difficulty
    HESITATION = 4  # Correct after hesitation
    PERFECT = 5  # Perfect response


class Card(BaseModel):
    """A vocabulary card together with its review-scheduling state."""

    id: Annotated[str, Field(default_factory=lambda: str(uuid4()))]
    word: str = ""
    definition: str = ""
    translation: str | None = None
    category: str | None = None
    difficulty: Difficulty = Difficulty.BEGINNER
    tags: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    # Spaced repetition data
    interval: int = Field(default=1, ge=0)  # Days until next review
    ease_factor: float = 2.5
    review_count: int = Field(default=0, ge=0)  # Reviews since last reset
    # 0-100; range enforced by the scheduler at review time
    mastery_score: float = 0.0
    next_review_at: datetime = Field(default_factory=utcnow)
    last_reviewed_at: datetime | None = None

    @field_validator("created_at", "next_review_at", "last_reviewed_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC."""
        return as_utc(value) if value is not None else None

    @property
    def is_fresh(self) -> bool:
        """True while the card has no successful review since creation or reset."""
        return self.review_count == 0


@dataclass
class SchedulingUpdate:
    """New scheduling fields produced by one review."""

    interval: int
    ease_factor: float
    review_count: int
    mastery_score: int
    next_review_at: datetime
    last_reviewed_at: datetime

    def apply(self, card: Card) -> Card:
        """Return a copy of ``card`` with these fields merged in."""
        return card.model_copy(
            update={
                "interval": self.interval,
                "ease_factor": self.ease_factor,
                "review_count": self.review_count,
                "mastery_score": self.mastery_score,
                "next_review_at": self.next_review_at,
                "last_reviewed_at": self.last_reviewed_at,
            }
        )
