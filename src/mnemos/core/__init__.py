"""Core library for mnemos."""

from mnemos.core.config import SchedulerConfig
from mnemos.core.metrics import (
    MasteryEstimate,
    calculate_daily_goal,
    deck_statistics,
    estimate_time_to_mastery,
    mastery_level,
)
from mnemos.core.models import Card, Difficulty, QualityRating, SchedulingUpdate
from mnemos.core.queue import DueCardsSummary, get_due_cards_summary, review_priority
from mnemos.core.scheduler import (
    InvalidInputError,
    ReviewScheduler,
    calculate_next_review,
    initialize_card,
    reset_card_progress,
)

__all__ = [
    # Models
    "Card",
    "Difficulty",
    "QualityRating",
    "SchedulingUpdate",
    # Scheduler
    "InvalidInputError",
    "ReviewScheduler",
    "SchedulerConfig",
    "calculate_next_review",
    "initialize_card",
    "reset_card_progress",
    # Queue
    "DueCardsSummary",
    "get_due_cards_summary",
    "review_priority",
    # Metrics
    "MasteryEstimate",
    "calculate_daily_goal",
    "deck_statistics",
    "estimate_time_to_mastery",
    "mastery_level",
]
