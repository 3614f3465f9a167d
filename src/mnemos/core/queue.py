"""Priority ranking of due cards and due-card summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from mnemos.core.models import Card, Difficulty, as_utc, utcnow

SECONDS_PER_DAY = 86400

DIFFICULTY_WEIGHTS = {
    Difficulty.BEGINNER: 0.8,
    Difficulty.INTERMEDIATE: 1.0,
    Difficulty.ADVANCED: 1.2,
    Difficulty.MASTER: 1.5,
}


@dataclass
class DueCardsSummary:
    """Due counts and the full card set ordered by review priority."""

    due_now: int = 0
    due_today: int = 0
    due_this_week: int = 0
    priority_queue: list[Card] = field(default_factory=list)


def days_overdue(card: Card, now: datetime) -> float:
    """Fractional days past the due date, 0 when not yet due."""
    return max(0.0, (now - card.next_review_at).total_seconds() / SECONDS_PER_DAY)


def review_priority(card: Card, now: datetime | None = None) -> float:
    """Score a card for the review queue; higher means review sooner.

    Overdue days weigh in non-linearly. Low mastery and harder difficulty
    raise the score; never-reviewed cards are halved.
    """
    now = as_utc(now or utcnow())

    overdue_weight = (days_overdue(card, now) + 1) ** 1.5
    mastery_weight = (100 - card.mastery_score) / 100
    difficulty_weight = DIFFICULTY_WEIGHTS.get(card.difficulty, 1.0)
    recency_penalty = 0.5 if card.review_count == 0 else 1.0

    return (overdue_weight * 2 + mastery_weight * 3) * difficulty_weight * recency_penalty


def rank_by_priority(cards: list[Card], now: datetime | None = None) -> list[Card]:
    """Sort cards by descending priority; equal scores keep their input order."""
    now = as_utc(now or utcnow())
    return sorted(cards, key=lambda c: review_priority(c, now), reverse=True)


def get_due_cards_summary(cards: list[Card], now: datetime | None = None) -> DueCardsSummary:
    """Count cards due now, by the end of today and within a week."""
    now = as_utc(now or utcnow())
    end_of_day = now.replace(hour=23, minute=59, second=59, microsecond=999999)
    end_of_week = now + timedelta(days=7)

    summary = DueCardsSummary(priority_queue=rank_by_priority(cards, now))
    for card in summary.priority_queue:
        if card.next_review_at <= now:
            summary.due_now += 1
        if card.next_review_at <= end_of_day:
            summary.due_today += 1
        if card.next_review_at <= end_of_week:
            summary.due_this_week += 1

    return summary


def build_review_queue(
    cards: list[Card],
    limit: int | None = None,
    now: datetime | None = None,
) -> list[Card]:
    """Cards due now, most urgent first, optionally capped at ``limit``."""
    now = as_utc(now or utcnow())
    due = [c for c in cards if c.next_review_at <= now]
    queue = rank_by_priority(due, now)
    if limit is not None:
        queue = queue[:limit]
    return queue
