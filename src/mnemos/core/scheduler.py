"""SM-2 derived review scheduler for mnemos."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from mnemos.core.config import (
    EASE_DELTAS,
    GRADUATING_INTERVALS,
    INITIAL_EASE_FACTOR,
    MASTERY_INCREMENT,
    MAX_EASE_FACTOR,
    MIN_EASE_FACTOR,
    PASS_THRESHOLD,
    SchedulerConfig,
)
from mnemos.core.models import Card, SchedulingUpdate, as_utc, utcnow

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """Raised when a review is requested with malformed input."""


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return math.floor(value + 0.5)


def clamp_ease_factor(ease_factor: float) -> float:
    return max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, ease_factor))


def ease_factor_change(quality: int) -> float:
    """Ease factor delta for a quality rating."""
    return EASE_DELTAS[quality]


def mastery_increment(quality: int, current_mastery: float) -> float:
    """Signed mastery change for a review.

    Failures cost less on well-known cards (multiplier floored at 0.3);
    successes gain less as mastery approaches 100.
    """
    if quality < PASS_THRESHOLD:
        penalty_multiplier = max(0.3, 1 - current_mastery / 100)
        return -MASTERY_INCREMENT * penalty_multiplier

    increment = MASTERY_INCREMENT * (quality / 5)
    diminishing_factor = 1 - (current_mastery / 100) * 0.7
    return increment * diminishing_factor


def validate_quality(quality: Any) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int) or not 0 <= quality <= 5:
        raise InvalidInputError("Quality rating must be between 0 and 5")
    return int(quality)


def validate_mastery(mastery_score: float) -> None:
    if not 0 <= mastery_score <= 100:
        raise InvalidInputError("Mastery score must be between 0 and 100")


class ReviewScheduler:
    """Computes scheduling updates for cards.

    Holds no card state. ``clock`` supplies "now" when a call does not pass
    one explicitly, and ``random_source`` returns floats in [0, 1) for the
    date jitter; pin it to 0.5 for zero jitter.
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
        random_source: Callable[[], float] = random.random,
    ):
        self.config = config or SchedulerConfig()
        self.clock = clock
        self.random_source = random_source

    def calculate_next_review(
        self,
        card: Card,
        quality: int,
        now: datetime | None = None,
    ) -> SchedulingUpdate:
        """Compute the scheduling fields that follow reviewing ``card``.

        Args:
            card: Card snapshot; it is not modified
            quality: Recall quality, 0 (blackout) to 5 (perfect)
            now: Review time, defaults to the scheduler's clock

        Returns:
            SchedulingUpdate to be merged onto the card by the caller

        Raises:
            InvalidInputError: quality is not an integer in [0, 5], or the
                card's mastery score is outside [0, 100]
        """
        try:
            quality = validate_quality(quality)
            validate_mastery(card.mastery_score)
        except InvalidInputError as e:
            logger.warning("Rejected review of card %s: %s", card.id, e)
            raise

        now = as_utc(now or self.clock())

        if quality < PASS_THRESHOLD:
            interval = 1
            review_count = 0
        else:
            if card.review_count == 0:
                interval = GRADUATING_INTERVALS[0]
            elif card.review_count == 1:
                interval = GRADUATING_INTERVALS[1]
            else:
                interval = max(1, round_half_up(card.interval * card.ease_factor))
            review_count = card.review_count + 1

        ease_factor = clamp_ease_factor(card.ease_factor + ease_factor_change(quality))

        mastery = card.mastery_score + mastery_increment(quality, card.mastery_score)
        mastery = min(100.0, max(0.0, mastery))

        update = SchedulingUpdate(
            interval=interval,
            ease_factor=round(ease_factor, 2),
            review_count=review_count,
            mastery_score=round_half_up(mastery),
            next_review_at=self.next_review_date(interval, now),
            last_reviewed_at=now,
        )
        logger.debug(
            "Card %s quality=%d -> interval=%d ease=%.2f reviews=%d mastery=%d",
            card.id,
            quality,
            update.interval,
            update.ease_factor,
            update.review_count,
            update.mastery_score,
        )
        return update

    def review(self, card: Card, quality: int, now: datetime | None = None) -> Card:
        """Review a card and return the updated copy."""
        return self.calculate_next_review(card, quality, now).apply(card)

    def jitter_days(self, interval_days: int) -> int:
        """Whole-day variation of +/- jitter_ratio of the interval, capped."""
        ratio = self.config.jitter_ratio
        variation = self.random_source() * 2 * ratio - ratio
        variation_days = round_half_up(interval_days * variation)
        capped = min(abs(variation_days), self.config.max_jitter_days)
        return capped if variation_days >= 0 else -capped

    def next_review_date(self, interval_days: int, now: datetime) -> datetime:
        """Due date for a new interval, never earlier than one day after ``now``."""
        due = now + timedelta(days=interval_days + self.jitter_days(interval_days))
        tomorrow = now + timedelta(days=1)
        return max(due, tomorrow)

    def initialize_card(self, now: datetime | None = None, **fields: Any) -> Card:
        """Create a card with initial scheduling values; it is due immediately."""
        now = as_utc(now or self.clock())
        return Card(**{**fields, **_initial_scheduling_fields(now)})

    def reset_card_progress(self, card: Card, now: datetime | None = None) -> Card:
        """Reset scheduling fields, keeping the word data and metadata."""
        now = as_utc(now or self.clock())
        logger.debug("Resetting progress of card %s", card.id)
        return card.model_copy(update=_initial_scheduling_fields(now))


def _initial_scheduling_fields(now: datetime) -> dict[str, Any]:
    return {
        "interval": 1,
        "ease_factor": INITIAL_EASE_FACTOR,
        "review_count": 0,
        "mastery_score": 0,
        "next_review_at": now,
        "last_reviewed_at": now,
    }


_default_scheduler = ReviewScheduler()


def calculate_next_review(card: Card, quality: int, now: datetime | None = None) -> SchedulingUpdate:
    """Compute the next review with the default scheduler."""
    return _default_scheduler.calculate_next_review(card, quality, now)


def initialize_card(now: datetime | None = None, **fields: Any) -> Card:
    """Create a fresh card with the default scheduler."""
    return _default_scheduler.initialize_card(now, **fields)


def reset_card_progress(card: Card, now: datetime | None = None) -> Card:
    """Reset a card's progress with the default scheduler."""
    return _default_scheduler.reset_card_progress(card, now)
