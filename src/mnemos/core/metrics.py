"""Progress estimates, goal setting and deck statistics."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import StrEnum

from mnemos.core.models import Card, Difficulty, as_utc, utcnow
from mnemos.core.scheduler import InvalidInputError, round_half_up

MASTERED_THRESHOLD = 90  # Mastery at which a card counts as mastered in stats
ESTIMATE_DONE_THRESHOLD = 95  # Mastery treated as already mastered for estimates
DEFAULT_DAILY_GOAL = 20
MIN_DAILY_GOAL = 10
MAX_DAILY_GOAL = 100
DEFAULT_SECONDS_PER_CARD = 30
MAX_INTERVAL_DAYS = 365
MASTER_PRACTICE_DAYS = 7


@dataclass
class MasteryEstimate:
    days: int
    reviews: int


def estimate_time_to_mastery(
    current_mastery: float,
    avg_accuracy: float,
    reviews_per_day: float,
) -> MasteryEstimate:
    """Estimate reviews and days until a card reaches full mastery.

    Args:
        current_mastery: Current mastery score (0-100)
        avg_accuracy: Recent average accuracy (0-100)
        reviews_per_day: How many reviews of the card happen per day

    Returns:
        MasteryEstimate, zero for both when mastery is at least 95
    """
    if current_mastery >= ESTIMATE_DONE_THRESHOLD:
        return MasteryEstimate(days=0, reviews=0)

    if avg_accuracy <= 0:
        raise InvalidInputError("Average accuracy must be positive to estimate mastery")
    if reviews_per_day <= 0:
        raise InvalidInputError("Reviews per day must be positive to estimate mastery")

    points_needed = 100 - current_mastery
    avg_gain_per_review = (avg_accuracy / 100) * 15
    diminishing_factor = 1 - (current_mastery / 100) * 0.5

    reviews = math.ceil(points_needed / (avg_gain_per_review * diminishing_factor))
    days = math.ceil(reviews / reviews_per_day)
    return MasteryEstimate(days=days, reviews=reviews)


def calculate_daily_goal(
    total_words: int,
    due_words: int,
    avg_study_time_seconds: float,
    available_minutes: float,
    avg_accuracy: float,
) -> int:
    """Recommend a daily card goal.

    Blends the due backlog (capped at 50), what fits in the available time,
    and a log-scaled deck size, then scales by recent accuracy. Advisory
    only; an explicit user goal takes precedence at the call site.
    """
    if total_words == 0:
        return DEFAULT_DAILY_GOAL

    base_goal = min(due_words, 50)
    seconds_per_card = avg_study_time_seconds or DEFAULT_SECONDS_PER_CARD
    time_based_goal = math.floor((available_minutes * 60) / seconds_per_card)
    performance_multiplier = 0.5 + (avg_accuracy / 100) * 0.5
    total_words_factor = min(math.log10(total_words + 1), 2)

    recommended = round_half_up(
        (base_goal * 0.4 + time_based_goal * 0.3 + total_words_factor * 15)
        * performance_multiplier
    )
    return min(max(MIN_DAILY_GOAL, recommended), MAX_DAILY_GOAL)


@dataclass
class PerformanceRecord:
    """One past review outcome used for adaptive interval advice."""

    reviewed_at: datetime
    accuracy: float  # 0-100
    response_time_ms: float
    difficulty: Difficulty = Difficulty.INTERMEDIATE


@dataclass
class ReviewScheduleAdvice:
    next_interval: int
    confidence: float


def performance_consistency(accuracies: list[float]) -> float:
    """Consistency in [0, 1] from the spread of accuracies; 0.5 with too little data."""
    if len(accuracies) < 2:
        return 0.5

    mean = sum(accuracies) / len(accuracies)
    variance = sum((a - mean) ** 2 for a in accuracies) / len(accuracies)
    return max(0.0, 1 - math.sqrt(variance) / 50)


def calculate_optimal_review_schedule(
    history: list[PerformanceRecord],
    card: Card,
) -> ReviewScheduleAdvice:
    """Suggest an interval from recent performance instead of a single grade.

    Recent reviews weigh more (decay 0.9 per step back). The result is an
    advisory interval; it does not change the card.
    """
    if not history:
        return ReviewScheduleAdvice(next_interval=1, confidence=0.5)

    n = len(history)
    weights = [0.9 ** (n - i - 1) for i in range(n)]
    weighted_accuracy = sum(r.accuracy * w for r, w in zip(history, weights)) / sum(weights)

    recent = [r.response_time_ms for r in history[-5:]]
    avg_response_time = sum(recent) / len(recent)

    if weighted_accuracy > 90 and avg_response_time < 2000:
        multiplier = 2.5
    elif weighted_accuracy > 80:
        multiplier = 2.0
    elif weighted_accuracy > 70:
        multiplier = 1.5
    elif weighted_accuracy > 60:
        multiplier = 1.2
    else:
        multiplier = 1.1

    next_interval = max(1, min(MAX_INTERVAL_DAYS, round_half_up(card.interval * multiplier)))

    consistency = performance_consistency([r.accuracy for r in history])
    confidence = min(
        1.0,
        (weighted_accuracy / 100) * 0.6
        + consistency * 0.3
        + (0.1 if avg_response_time < 5000 else 0.0),
    )
    return ReviewScheduleAdvice(next_interval=next_interval, confidence=round(confidence, 2))


class MasteryLevel(StrEnum):
    NEW = "new"
    BEGINNER = "beginner"
    LEARNING = "learning"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    MASTERED = "mastered"


def mastery_level(score: float) -> MasteryLevel:
    """Bucket a mastery score into a named level."""
    if score >= 95:
        return MasteryLevel.MASTERED
    if score >= 80:
        return MasteryLevel.ADVANCED
    if score >= 60:
        return MasteryLevel.INTERMEDIATE
    if score >= 40:
        return MasteryLevel.LEARNING
    if score >= 20:
        return MasteryLevel.BEGINNER
    return MasteryLevel.NEW


@dataclass
class DeckStats:
    total: int = 0
    mastered: int = 0
    due_for_review: int = 0
    by_difficulty: dict[Difficulty, int] = field(
        default_factory=lambda: {d: 0 for d in Difficulty}
    )
    average_mastery: int = 0
    upcoming_reviews: list[tuple[date, int]] = field(default_factory=list)


def deck_statistics(cards: list[Card], now: datetime | None = None) -> DeckStats:
    """Aggregate mastery and due counts, with per-day reviews for the next week."""
    now = as_utc(now or utcnow())
    stats = DeckStats(total=len(cards))

    for card in cards:
        stats.by_difficulty[card.difficulty] += 1
        if card.mastery_score >= MASTERED_THRESHOLD:
            stats.mastered += 1
        if card.next_review_at <= now:
            stats.due_for_review += 1

    if cards:
        stats.average_mastery = round_half_up(sum(c.mastery_score for c in cards) / len(cards))

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    for i in range(7):
        day_start = midnight + timedelta(days=i)
        day_end = day_start + timedelta(days=1, microseconds=-1)
        count = sum(1 for c in cards if day_start <= c.next_review_at <= day_end)
        if count:
            stats.upcoming_reviews.append((day_start.date(), count))

    return stats


class RecommendationType(StrEnum):
    REVIEW = "review"
    NEW_CARDS = "new_cards"
    MASTER_PRACTICE = "master_practice"


@dataclass
class StudyRecommendation:
    type: RecommendationType
    priority: str  # "high", "medium" or "low"
    message: str
    action: str
    data: dict[str, int] = field(default_factory=dict)


def study_recommendation(
    cards: list[Card],
    daily_goal: int,
    now: datetime | None = None,
) -> StudyRecommendation:
    """Pick the most useful next study activity for the deck."""
    now = as_utc(now or utcnow())
    due_cards = sum(1 for c in cards if c.next_review_at <= now)

    if due_cards > daily_goal * 1.5:
        return StudyRecommendation(
            type=RecommendationType.REVIEW,
            priority="high",
            message=f"You have {due_cards} cards due for review. Let's catch up!",
            action="Start Review",
            data={"due_cards": due_cards},
        )

    end_of_tomorrow = now.replace(hour=23, minute=59, second=59, microsecond=999999) + timedelta(
        days=1
    )
    due_tomorrow = sum(1 for c in cards if now < c.next_review_at <= end_of_tomorrow)
    if due_tomorrow:
        return StudyRecommendation(
            type=RecommendationType.REVIEW,
            priority="medium",
            message=(
                f"{due_tomorrow} cards will be due tomorrow. "
                "Review them now for better retention!"
            ),
            action="Preview Tomorrow",
            data={"due_tomorrow": due_tomorrow},
        )

    new_cards = sum(1 for c in cards if c.review_count == 0)
    if new_cards:
        return StudyRecommendation(
            type=RecommendationType.NEW_CARDS,
            priority="medium",
            message=f"You have {new_cards} new words waiting to be learned.",
            action="Learn New Words",
            data={"new_cards": new_cards},
        )

    stale_after = timedelta(days=MASTER_PRACTICE_DAYS)
    needs_practice = sum(
        1
        for c in cards
        if c.mastery_score >= MASTERED_THRESHOLD
        and c.last_reviewed_at is not None
        and now - c.last_reviewed_at >= stale_after
    )
    if needs_practice:
        return StudyRecommendation(
            type=RecommendationType.MASTER_PRACTICE,
            priority="low",
            message=f"Practice {needs_practice} mastered words to keep them fresh.",
            action="Master Practice",
            data={"needs_practice": needs_practice},
        )

    return StudyRecommendation(
        type=RecommendationType.REVIEW,
        priority="low",
        message="Keep up the good work! Review some cards to maintain your streak.",
        action="Start Study",
        data={"due_cards": due_cards},
    )
