"""
SM-2 Spaced Repetition Scheduler.

Pure state transition: (rating, ease factor, interval) -> successor state.

Rating Scale:
1 - Complete blackout
2 - Incorrect, but recognised once shown
3 - Correct, with significant difficulty
4 - Correct, with some hesitation
5 - Correct, with perfect recall

Ratings below 3 reset the interval to one day. Successful ratings step
through 1 day, 6 days, then interval * ease factor.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from loguru import logger

from portal_engine.review.models import (
    MINIMUM_EASE_FACTOR,
    ReviewCard,
)

MIN_RATING = 1
MAX_RATING = 5
PASSING_RATING = 3


class InvalidRatingError(ValueError):
    """Raised when a rating is outside 1-5 or not an integer."""
    pass


@dataclass
class SM2Config:
    """Configuration for the SM-2 update."""

    minimum_easiness: float = MINIMUM_EASE_FACTOR
    first_interval: int = 1  # Days for first review
    second_interval: int = 6  # Days for second review


@dataclass(frozen=True)
class ScheduleResult:
    """Successor state produced by one rating."""

    ease_factor: float
    interval: int
    due_at: datetime


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (round() would go to even)."""
    return math.floor(value + 0.5)


def validate_rating(rating: object) -> int:
    """Reject anything that is not an integer rating in 1-5."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(f"Rating must be an integer, got {rating!r}")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRatingError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}"
        )
    return rating


class ReviewScheduler:
    """
    Implements the SM-2 variant used for flashcard review.

    Holds no state beyond its configuration; the same inputs always give the
    same successor.
    """

    def __init__(self, config: SM2Config | None = None):
        """
        Initialize the scheduler.

        Args:
            config: Custom configuration (uses defaults if None)
        """
        self.config = config or SM2Config()

    def schedule(
        self,
        rating: int,
        ease_factor: float,
        interval: int,
        now: datetime | None = None,
    ) -> ScheduleResult:
        """
        Calculate the next review state.

        Args:
            rating: Recall quality 1-5
            ease_factor: Current ease factor
            interval: Current interval in days
            now: Reference time (defaults to current UTC time)

        Returns:
            ScheduleResult with new ease factor, interval and due time
        """
        validate_rating(rating)
        if interval < 0:
            raise ValueError(f"Interval must be >= 0, got {interval}")

        # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        new_ef = max(
            self.config.minimum_easiness,
            ease_factor + (0.1 - (5 - rating) * (0.08 + (5 - rating) * 0.02)),
        )

        if rating < PASSING_RATING:
            new_interval = self.config.first_interval
        elif interval == 0:
            new_interval = self.config.first_interval
        elif interval == 1:
            new_interval = self.config.second_interval
        else:
            new_interval = round_half_up(interval * new_ef)

        reference = now if now is not None else datetime.now(timezone.utc)
        return ScheduleResult(
            ease_factor=new_ef,
            interval=new_interval,
            due_at=reference + timedelta(days=new_interval),
        )

    def apply_rating(
        self,
        card: ReviewCard,
        rating: int,
        now: datetime | None = None,
    ) -> ReviewCard:
        """
        Return a copy of card with one rating applied.

        The copy carries the scheduled fields, one more review and the next
        version number. The input card is left untouched.
        """
        result = self.schedule(rating, card.ease_factor, card.interval, now=now)
        logger.debug(
            f"Card {card.id}: rating={rating} ef {card.ease_factor:.2f}->{result.ease_factor:.2f} "
            f"interval {card.interval}->{result.interval}"
        )
        return replace(
            card,
            ease_factor=result.ease_factor,
            interval=result.interval,
            due_at=result.due_at,
            review_count=card.review_count + 1,
            version=card.version + 1,
        )


_default_scheduler = ReviewScheduler()


def schedule(
    rating: int,
    ease_factor: float,
    interval: int,
    now: datetime | None = None,
) -> ScheduleResult:
    """Schedule with the default SM-2 configuration."""
    return _default_scheduler.schedule(rating, ease_factor, interval, now=now)
