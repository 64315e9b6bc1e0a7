"""
Flashcard Review.

Components:
- ReviewScheduler: SM-2 variant state transition
- due_set: Due cards in stable queue order
- InMemoryCardStore / rate_card: Compare-and-swap card updates
- FlashcardReviewSession: One pass over the due queue
"""

from portal_engine.review.card_store import (
    CardVersionConflict,
    InMemoryCardStore,
    rate_card,
)
from portal_engine.review.due import due_set
from portal_engine.review.models import ReviewCard, new_card
from portal_engine.review.scheduler import (
    InvalidRatingError,
    ReviewScheduler,
    ScheduleResult,
    SM2Config,
    schedule,
)
from portal_engine.review.session import FlashcardReviewSession

__all__ = [
    # Models
    "ReviewCard",
    "new_card",
    # Scheduling
    "ReviewScheduler",
    "ScheduleResult",
    "SM2Config",
    "InvalidRatingError",
    "schedule",
    "due_set",
    # Persistence contract
    "InMemoryCardStore",
    "CardVersionConflict",
    "rate_card",
    # Sessions
    "FlashcardReviewSession",
]
