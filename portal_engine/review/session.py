"""
Flashcard review session.

Resolves the due set once when the session starts, then walks that queue,
scheduling each card as it is rated. Cards that become due while the session
runs are left for the next session.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger

from portal_engine.review.card_store import InMemoryCardStore, rate_card
from portal_engine.review.due import due_set
from portal_engine.review.models import ReviewCard
from portal_engine.review.scheduler import ReviewScheduler


class FlashcardReviewSession:
    """Review queue over a card store."""

    def __init__(
        self,
        store: InMemoryCardStore,
        now: datetime,
        scheduler: ReviewScheduler | None = None,
    ):
        self.store = store
        self.now = now
        self.scheduler = scheduler or ReviewScheduler()
        self.queue: list[str] = [card.id for card in due_set(store.all(), now)]
        self.position = 0
        self.reviewed: list[ReviewCard] = []

        logger.info(f"Review session started with {len(self.queue)} due cards")

    @property
    def is_finished(self) -> bool:
        return self.position >= len(self.queue)

    @property
    def current(self) -> ReviewCard | None:
        """The card awaiting a rating, re-read from the store."""
        if self.is_finished:
            return None
        return self.store.get(self.queue[self.position])

    @property
    def progress(self) -> float:
        """Percentage of the queue rated (100 for an empty queue)."""
        if not self.queue:
            return 100.0
        return self.position / len(self.queue) * 100

    def rate(self, rating: int) -> ReviewCard:
        """
        Rate the current card and advance.

        Raises:
            IndexError: Queue already finished
            InvalidRatingError: Rating outside 1-5 (the queue does not advance)
        """
        if self.is_finished:
            raise IndexError("No cards left in this review session")

        updated = rate_card(
            self.store,
            self.queue[self.position],
            rating,
            scheduler=self.scheduler,
            now=self.now,
        )
        self.reviewed.append(updated)
        self.position += 1

        if self.is_finished:
            logger.info(f"Review session finished: {len(self.reviewed)} cards rated")
        return updated
