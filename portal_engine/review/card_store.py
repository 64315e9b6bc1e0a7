"""
In-memory card store with compare-and-swap writes.

Two devices rating the same card at nearly the same moment would both read
the same prior state; writing back blindly loses one update. Every write here
names the version it was computed from and is rejected if the stored card has
moved on. rate_card() re-reads and recomputes on conflict.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime

from loguru import logger

from config import get_settings
from portal_engine.review.models import ReviewCard
from portal_engine.review.scheduler import ReviewScheduler, validate_rating


class CardVersionConflict(Exception):
    """Raised when a compare-and-swap finds a newer stored version."""

    def __init__(self, card_id: str, expected: int, actual: int):
        super().__init__(
            f"Card {card_id}: expected version {expected}, stored version is {actual}"
        )
        self.card_id = card_id
        self.expected = expected
        self.actual = actual


class InMemoryCardStore:
    """Thread-safe map of card id -> ReviewCard."""

    def __init__(self, cards: Iterable[ReviewCard] = ()):
        self._lock = threading.Lock()
        self._cards: dict[str, ReviewCard] = {card.id: card for card in cards}

    def __len__(self) -> int:
        return len(self._cards)

    def get(self, card_id: str) -> ReviewCard:
        with self._lock:
            return self._cards[card_id]

    def all(self) -> list[ReviewCard]:
        with self._lock:
            return list(self._cards.values())

    def add(self, card: ReviewCard) -> None:
        with self._lock:
            if card.id in self._cards:
                raise KeyError(f"Card {card.id} already exists")
            self._cards[card.id] = card

    def compare_and_swap(self, expected_version: int, card: ReviewCard) -> ReviewCard:
        """
        Store card only if the stored version still equals expected_version.

        Raises:
            KeyError: Unknown card id
            CardVersionConflict: The stored card was updated in the meantime
        """
        with self._lock:
            current = self._cards[card.id]
            if current.version != expected_version:
                raise CardVersionConflict(card.id, expected_version, current.version)
            self._cards[card.id] = card
            return card


def rate_card(
    store: InMemoryCardStore,
    card_id: str,
    rating: int,
    scheduler: ReviewScheduler | None = None,
    now: datetime | None = None,
    max_retries: int | None = None,
) -> ReviewCard:
    """
    Apply one rating to a stored card, retrying on version conflicts.

    Args:
        store: Card store
        card_id: Card to rate
        rating: Recall quality 1-5 (validated before anything is read)
        scheduler: SM-2 scheduler (default config if None)
        now: Reference time for the due date
        max_retries: Retries after a conflict (defaults to settings)

    Returns:
        The card as written

    Raises:
        InvalidRatingError: Rating outside 1-5
        CardVersionConflict: Still conflicting after max_retries retries
    """
    validate_rating(rating)
    scheduler = scheduler or ReviewScheduler()
    if max_retries is None:
        max_retries = get_settings().card_update_max_retries

    attempt = 0
    while True:
        current = store.get(card_id)
        updated = scheduler.apply_rating(current, rating, now=now)
        try:
            return store.compare_and_swap(current.version, updated)
        except CardVersionConflict as e:
            if attempt >= max_retries:
                logger.error(f"Giving up on card {card_id} after {attempt} retries: {e}")
                raise
            attempt += 1
            logger.warning(f"{e}; retrying ({attempt}/{max_retries})")
