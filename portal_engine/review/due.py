"""
Due set resolution for flashcard review.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from portal_engine.review.models import ReviewCard


def due_set(cards: Iterable[ReviewCard], now: datetime) -> list[ReviewCard]:
    """
    Filter cards to those due at `now`.

    The boundary is inclusive and input order is kept, so the result can be
    used directly as a stable review queue.
    """
    return [card for card in cards if card.due_at <= now]
