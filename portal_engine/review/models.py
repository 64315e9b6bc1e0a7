"""
Flashcard review state.

ReviewCard is owned by the persistence layer. The engine never mutates one;
it returns a new copy with the scheduled fields applied.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

INITIAL_EASE_FACTOR = 2.5
MINIMUM_EASE_FACTOR = 1.3


@dataclass(frozen=True)
class ReviewCard:
    """SM-2 review state for a single flashcard."""

    id: str
    due_at: datetime
    ease_factor: float = INITIAL_EASE_FACTOR  # Never below 1.3 once scheduled
    interval: int = 0  # Days; 0 = never successfully reviewed
    review_count: int = 0
    version: int = 0  # Etag for compare-and-swap writes

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ReviewCard:
        return cls(
            id=str(data["id"]),
            due_at=data["due_at"],
            ease_factor=float(data.get("ease_factor", INITIAL_EASE_FACTOR)),
            interval=int(data.get("interval", 0)),
            review_count=int(data.get("review_count", 0)),
            version=int(data.get("version", 0)),
        )


def new_card(card_id: str, now: datetime) -> ReviewCard:
    """Initial state for a card that has never been reviewed: due immediately."""
    return ReviewCard(id=card_id, due_at=now)
