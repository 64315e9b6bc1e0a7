"""
Snapshot models for the CLI.

Validates the JSON the persistence layer hands over (card collections, item
pools, answer histories, mistake streams) before it reaches the engine.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TypeVar

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, field_validator

from portal_engine.adaptive.models import Item, Observation
from portal_engine.analysis.mistakes import MistakeRecord
from portal_engine.review.models import INITIAL_EASE_FACTOR, ReviewCard

T = TypeVar("T", bound=BaseModel)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CardModel(BaseModel):
    """A flashcard's review state as stored."""

    id: str
    ease_factor: float = Field(default=INITIAL_EASE_FACTOR, ge=0)
    interval: int = Field(default=0, ge=0)
    due_at: datetime = Field(validation_alias=AliasChoices("due_at", "next_review"))
    review_count: int = Field(default=0, ge=0)
    version: int = Field(default=0, ge=0)

    @field_validator("due_at")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    def to_card(self) -> ReviewCard:
        return ReviewCard(
            id=self.id,
            due_at=self.due_at,
            ease_factor=self.ease_factor,
            interval=self.interval,
            review_count=self.review_count,
            version=self.version,
        )

    @classmethod
    def from_card(cls, card: ReviewCard) -> CardModel:
        return cls(
            id=card.id,
            ease_factor=card.ease_factor,
            interval=card.interval,
            due_at=card.due_at,
            review_count=card.review_count,
            version=card.version,
        )


class ItemModel(BaseModel):
    """A question from the item pool."""

    id: str
    difficulty: float | None = None
    category: str | None = None
    grammar_point: str | None = None

    def to_item(self) -> Item:
        return Item.from_mapping(self.model_dump())


class ResponseModel(BaseModel):
    """One answered item in a session history."""

    item_id: str | None = None
    difficulty: float
    correct: bool

    def to_observation(self) -> Observation:
        return Observation(self.difficulty, self.correct)


class MistakeModel(BaseModel):
    """A persisted mistake record."""

    category: str | None = None
    grammar_point: str | None = None
    item_id: str | None = None
    user_answer: str | None = None

    def to_record(self) -> MistakeRecord:
        return MistakeRecord(**self.model_dump())


def load_list(path: Path, model: type[T]) -> list[T]:
    """Load and validate a JSON array of `model` objects."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return TypeAdapter(list[model]).validate_python(data)


def dump_cards(path: Path, cards: list[ReviewCard]) -> None:
    """Write a card snapshot back to disk."""
    payload = [CardModel.from_card(card).model_dump(mode="json") for card in cards]
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
