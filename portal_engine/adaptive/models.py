"""
Data models for adaptive testing.

Pure data structures: items come from the question store and are immutable
for the duration of a session, observations live only as long as the session.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from portal_engine.analysis.mistakes import MistakeRecord

DEFAULT_DIFFICULTY = 3.0


@dataclass(frozen=True)
class Item:
    """A test item (question) available for selection."""

    id: str
    difficulty: float = DEFAULT_DIFFICULTY  # Nominal 1-5
    category: str | None = None
    grammar_point: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Item:
        """Build an item from a question-store row, defaulting a missing difficulty."""
        difficulty = data.get("difficulty")
        return cls(
            id=str(data["id"]),
            difficulty=DEFAULT_DIFFICULTY if difficulty is None else float(difficulty),
            category=data.get("category"),
            grammar_point=data.get("grammar_point"),
        )


@dataclass(frozen=True)
class Observation:
    """One answered item: the item's difficulty and whether the answer was correct."""

    difficulty: float
    correct: bool


@dataclass(frozen=True)
class SessionResult:
    """Outcome of a completed adaptive test session."""

    score: int  # Correct answers
    max_score: int  # Items answered
    final_ability: float
    time_spent_seconds: int
    mistakes: list[MistakeRecord] = field(default_factory=list)

    @property
    def percent(self) -> int:
        """Score as a whole percentage (0 when nothing was answered)."""
        if self.max_score == 0:
            return 0
        return int(self.score / self.max_score * 100 + 0.5)
