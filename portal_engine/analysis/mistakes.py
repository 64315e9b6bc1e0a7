"""
Mistake Analysis.

Groups historical incorrect-answer records by category and by grammar point
and ranks them into a weak-area report. Counting follows first-encounter
order and the ranking sort is stable, so equal counts keep the order in which
each key first appeared in the input.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

DEFAULT_FOCUS_SIZE = 3


@dataclass(frozen=True)
class MistakeRecord:
    """
    A persisted incorrect answer.

    Only category and grammar_point take part in grouping; either may be
    absent. item_id and user_answer are carried along for display.
    """

    category: str | None = None
    grammar_point: str | None = None
    item_id: str | None = None
    user_answer: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MistakeRecord:
        return cls(
            category=data.get("category"),
            grammar_point=data.get("grammar_point"),
            item_id=data.get("item_id"),
            user_answer=data.get("user_answer"),
        )


@dataclass(frozen=True)
class KeyCount:
    """A grouping key and how many mistakes fell under it."""

    key: str
    count: int


@dataclass(frozen=True)
class MistakeReport:
    """Weak-area report produced by analyze()."""

    total_mistakes: int = 0
    category_counts: list[KeyCount] = field(default_factory=list)
    grammar_point_counts: list[KeyCount] = field(default_factory=list)
    most_common_mistake: KeyCount | None = None
    recommended_focus: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Render the report in the portal's JSON shape."""
        return {
            "totalMistakes": self.total_mistakes,
            "categoryCounts": [
                {"category": c.key, "count": c.count} for c in self.category_counts
            ],
            "grammarPointCounts": [
                {"grammarPoint": g.key, "count": g.count} for g in self.grammar_point_counts
            ],
            "mostCommonMistake": (
                {
                    "category": self.most_common_mistake.key,
                    "count": self.most_common_mistake.count,
                }
                if self.most_common_mistake
                else None
            ),
            "recommendedFocus": list(self.recommended_focus),
        }


def _ranked(counts: dict[str, int]) -> list[KeyCount]:
    # sorted() is stable: ties stay in first-encountered order
    return sorted(
        (KeyCount(key, count) for key, count in counts.items()),
        key=lambda kc: kc.count,
        reverse=True,
    )


def analyze(
    mistakes: Iterable[MistakeRecord | Mapping[str, Any]] | None,
    focus_size: int = DEFAULT_FOCUS_SIZE,
) -> MistakeReport:
    """
    Aggregate mistake records into a weak-area report.

    Args:
        mistakes: MistakeRecord objects or {category?, grammar_point?} mappings
        focus_size: How many grammar points to recommend

    Returns:
        MistakeReport; records with neither label are counted in
        total_mistakes but excluded from both groupings
    """
    records = [
        m if isinstance(m, MistakeRecord) else MistakeRecord.from_mapping(m)
        for m in (mistakes or [])
    ]
    if not records:
        return MistakeReport()

    category_map: dict[str, int] = {}
    grammar_point_map: dict[str, int] = {}
    unlabelled = 0

    for record in records:
        if record.category:
            category_map[record.category] = category_map.get(record.category, 0) + 1
        if record.grammar_point:
            grammar_point_map[record.grammar_point] = (
                grammar_point_map.get(record.grammar_point, 0) + 1
            )
        if not record.category and not record.grammar_point:
            unlabelled += 1

    if unlabelled:
        logger.debug(f"Skipped {unlabelled} mistake records with no category or grammar point")

    category_counts = _ranked(category_map)
    grammar_point_counts = _ranked(grammar_point_map)

    return MistakeReport(
        total_mistakes=len(records),
        category_counts=category_counts,
        grammar_point_counts=grammar_point_counts,
        most_common_mistake=category_counts[0] if category_counts else None,
        recommended_focus=[gp.key for gp in grammar_point_counts[:focus_size]],
    )
