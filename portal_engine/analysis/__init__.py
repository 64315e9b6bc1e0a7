"""
Mistake analysis: weak-area reports from historical incorrect answers.
"""

from portal_engine.analysis.mistakes import (
    KeyCount,
    MistakeRecord,
    MistakeReport,
    analyze,
)

__all__ = [
    "KeyCount",
    "MistakeRecord",
    "MistakeReport",
    "analyze",
]
