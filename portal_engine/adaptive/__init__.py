"""
Adaptive Testing.

Components:
- estimate / AbilityAccumulator: Skill estimate from a session's history
- select_next: Closest-difficulty item selection
- AdaptiveTestSession: Caller-side session loop with idempotent completion
"""

from portal_engine.adaptive.ability_estimator import (
    DEFAULT_ABILITY,
    AbilityAccumulator,
    estimate,
)
from portal_engine.adaptive.item_selector import select_next
from portal_engine.adaptive.models import Item, Observation, SessionResult
from portal_engine.adaptive.session import AdaptiveTestSession, SessionStateError

__all__ = [
    # Estimation
    "DEFAULT_ABILITY",
    "AbilityAccumulator",
    "estimate",
    # Selection
    "select_next",
    # Models
    "Item",
    "Observation",
    "SessionResult",
    # Session
    "AdaptiveTestSession",
    "SessionStateError",
]
