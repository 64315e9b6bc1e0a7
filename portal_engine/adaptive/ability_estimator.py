"""
Ability Estimator.

Simplified ability estimation from a session's answer history. This is not a
calibrated IRT model: the estimate is the share of attempted difficulty that
was answered correctly, scaled to the 1-5 difficulty range and weighted by the
plain correct ratio.

    ability = (correct_difficulty / total_difficulty) * 5 * correct_ratio

clamped to [1, 5]. With no observations the estimate is the medium default.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from portal_engine.adaptive.models import Observation

DEFAULT_ABILITY = 3.0
MIN_ABILITY = 1.0
MAX_ABILITY = 5.0


def _clamp(value: float) -> float:
    return max(MIN_ABILITY, min(MAX_ABILITY, value))


class AbilityAccumulator:
    """
    Running sums behind the ability estimate.

    Adding observations one at a time in session order gives exactly the
    same value as calling estimate() on the full history, because the sums
    are accumulated in the same left-to-right order.
    """

    def __init__(self) -> None:
        self.total_difficulty = 0.0
        self.correct_difficulty = 0.0
        self.correct_count = 0
        self.count = 0

    def add(self, difficulty: float, correct: bool) -> None:
        self.total_difficulty += difficulty
        if correct:
            self.correct_difficulty += difficulty
            self.correct_count += 1
        self.count += 1

    @property
    def estimate(self) -> float:
        if self.count == 0:
            return DEFAULT_ABILITY

        if self.total_difficulty == 0:
            # Dividing would yield NaN and poison item selection
            logger.warning(
                f"Total difficulty is zero over {self.count} observations; "
                f"falling back to default ability {DEFAULT_ABILITY}"
            )
            return DEFAULT_ABILITY

        correct_ratio = self.correct_count / self.count
        ability = (self.correct_difficulty / self.total_difficulty) * 5 * correct_ratio
        return _clamp(ability)


def estimate(
    observations: Iterable[Observation | tuple[float, bool]],
) -> float:
    """
    Recompute the ability estimate from a full answer history.

    Args:
        observations: Ordered (difficulty, correct) pairs or Observation objects

    Returns:
        Ability in [1, 5]; 3.0 for an empty history or zero total difficulty
    """
    acc = AbilityAccumulator()
    for obs in observations:
        if isinstance(obs, Observation):
            acc.add(obs.difficulty, obs.correct)
        else:
            difficulty, correct = obs
            acc.add(difficulty, correct)
    return acc.estimate
