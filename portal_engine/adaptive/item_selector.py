"""
Item Selector.

Picks the unanswered item whose difficulty is closest to the current ability
estimate. Pool order is significant: the scan only replaces the best item on a
strictly smaller distance, so the first item in pool order wins ties.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from loguru import logger

from portal_engine.adaptive.models import Item


def select_next(
    ability: float,
    pool: Iterable[Item],
    answered_ids: Collection[str],
) -> Item | None:
    """
    Select the next item to administer.

    Args:
        ability: Current ability estimate
        pool: Candidate items in pool order
        answered_ids: Ids already administered in this session

    Returns:
        The closest-difficulty unanswered item, or None when the pool is
        exhausted (the session-ending signal)
    """
    answered = set(answered_ids)
    best: Item | None = None
    best_distance = 0.0

    for item in pool:
        if item.id in answered:
            continue
        distance = abs(item.difficulty - ability)
        if best is None or distance < best_distance:
            best = item
            best_distance = distance

    if best is None:
        logger.debug("No unanswered items left in pool")
    return best
