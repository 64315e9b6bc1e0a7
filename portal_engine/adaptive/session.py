"""
Adaptive Test Session.

Caller-side driver for one adaptive test. Owns the loop the estimator and
selector leave to their caller:

    estimate ability -> select next item -> record response -> ...

until the pool is exhausted or the item cap is reached. Every incorrect
response yields a MistakeRecord for later analysis.

Completion can be triggered twice (time limit expiring while the learner
presses "finish"), so complete() is idempotent: the first call builds the
result and fires on_complete, every later call returns that same result.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from loguru import logger

from config import get_settings
from portal_engine.adaptive.ability_estimator import estimate
from portal_engine.adaptive.item_selector import select_next
from portal_engine.adaptive.models import Item, Observation, SessionResult
from portal_engine.analysis.mistakes import MistakeRecord


class SessionStateError(Exception):
    """Raised when a session is driven out of order."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AdaptiveTestSession:
    """
    One learner's pass through an item pool.

    The session holds its own history; nothing is shared between sessions,
    so concurrent learners need no coordination.
    """

    def __init__(
        self,
        pool: Iterable[Item],
        max_items: int | None = None,
        time_limit_seconds: int | None = None,
        on_complete: Callable[[SessionResult], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize a session.

        Args:
            pool: Items in pool order (order decides selection ties)
            max_items: Item cap (defaults to settings.session_max_items)
            time_limit_seconds: Optional limit (defaults to settings)
            on_complete: Called exactly once with the final result
            clock: Time source, injectable for tests
        """
        settings = get_settings()
        self.pool = list(pool)
        self.max_items = max_items if max_items is not None else settings.session_max_items
        self.time_limit_seconds = (
            time_limit_seconds
            if time_limit_seconds is not None
            else settings.session_time_limit_seconds
        )
        self.on_complete = on_complete
        self._clock = clock

        self._items_by_id: dict[str, Item] = {}
        for item in self.pool:
            if item.id in self._items_by_id:
                raise ValueError(f"Duplicate item id {item.id!r} in pool")
            self._items_by_id[item.id] = item
        self.observations: list[Observation] = []
        self.answered_ids: list[str] = []
        self.mistakes: list[MistakeRecord] = []
        self.current_item: Item | None = None
        self.started_at = clock()
        self._result: SessionResult | None = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def ability(self) -> float:
        """Ability recomputed from the full answer history."""
        return estimate(self.observations)

    @property
    def is_completed(self) -> bool:
        return self._result is not None

    @property
    def progress(self) -> float:
        """Percentage of the session answered (0-100)."""
        planned = min(len(self.pool), self.max_items)
        if planned == 0:
            return 100.0
        return min(100.0, len(self.answered_ids) / planned * 100)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the time limit has passed."""
        if self.time_limit_seconds is None:
            return False
        elapsed = ((now or self._clock()) - self.started_at).total_seconds()
        return elapsed >= self.time_limit_seconds

    # -------------------------------------------------------------------------
    # Loop
    # -------------------------------------------------------------------------

    def next_item(self) -> Item | None:
        """
        Pick the next item to administer.

        Returns:
            The selected item, or None when the cap is reached, the pool is
            exhausted or the session is already completed
        """
        if self.is_completed or len(self.answered_ids) >= self.max_items:
            self.current_item = None
            return None

        self.current_item = select_next(self.ability, self.pool, self.answered_ids)
        if self.current_item is not None:
            logger.debug(
                f"Selected item {self.current_item.id} "
                f"(difficulty={self.current_item.difficulty}, ability={self.ability:.2f})"
            )
        return self.current_item

    def record_response(
        self,
        item_id: str,
        correct: bool,
        user_answer: str | None = None,
    ) -> float:
        """
        Record the learner's answer to an item.

        Args:
            item_id: Id of the administered item
            correct: Whether the answer was correct
            user_answer: Answer text kept on the mistake record

        Returns:
            Updated ability estimate
        """
        if self.is_completed:
            raise SessionStateError("Session already completed")
        item = self._items_by_id.get(item_id)
        if item is None:
            raise SessionStateError(f"Item {item_id!r} is not in this session's pool")
        if item_id in self.answered_ids:
            raise SessionStateError(f"Item {item_id!r} was already answered")
        if len(self.answered_ids) >= self.max_items:
            raise SessionStateError(f"Session cap of {self.max_items} items reached")

        self.observations.append(Observation(item.difficulty, correct))
        self.answered_ids.append(item_id)
        if not correct:
            self.mistakes.append(
                MistakeRecord(
                    category=item.category,
                    grammar_point=item.grammar_point,
                    item_id=item.id,
                    user_answer=user_answer,
                )
            )
        if self.current_item is not None and self.current_item.id == item_id:
            self.current_item = None

        return self.ability

    def complete(self) -> SessionResult:
        """Finish the session. Safe to call more than once."""
        if self._result is not None:
            logger.debug("complete() called on a finished session; returning stored result")
            return self._result

        elapsed = (self._clock() - self.started_at).total_seconds()
        self._result = SessionResult(
            score=sum(1 for obs in self.observations if obs.correct),
            max_score=len(self.observations),
            final_ability=self.ability,
            time_spent_seconds=max(0, int(elapsed)),
            mistakes=list(self.mistakes),
        )
        self.current_item = None
        logger.info(
            f"Session completed: {self._result.score}/{self._result.max_score} "
            f"({self._result.percent}%), ability={self._result.final_ability:.2f}"
        )

        if self.on_complete is not None:
            self.on_complete(self._result)
        return self._result

    def run(self, answer: Callable[[Item], bool]) -> SessionResult:
        """
        Drive the whole session with an answer callback.

        Stops at the item cap, pool exhaustion or time limit.
        """
        while not self.is_expired():
            item = self.next_item()
            if item is None:
                break
            self.record_response(item.id, answer(item))
        return self.complete()
