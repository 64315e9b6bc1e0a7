"""
Unit tests for AdaptiveTestSession.

Tests:
- Selection follows the re-estimated ability
- Item cap and pool exhaustion end the session
- No item is administered twice
- Incorrect answers produce mistake records
- Completion is idempotent
"""

from datetime import timedelta

import pytest

from portal_engine.adaptive.models import Item, SessionResult
from portal_engine.adaptive.session import AdaptiveTestSession, SessionStateError


class FakeClock:
    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, seconds):
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock(now):
    return FakeClock(now)


@pytest.fixture
def large_pool():
    return [Item(f"q{i:02d}", 1.0 + (i % 5)) for i in range(25)]


class TestSelection:
    def test_first_item_targets_default_ability(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        assert session.ability == 3.0
        assert session.next_item().id == "q3"

    def test_wrong_answer_moves_to_easier_item(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        session.record_response(session.next_item().id, False)
        assert session.ability == 1.0
        assert session.next_item().id == "q1"

    def test_right_answer_moves_to_harder_item(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        session.record_response(session.next_item().id, True)
        assert session.ability == 5.0
        assert session.next_item().id == "q5"


class TestSessionEnd:
    def test_cap_of_ten_items(self, large_pool, clock):
        session = AdaptiveTestSession(large_pool, clock=clock)
        result = session.run(lambda item: True)
        assert result.max_score == 10
        assert session.next_item() is None

    def test_custom_cap(self, large_pool, clock):
        session = AdaptiveTestSession(large_pool, max_items=4, clock=clock)
        assert session.run(lambda item: False).max_score == 4

    def test_pool_exhaustion(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        result = session.run(lambda item: item.difficulty < 3)
        assert result.max_score == len(item_pool)

    def test_no_item_administered_twice(self, large_pool, clock):
        session = AdaptiveTestSession(large_pool, clock=clock)
        session.run(lambda item: item.difficulty <= 3)
        assert len(session.answered_ids) == len(set(session.answered_ids))

    def test_time_limit_stops_session(self, large_pool, clock):
        def slow_answer(item):
            clock.advance(30)
            return True

        session = AdaptiveTestSession(large_pool, time_limit_seconds=60, clock=clock)
        result = session.run(slow_answer)
        assert result.max_score == 2
        assert result.time_spent_seconds == 60
        assert session.is_expired()

    def test_untimed_session_never_expires(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        clock.advance(10_000)
        assert session.is_expired() is False

    def test_progress(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, max_items=4, clock=clock)
        assert session.progress == 0.0
        session.record_response(session.next_item().id, True)
        assert session.progress == 25.0


class TestResponses:
    def test_duplicate_pool_ids_rejected(self, clock):
        with pytest.raises(ValueError, match="Duplicate item id 'x'"):
            AdaptiveTestSession([Item("x", 3.0), Item("x", 1.0)], clock=clock)

    def test_recorded_difficulty_matches_selected_item(self, clock):
        session = AdaptiveTestSession([Item("x", 3.0), Item("y", 1.0)], clock=clock)
        item = session.next_item()
        session.record_response(item.id, True)
        assert session.observations[0].difficulty == item.difficulty == 3.0

    def test_unknown_item_rejected(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        with pytest.raises(SessionStateError):
            session.record_response("nope", True)

    def test_duplicate_answer_rejected(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        session.record_response("q3", True)
        with pytest.raises(SessionStateError):
            session.record_response("q3", False)
        assert len(session.observations) == 1

    def test_mistakes_recorded_for_wrong_answers(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        session.record_response("q4", False, user_answer="食べて")
        session.record_response("q2", True)

        assert len(session.mistakes) == 1
        mistake = session.mistakes[0]
        assert mistake.item_id == "q4"
        assert mistake.category == "grammar"
        assert mistake.grammar_point == "conditionals"
        assert mistake.user_answer == "食べて"


class TestCompletion:
    def test_result(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        session.record_response("q3", True)
        session.record_response("q5", False)
        session.record_response("q4", True)
        clock.advance(95)

        result = session.complete()
        assert result.score == 2
        assert result.max_score == 3
        assert result.percent == 67
        assert result.time_spent_seconds == 95
        assert result.final_ability == session.ability
        assert len(result.mistakes) == 1

    def test_complete_twice_fires_callback_once(self, item_pool, clock):
        persisted = []
        session = AdaptiveTestSession(item_pool, on_complete=persisted.append, clock=clock)
        session.record_response("q3", True)

        first = session.complete()
        clock.advance(5)
        second = session.complete()

        assert first is second
        assert persisted == [first]

    def test_no_responses_after_completion(self, item_pool, clock):
        session = AdaptiveTestSession(item_pool, clock=clock)
        session.complete()
        with pytest.raises(SessionStateError):
            session.record_response("q1", True)
        assert session.next_item() is None

    def test_empty_session_scores_zero_percent(self, clock):
        result = AdaptiveTestSession([], clock=clock).complete()
        assert result == SessionResult(0, 0, 3.0, 0, [])
        assert result.percent == 0
