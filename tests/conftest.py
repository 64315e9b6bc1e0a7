"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from portal_engine.adaptive.models import Item
from portal_engine.review.models import ReviewCard


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (full engine flows)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """A fixed reference time."""
    return datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def item_pool():
    """Provide a small grammar item pool spanning the difficulty range."""
    return [
        Item("q1", 1.0, category="grammar", grammar_point="particles"),
        Item("q2", 2.0, category="vocab", grammar_point=None),
        Item("q3", 3.0, category="grammar", grammar_point="te-form"),
        Item("q4", 4.0, category="grammar", grammar_point="conditionals"),
        Item("q5", 5.0, category="kanji", grammar_point=None),
        Item("q6", 2.5, category="grammar", grammar_point="particles"),
        Item("q7", 3.5, category="vocab", grammar_point="counters"),
    ]


@pytest.fixture
def sample_card(now):
    """Provide a new flashcard due now."""
    return ReviewCard(id="card-001", due_at=now)
