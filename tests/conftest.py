"""
Shared pytest fixtures and configuration for lingotutor tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import pytest
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from langchain_core.language_models.fake_chat_models import FakeListChatModel

from lingotutor.models.learner_profile import ConceptMastery, Learner
from lingotutor.utils.persistence import TutorStore

FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed reference time used by clock-injected components."""
    return FIXED_NOW


@pytest.fixture
def fixed_clock(now):
    """Clock callable that always returns `now`."""
    return lambda: now


@pytest.fixture
def store():
    """Fresh in-memory store."""
    return TutorStore()


@pytest.fixture
def learner(store):
    """
    Fixture providing a registered learner.

    Returns:
        Learner: Stored learner named Camille
    """
    return store.add_learner(Learner(name="Camille", learner_id="learner-test"))


@pytest.fixture
def make_mastery(now):
    """
    Factory for mastery records practiced `days_ago` days before `now`.

    Usage:
        make_mastery("vocab.family", 0.5, days_ago=20)
        make_mastery("grammar.etre_avoir_present", 0.2, days_ago=None)  # never practiced
    """

    def _make(concept_id, score, days_ago=1.0, learner_id="learner-test", practice_count=1):
        last = None if days_ago is None else now - timedelta(days=days_ago)
        return ConceptMastery(
            learner_id=learner_id,
            concept_id=concept_id,
            mastery_score=score,
            practice_count=practice_count,
            last_practiced=last,
        )

    return _make


@pytest.fixture
def fake_chat_model():
    """
    Factory for a scripted chat model.

    Streaming yields one character per chunk; `error_on_chunk_number`
    makes the stream fail part-way.
    """

    def _make(*responses, error_on_chunk_number=None):
        return FakeListChatModel(
            responses=list(responses),
            error_on_chunk_number=error_on_chunk_number,
        )

    return _make


@pytest.fixture(autouse=True)
def reset_token_tracker():
    """
    Auto-fixture to reset token tracker before each test.

    This ensures tests don't interfere with each other.
    """
    from lingotutor.config import token_tracker

    token_tracker.reset()
    yield
    token_tracker.reset()


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark tests in unit/ directory as unit tests
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Mark tests in integration/ directory as integration tests
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
