"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from progression.core.competence import TrainingModule  # noqa: E402
from progression.core.state import ProgressState  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed reference time for recency calculations."""
    return datetime(2025, 3, 10, 15, 0, tzinfo=UTC)


@pytest.fixture
def empty_state():
    """Brand-new learner."""
    return ProgressState.initial()


@pytest.fixture
def two_modules():
    """Catalog with two eligible modules and one custom module."""
    return (
        TrainingModule("m4", "Listening", ("e10", "e11", "e12")),
        TrainingModule("m1", "Feedback", ("e1", "e2", "e7")),
        TrainingModule("m6", "Custom", is_custom=True),
    )


@pytest.fixture
def verbal_analysis():
    """Verbal analysis payload with five 0-10 criterion scores (mean 7)."""
    return {
        "scores": [
            {"criterion_id": "ritmo", "score": 8, "justification": "steady"},
            {"criterion_id": "tono", "score": 7, "justification": "varied"},
            {"criterion_id": "volume", "score": 6, "justification": "a bit low"},
            {"criterion_id": "pause", "score": 7, "justification": "good"},
            {"criterion_id": "chiarezza", "score": 7, "justification": "clear"},
        ],
        "strengths": ["calm delivery"],
        "improvements": ["project more"],
    }


@pytest.fixture
def written_analysis():
    """Written analysis payload."""
    return {
        "score": 80,
        "strengths": ["clear structure"],
        "areasForImprovement": [],
        "suggestedResponse": {"short": "...", "long": "..."},
    }


@pytest.fixture
def days_ago(now):
    """Factory returning ``now`` shifted back by a number of days."""

    def _days_ago(days: float) -> datetime:
        return now - timedelta(days=days)

    return _days_ago
