"""
Shared pytest fixtures for Earnings Analyzer tests.
"""

import os
import sys
from datetime import date
from unittest.mock import MagicMock

import pytest

# Ensure the project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from analytics import AnalyticsEngine
from earnings import EarningsRepository
from goals import GoalsEngine
from storage import EntityStore, MemoryBackend


@pytest.fixture
def today():
    """Fixed 'today' for every date window: Monday 19 October 2026."""
    return date(2026, 10, 19)


@pytest.fixture
def store():
    """Initialized entity store over an in-memory backend."""
    entity_store = EntityStore(MemoryBackend())
    entity_store.init()
    entity_store.update_profile({"currency": "$"})
    return entity_store


@pytest.fixture
def repository(store, today):
    return EarningsRepository(store, clock=lambda: today)


@pytest.fixture
def analytics(repository):
    return AnalyticsEngine(repository)


@pytest.fixture
def notifier():
    """Notification sink that records calls."""
    return MagicMock()


@pytest.fixture
def goals(repository, analytics, notifier):
    return GoalsEngine(repository, analytics, notifier)


@pytest.fixture
def seed(store):
    """Store raw earnings, newest first as given: seed((amount, category, date), ...)."""
    def _seed(*entries):
        earnings = [
            {
                "id": f"e{index}",
                "amount": amount,
                "category": category,
                "date": day if isinstance(day, str) else day.isoformat(),
            }
            for index, (amount, category, day) in enumerate(entries)
        ]
        store.save_earnings(earnings)
        return earnings
    return _seed
