"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from satx.adaptive.catalog import ItemCatalog  # noqa: E402
from satx.adaptive.engine import AdaptiveEngine  # noqa: E402
from satx.adaptive.mastery import EngineConfig  # noqa: E402
from satx.adaptive.store import MemoryKeyValueStore  # noqa: E402
from tests.helpers import FixedClock, lesson, quiz  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


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
def clock():
    return FixedClock(datetime(2025, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def make_engine(clock):
    """Factory for isolated in-memory engines."""

    def _make(seed: int = 1234, store=None, rng=None, **config_overrides) -> AdaptiveEngine:
        return AdaptiveEngine(
            store=store if store is not None else MemoryKeyValueStore(),
            config=EngineConfig(**config_overrides),
            rng=rng or random.Random(seed),
            clock=clock,
        )

    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()


@pytest.fixture
def math_catalog():
    """Math subject with three topics, plus an intro and a summary."""
    return ItemCatalog([
        lesson("math-intro", title="Quick Tip"),
        quiz("m1", topic="Linear equations"),
        quiz("m2", topic="Linear equations"),
        quiz("m3", topic="Percent"),
        quiz("m4", topic="Percent"),
        quiz("m5", topic="Quadratics"),
        quiz("m6", topic="Quadratics"),
        lesson("math-summary", title="Summary: Math"),
        lesson("reading-intro", subject="reading", title="Reading Tip"),
        quiz("r1", subject="reading", topic="Inference"),
    ])


@pytest.fixture
def bundled_catalog():
    return ItemCatalog.bundled()
