"""Shared pytest fixtures for autotheme tests."""

from __future__ import annotations

from datetime import timezone

import pytest

from autotheme.core.event_bus import EventBus
from autotheme.core.models.config import AutomationConfig, AutoThemeConfig
from autotheme.theme.mock_applier import MockThemeApplier
from tests.helpers.doubles import FakeClock, MemoryStore, RecordingNotifier


@pytest.fixture
async def event_bus():
    """Provide a started EventBus that is stopped after the test."""
    bus = EventBus(queue_size=100)
    await bus.start()
    yield bus
    await bus.stop()


@pytest.fixture(scope="session")
def autotheme_config() -> AutoThemeConfig:
    """Session-scoped default config (no file I/O)."""
    return AutoThemeConfig()


@pytest.fixture
def automation_config() -> AutomationConfig:
    """Long poll interval so the timer never fires during a unit test."""
    return AutomationConfig(poll_interval_seconds=3600, apply_timeout_seconds=2, location_timeout_seconds=2)


@pytest.fixture
def clock() -> FakeClock:
    """Clock parked at 2024-06-21 12:00 UTC (midday at the prime meridian)."""
    return FakeClock(2024, 6, 21, 12, 0, tz=timezone.utc)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def applier() -> MockThemeApplier:
    return MockThemeApplier()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
