# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across the analytics tests:
- A fixed clock so windows and timestamps are reproducible
- A fresh store, service and tracker per test
- Filters built against the fixed clock
"""

from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone

import pytest

from kingdom_analytics.core.config import AnalyticsSettings, clear_settings_cache
from kingdom_analytics.domains.analytics import (
    AnalyticsFilter,
    AnalyticsService,
    EventTracker,
    InMemoryEventStore,
)

FIXED_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Clock Fixtures
# =============================================================================


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta

    def set(self, moment: datetime) -> None:
        self.now = moment


@pytest.fixture
def fixed_now() -> datetime:
    """Provide the reference 'now' used by the fake clock."""
    return FIXED_NOW


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock starting at FIXED_NOW."""
    return FakeClock(FIXED_NOW)


# =============================================================================
# Pipeline Fixtures
# =============================================================================


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    """Provide analytics settings with defaults."""
    return AnalyticsSettings()


@pytest.fixture
def store() -> InMemoryEventStore:
    """Provide an empty in-memory event store."""
    return InMemoryEventStore()


@pytest.fixture
def service(
    store: InMemoryEventStore,
    analytics_settings: AnalyticsSettings,
    clock: FakeClock,
) -> AnalyticsService:
    """Provide an analytics service over the in-memory store."""
    return AnalyticsService(store, analytics_settings, clock=clock)


@pytest.fixture
def tracker(service: AnalyticsService, clock: FakeClock) -> EventTracker:
    """Provide a tracker whose events are stamped by the fake clock."""
    return EventTracker(service, clock=clock)


@pytest.fixture
def filter_30d(fixed_now: datetime) -> AnalyticsFilter:
    """Provide a 30-day filter ending at FIXED_NOW."""
    return AnalyticsFilter.from_preset("30d", now=fixed_now)


@pytest.fixture
def filter_7d(fixed_now: datetime) -> AnalyticsFilter:
    """Provide a 7-day filter ending at FIXED_NOW."""
    return AnalyticsFilter.from_preset("7d", now=fixed_now)


@pytest.fixture
def at(clock: FakeClock) -> Callable[..., None]:
    """Move the fake clock to FIXED_NOW minus the given offset."""

    def move(days: float = 0, hours: float = 0) -> None:
        clock.set(FIXED_NOW - timedelta(days=days, hours=hours))

    return move


@pytest.fixture
def fresh_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after the test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "database: mark test as using a SQL database (in-memory SQLite)"
    )
