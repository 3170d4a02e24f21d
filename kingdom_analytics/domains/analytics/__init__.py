# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics domain.

This package provides the event analytics pipeline:
- Event schema validation against the closed taxonomy
- Fail-safe event tracking (one typed method per event kind)
- Aggregation into metric cards, charts, insights and alerts
- Mode-aware copy resolution for faith and encouragement modes

Usage:
    from kingdom_analytics.domains.analytics import (
        AnalyticsFilter,
        AnalyticsService,
        EventTracker,
        InMemoryEventStore,
    )

    service = AnalyticsService(InMemoryEventStore())
    tracker = EventTracker(service)
    tracker.track_product_sale("p1", 24.99, "Printify")

    cards = service.compute_metric_cards(AnalyticsFilter.from_preset("30d"))
"""

from kingdom_analytics.domains.analytics.exceptions import (
    AnalyticsError,
    EventStoreError,
    InvalidFilterError,
    InvalidPropertyError,
    InvalidValueError,
    MissingRequiredPropertyError,
    QueryTimeoutError,
    SchemaError,
    UnknownEventKindError,
)
from kingdom_analytics.domains.analytics.filters import (
    AnalyticsFilter,
    ContentMode,
    DatePreset,
    DateRange,
)
from kingdom_analytics.domains.analytics.schema import Event, validate_event
from kingdom_analytics.domains.analytics.store import (
    EventStore,
    InMemoryEventStore,
    SQLEventStore,
)
from kingdom_analytics.domains.analytics.content import (
    LABELS,
    ContentItem,
    display_mode_from_settings,
    label,
    resolve,
)
from kingdom_analytics.domains.analytics.views import (
    AIInsight,
    Alert,
    AlertSeverity,
    AnalyticsDashboard,
    ChartData,
    ChartPoint,
    ChartType,
    HashtagAnalytics,
    MetricCard,
    MetricFormat,
    PlatformAnalytics,
    Trend,
)
from kingdom_analytics.domains.analytics.service import AnalyticsService
from kingdom_analytics.domains.analytics.tracker import EventTracker

__all__ = [
    # Errors
    "AnalyticsError",
    "SchemaError",
    "UnknownEventKindError",
    "InvalidValueError",
    "MissingRequiredPropertyError",
    "InvalidPropertyError",
    "InvalidFilterError",
    "QueryTimeoutError",
    "EventStoreError",
    # Schema
    "Event",
    "validate_event",
    # Filters
    "AnalyticsFilter",
    "ContentMode",
    "DatePreset",
    "DateRange",
    # Stores
    "EventStore",
    "InMemoryEventStore",
    "SQLEventStore",
    # Content
    "ContentItem",
    "LABELS",
    "display_mode_from_settings",
    "label",
    "resolve",
    # Views
    "AIInsight",
    "Alert",
    "AlertSeverity",
    "AnalyticsDashboard",
    "ChartData",
    "ChartPoint",
    "ChartType",
    "HashtagAnalytics",
    "MetricCard",
    "MetricFormat",
    "PlatformAnalytics",
    "Trend",
    # Service and tracking
    "AnalyticsService",
    "EventTracker",
]
