# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics service module.

The AnalyticsService owns the event store. It ingests validated events and
answers every dashboard query for a filter:

- Metric cards: revenue, engagement, reach, conversion rate, followers and
  content activity, each compared to the trailing window
- Charts: revenue and engagement over time, activity by category and
  platform performance
- Insights and alerts derived from the same window
- Platform and hashtag statistics, CSV export

Every query validates its filter first and reads one snapshot of the store,
so all views of a dashboard are computed from the same events.

Usage:
    from kingdom_analytics.domains.analytics import (
        AnalyticsFilter,
        AnalyticsService,
        InMemoryEventStore,
    )

    service = AnalyticsService(InMemoryEventStore())
    cards = service.compute_metric_cards(AnalyticsFilter.from_preset("30d"))
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from kingdom_analytics.core.config.settings import AnalyticsSettings
from kingdom_analytics.domains.analytics.aggregator import (
    build_charts,
    build_metric_cards,
    hashtag_analytics,
    period_label,
    platform_analytics,
    select_trailing,
    select_window,
)
from kingdom_analytics.domains.analytics.alerts import AlertThresholds, evaluate_alerts
from kingdom_analytics.domains.analytics.content import label
from kingdom_analytics.domains.analytics.exceptions import (
    EventStoreError,
    InvalidFilterError,
    QueryTimeoutError,
    SchemaError,
)
from kingdom_analytics.domains.analytics.export import events_to_csv
from kingdom_analytics.domains.analytics.filters import AnalyticsFilter, ContentMode
from kingdom_analytics.domains.analytics.insights import InsightContext, generate_insights
from kingdom_analytics.domains.analytics.schema import Event
from kingdom_analytics.domains.analytics.store import EventStore
from kingdom_analytics.domains.analytics.views import (
    AIInsight,
    Alert,
    AnalyticsDashboard,
    ChartData,
    HashtagAnalytics,
    MetricCard,
    PlatformAnalytics,
)
from kingdom_analytics.utils.datetime import utc_now

logger = logging.getLogger(__name__)

STALE_NOTICE = "Analytics are taking longer than usual. Showing the last available results."
UNAVAILABLE_NOTICE = "Analytics are temporarily unavailable. Showing the last available results."


class AnalyticsService:
    """Service owning the event store and computing dashboard views.

    Attributes:
        store: The event store; the service is its only reader and writer.
        settings: Query, insight and alert configuration.
    """

    def __init__(
        self,
        store: EventStore,
        settings: AnalyticsSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the service.

        Args:
            store: Event store to own.
            settings: Analytics settings; defaults are used when omitted.
            clock: Source of the current time for fallback filters.
        """
        self.store = store
        self.settings = settings or AnalyticsSettings()
        self._clock = clock
        self._state_lock = threading.Lock()
        self._implemented_insights: set[str] = set()
        self._dismissed_alerts: set[str] = set()
        self._last_dashboard: AnalyticsDashboard | None = None

    # =========================================================================
    # Ingestion
    # =========================================================================

    def record(self, event: Event) -> None:
        """Append a validated event to the store."""
        self.store.append(event)

    # =========================================================================
    # Queries
    # =========================================================================

    def compute_metric_cards(self, filter_: AnalyticsFilter) -> tuple[MetricCard, ...]:
        """Compute the KPI cards for a filter.

        Raises:
            InvalidFilterError: If the filter's range is inconsistent.
            QueryTimeoutError: If the store did not answer in time.
        """
        current, previous = self._windows(filter_)
        return build_metric_cards(current, previous, filter_)

    def compute_chart_data(self, filter_: AnalyticsFilter) -> tuple[ChartData, ...]:
        """Compute the dashboard charts for a filter.

        Raises:
            InvalidFilterError: If the filter's range is inconsistent.
            QueryTimeoutError: If the store did not answer in time.
        """
        current, _ = self._windows(filter_)
        return build_charts(current, filter_)

    def compute_insights(self, filter_: AnalyticsFilter) -> tuple[AIInsight, ...]:
        """Compute ranked insights for a filter.

        Raises:
            InvalidFilterError: If the filter's range is inconsistent.
            QueryTimeoutError: If the store did not answer in time.
        """
        current, previous = self._windows(filter_)
        return self._insights(current, previous)

    def compute_alerts(self, filter_: AnalyticsFilter) -> tuple[Alert, ...]:
        """Evaluate the alert rules for a filter.

        Raises:
            InvalidFilterError: If the filter's range is inconsistent.
            QueryTimeoutError: If the store did not answer in time.
        """
        current, previous = self._windows(filter_)
        return self._alerts(current, previous, filter_)

    def get_platform_analytics(
        self,
        platform: str,
        filter_: AnalyticsFilter,
    ) -> PlatformAnalytics:
        """Totals for one platform within a filter's window."""
        current, previous = self._windows(filter_)
        return platform_analytics(platform, current, previous)

    def get_hashtag_analytics(self, filter_: AnalyticsFilter) -> tuple[HashtagAnalytics, ...]:
        """Hashtag statistics within a filter's window."""
        current, _ = self._windows(filter_)
        return hashtag_analytics(current)

    def export_csv(self, filter_: AnalyticsFilter) -> str:
        """Export the events of a filter's window as CSV."""
        current, _ = self._windows(filter_)
        logger.info("Exporting %d analytics events as CSV", len(current))
        return events_to_csv(current)

    # =========================================================================
    # User actions
    # =========================================================================

    def mark_insight_implemented(self, insight_id: str, implemented: bool = True) -> None:
        """Record that the user acted on (or un-marked) an insight."""
        with self._state_lock:
            if implemented:
                self._implemented_insights.add(insight_id)
            else:
                self._implemented_insights.discard(insight_id)

    def dismiss_alert(self, alert_id: str) -> None:
        """Record that the user dismissed an alert."""
        with self._state_lock:
            self._dismissed_alerts.add(alert_id)

    # =========================================================================
    # Dashboard
    # =========================================================================

    def get_dashboard(
        self,
        filter_: AnalyticsFilter | None = None,
        display_mode: ContentMode | str | None = None,
    ) -> AnalyticsDashboard:
        """Compute every view a dashboard screen renders.

        Never raises for an invalid filter or a failing store: an invalid
        filter is replaced by the default one with a notice. A timed-out
        query, a store error or an unreadable stored event returns the last
        good dashboard marked stale (or an empty one) with a notice.

        Args:
            filter_: Query filter; the default filter when omitted.
            display_mode: The user's active display mode, used for the title.

        Returns:
            AnalyticsDashboard instance.
        """
        notices: list[str] = []
        if filter_ is None:
            filter_ = self._default_filter()
        else:
            try:
                filter_.validate()
            except InvalidFilterError as e:
                logger.warning("Invalid analytics filter, using default: %s", e)
                filter_ = self._default_filter().with_mode(filter_.mode)
                notices.append(
                    "The selected date range was invalid. "
                    f"Showing {period_label(filter_.date_range).lower()} instead."
                )

        title = label("dashboard", filter_.mode, display_mode)
        try:
            current, previous = self._windows(filter_)
        except (QueryTimeoutError, EventStoreError, SchemaError) as e:
            if isinstance(e, QueryTimeoutError):
                logger.error("Analytics dashboard query timed out: %s", e)
                notices.append(STALE_NOTICE)
            else:
                logger.error("Analytics dashboard query failed: %s", e)
                notices.append(UNAVAILABLE_NOTICE)
            cached = self._last_dashboard
            if cached is not None:
                return replace(cached, notices=cached.notices + tuple(notices), stale=True)
            return AnalyticsDashboard(
                filter=filter_,
                title=title,
                notices=tuple(notices),
                stale=True,
            )

        dashboard = AnalyticsDashboard(
            filter=filter_,
            title=title,
            metrics=build_metric_cards(current, previous, filter_),
            charts=build_charts(current, filter_),
            insights=self._insights(current, previous),
            alerts=self._alerts(current, previous, filter_),
            notices=tuple(notices),
        )
        self._last_dashboard = dashboard
        logger.debug(
            "Built analytics dashboard: %d events, %d insights, %d alerts",
            len(current),
            len(dashboard.insights),
            len(dashboard.alerts),
        )
        return dashboard

    # =========================================================================
    # Helpers
    # =========================================================================

    def _default_filter(self) -> AnalyticsFilter:
        return AnalyticsFilter.default(self.settings.default_preset, now=self._clock())

    def _windows(self, filter_: AnalyticsFilter) -> tuple[tuple[Event, ...], tuple[Event, ...]]:
        """Validate the filter and select current and trailing window events."""
        filter_.validate()
        events = self.store.snapshot(
            since=filter_.date_range.trailing().start,
            timeout=self.settings.query_timeout_seconds,
        )
        return select_window(events, filter_), select_trailing(events, filter_)

    def _insights(
        self,
        current: tuple[Event, ...],
        previous: tuple[Event, ...],
    ) -> tuple[AIInsight, ...]:
        context = InsightContext(
            current=current,
            previous=previous,
            threshold=self.settings.insight_deviation_threshold,
            min_samples=self.settings.insight_min_samples,
        )
        with self._state_lock:
            implemented = set(self._implemented_insights)
        return tuple(
            replace(insight, implemented=insight.id in implemented)
            for insight in generate_insights(context)
        )

    def _alerts(
        self,
        current: tuple[Event, ...],
        previous: tuple[Event, ...],
        filter_: AnalyticsFilter,
    ) -> tuple[Alert, ...]:
        thresholds = AlertThresholds(
            error_count=self.settings.error_alert_threshold,
            revenue_drop_percent=self.settings.revenue_drop_alert_percent,
            revenue_milestone=self.settings.revenue_milestone,
            response_time_ms=self.settings.response_time_alert_ms,
            ai_failure_rate=self.settings.ai_failure_alert_rate,
            min_samples=self.settings.insight_min_samples,
        )
        with self._state_lock:
            dismissed = set(self._dismissed_alerts)
        return tuple(
            replace(alert, dismissed=alert.id in dismissed)
            for alert in evaluate_alerts(current, previous, thresholds, filter_.date_range.end)
        )
