# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for dashboard assembly, platform, hashtag and export queries."""

import csv
import io
import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta

import pytest

from kingdom_analytics.domains.analytics import (
    AnalyticsFilter,
    AnalyticsService,
    DatePreset,
    DateRange,
    EventStoreError,
    EventTracker,
    InMemoryEventStore,
    QueryTimeoutError,
    SchemaError,
)
from kingdom_analytics.domains.analytics.aggregator import categorize_hashtag, hashtag_performance
from kingdom_analytics.domains.analytics.service import UNAVAILABLE_NOTICE


class SlowStore(InMemoryEventStore):
    """Store whose snapshots time out on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.timing_out = False

    def snapshot(self, since=None, timeout=None):  # type: ignore[no-untyped-def]
        if self.timing_out:
            raise QueryTimeoutError("Timed out waiting for event store snapshot", timeout)
        return super().snapshot(since=since, timeout=timeout)


class BrokenStore(InMemoryEventStore):
    """Store whose snapshots raise a configured error."""

    def __init__(self) -> None:
        super().__init__()
        self.error: Exception | None = None

    def snapshot(self, since=None, timeout=None):  # type: ignore[no-untyped-def]
        if self.error is not None:
            raise self.error
        return super().snapshot(since=since, timeout=timeout)


class TestDashboard:
    """Tests for AnalyticsService.get_dashboard."""

    def test_dashboard_bundles_all_views(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that one call returns cards, charts, insights and alerts."""
        at(days=1)
        tracker.track_product_sale("p", 10.0, "Printify")

        dashboard = service.get_dashboard(filter_30d)

        assert len(dashboard.metrics) == 6
        assert len(dashboard.charts) == 4
        assert dashboard.stale is False
        assert dashboard.notices == ()
        assert dashboard.filter == filter_30d

    @pytest.mark.parametrize(
        ("mode", "display_mode", "title"),
        [
            ("both", "faith", "Kingdom Analytics"),
            ("both", "encouragement", "Impact Analytics"),
            ("both", None, "Analytics"),
            ("faith", None, "Kingdom Analytics"),
        ],
    )
    def test_dashboard_title_follows_mode(
        self,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        mode: str,
        display_mode: str | None,
        title: str,
    ) -> None:
        """Test the mode-aware dashboard title."""
        dashboard = service.get_dashboard(filter_30d.with_mode(mode), display_mode=display_mode)

        assert dashboard.title == title

    def test_invalid_filter_falls_back_with_notice(
        self,
        service: AnalyticsService,
        fixed_now: datetime,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that an invalid filter is replaced by the default one."""
        invalid = AnalyticsFilter(
            DateRange(start=fixed_now, end=fixed_now - timedelta(days=2)),
            mode="faith",
        )

        with caplog.at_level(logging.WARNING, logger="kingdom_analytics"):
            dashboard = service.get_dashboard(invalid)

        assert dashboard.filter.date_range.preset is DatePreset.LAST_30_DAYS
        assert dashboard.filter.date_range.end == fixed_now
        assert dashboard.filter.mode.value == "faith"
        assert len(dashboard.notices) == 1
        assert "last 30 days" in dashboard.notices[0]
        assert len(dashboard.metrics) == 6

    def test_missing_filter_uses_default(self, service: AnalyticsService, fixed_now: datetime) -> None:
        """Test that omitting the filter uses the configured default preset."""
        dashboard = service.get_dashboard()

        assert dashboard.filter.date_range.preset is DatePreset.LAST_30_DAYS
        assert dashboard.filter.date_range.end == fixed_now
        assert dashboard.notices == ()

    def test_timeout_returns_stale_cached_dashboard(
        self,
        clock: Callable[[], datetime],
        filter_30d: AnalyticsFilter,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that a timed-out query shows the last good results."""
        store = SlowStore()
        service = AnalyticsService(store, clock=clock)
        tracker = EventTracker(service, clock=clock)
        tracker.track_product_sale("p", 10.0)
        good = service.get_dashboard(filter_30d)

        store.timing_out = True
        with caplog.at_level(logging.ERROR, logger="kingdom_analytics"):
            stale = service.get_dashboard(filter_30d)

        assert stale.stale is True
        assert stale.metrics == good.metrics
        assert stale.notices
        assert any(record.levelno == logging.ERROR for record in caplog.records)

    def test_timeout_without_cache_returns_empty(
        self,
        clock: Callable[[], datetime],
        filter_30d: AnalyticsFilter,
    ) -> None:
        """Test that a timeout before any success yields an empty dashboard."""
        store = SlowStore()
        store.timing_out = True
        service = AnalyticsService(store, clock=clock)

        dashboard = service.get_dashboard(filter_30d)

        assert dashboard.stale is True
        assert dashboard.metrics == ()
        assert dashboard.charts == ()

    @pytest.mark.parametrize(
        "error",
        [
            EventStoreError("Failed to read analytics events", RuntimeError("database is locked")),
            SchemaError("Stored event has an unknown kind"),
        ],
    )
    def test_store_failure_returns_stale_cached_dashboard(
        self,
        clock: Callable[[], datetime],
        filter_30d: AnalyticsFilter,
        caplog: pytest.LogCaptureFixture,
        error: Exception,
    ) -> None:
        """Test that a failing store or unreadable row shows the last good results."""
        store = BrokenStore()
        service = AnalyticsService(store, clock=clock)
        tracker = EventTracker(service, clock=clock)
        tracker.track_product_sale("p", 10.0)
        good = service.get_dashboard(filter_30d)

        store.error = error
        with caplog.at_level(logging.ERROR, logger="kingdom_analytics"):
            stale = service.get_dashboard(filter_30d)

        assert stale.stale is True
        assert stale.metrics == good.metrics
        assert stale.notices[-1] == UNAVAILABLE_NOTICE
        assert any(record.levelno == logging.ERROR for record in caplog.records)

    def test_store_failure_without_cache_returns_empty(
        self,
        clock: Callable[[], datetime],
        filter_30d: AnalyticsFilter,
    ) -> None:
        """Test that a store error before any success yields an empty dashboard."""
        store = BrokenStore()
        store.error = EventStoreError("Failed to read analytics events", RuntimeError("no such table"))
        service = AnalyticsService(store, clock=clock)

        dashboard = service.get_dashboard(filter_30d)

        assert dashboard.stale is True
        assert dashboard.metrics == ()
        assert dashboard.notices == (UNAVAILABLE_NOTICE,)

    def test_timeout_propagates_from_direct_queries(
        self,
        clock: Callable[[], datetime],
        filter_30d: AnalyticsFilter,
    ) -> None:
        """Test that compute_* queries surface the timeout."""
        store = SlowStore()
        store.timing_out = True
        service = AnalyticsService(store, clock=clock)

        with pytest.raises(QueryTimeoutError):
            service.compute_metric_cards(filter_30d)

    def test_dashboard_to_dict(self, service: AnalyticsService, filter_7d: AnalyticsFilter) -> None:
        """Test the rendering dictionary of a dashboard."""
        data = service.get_dashboard(filter_7d).to_dict()

        assert data["filter"]["preset"] == "7d"
        assert data["filter"]["mode"] == "both"
        assert len(data["metrics"]) == 6
        json.dumps(data)


class TestPlatformAndHashtags:
    """Tests for platform and hashtag statistics."""

    def test_platform_analytics(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_7d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test per-platform totals and follower growth."""
        at(days=9)
        tracker.track_follower_growth("Instagram", 10)
        at(days=1)
        tracker.track_follower_growth("Instagram", 15)
        tracker.track_post_engagement("a", "like", "Instagram")
        tracker.track_content_reach("a", 400, "Instagram")
        tracker.track_link_click("l", "https://x", "Instagram")
        tracker.track_product_sale("p", 19.99, "Instagram")
        tracker.track_product_sale("p", 5.0, "Etsy")

        stats = service.get_platform_analytics("Instagram", filter_7d)

        assert stats.followers == 15
        assert stats.engagement == 1
        assert stats.reach == 400
        assert stats.clicks == 1
        assert stats.revenue == 19.99
        assert stats.growth_rate == 50.0

    def test_hashtag_analytics(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test hashtag usage, reach and classification."""
        at(days=1)
        for _ in range(11):
            tracker.track_hashtag_used("#FaithOverFear", "Instagram", 200)
        tracker.track_hashtag_used("#hopeful", "TikTok")
        tracker.track_content_created("reel", "Instagram", ["#hopeful", "#monday"])

        stats = {item.hashtag: item for item in service.get_hashtag_analytics(filter_30d)}

        assert list(stats) == ["#FaithOverFear", "#hopeful", "#monday"]
        faith = stats["#FaithOverFear"]
        assert faith.usage == 11
        assert faith.reach == 2200
        assert faith.trending is True
        assert faith.category == "faith"
        assert stats["#hopeful"].usage == 2
        assert stats["#hopeful"].category == "encouragement"
        assert stats["#hopeful"].trending is False
        assert stats["#monday"].category == "general"

    @pytest.mark.parametrize(
        ("hashtag", "category"),
        [("#GodIsGood", "faith"), ("#prayerwarrior", "faith"), ("#LoveWins", "encouragement"), ("#mood", "general")],
    )
    def test_categorize_hashtag(self, hashtag: str, category: str) -> None:
        """Test keyword-based hashtag categories."""
        assert categorize_hashtag(hashtag) == category

    @pytest.mark.parametrize(
        ("engagement", "performance"),
        [(150, "excellent"), (75, "good"), (30, "average"), (5, "poor")],
    )
    def test_hashtag_performance(self, engagement: float, performance: str) -> None:
        """Test performance buckets."""
        assert hashtag_performance(engagement) == performance


class TestExport:
    """Tests for CSV export."""

    def test_export_csv(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_7d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that window events are exported in ingestion order."""
        at(days=20)
        tracker.track_product_sale("old", 1.0)
        at(days=1)
        tracker.track_product_sale("p1", 24.99, "Printify", mode="faith")
        tracker.track_hashtag_used("#hope", "Instagram")

        rows = list(csv.DictReader(io.StringIO(service.export_csv(filter_7d))))

        assert len(rows) == 2
        assert rows[0]["name"] == "product_sale"
        assert rows[0]["type"] == "revenue"
        assert rows[0]["value"] == "24.99"
        assert rows[0]["mode"] == "faith"
        assert json.loads(rows[0]["properties"])["product_id"] == "p1"
        assert rows[1]["mode"] == ""

    def test_export_empty_window_has_header(
        self, service: AnalyticsService, filter_7d: AnalyticsFilter
    ) -> None:
        """Test that an empty export still has the header row."""
        assert service.export_csv(filter_7d) == "timestamp,name,type,value,mode,properties\n"
