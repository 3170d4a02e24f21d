# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for chart aggregation."""

from collections.abc import Callable
from datetime import datetime, timedelta

import pytest

from kingdom_analytics.domains.analytics import (
    AnalyticsFilter,
    AnalyticsService,
    ChartType,
    DateRange,
    EventTracker,
)
from kingdom_analytics.domains.analytics.aggregator import bucket_index, make_buckets


def charts_by_id(service: AnalyticsService, filter_: AnalyticsFilter) -> dict:
    return {chart.id: chart for chart in service.compute_chart_data(filter_)}


class TestBuckets:
    """Tests for time bucketing."""

    @pytest.mark.parametrize(("preset", "count"), [("7d", 7), ("30d", 4), ("90d", 12), ("1y", 12)])
    def test_bucket_counts(self, preset: str, count: int, fixed_now: datetime) -> None:
        """Test bucket counts per preset."""
        buckets = make_buckets(DateRange.from_preset(preset, now=fixed_now))

        assert len(buckets) == count

    def test_buckets_are_chronological(self, fixed_now: datetime) -> None:
        """Test that bucket starts increase."""
        buckets = make_buckets(DateRange.from_preset("90d", now=fixed_now))

        starts = [bucket.start for bucket in buckets]
        assert starts == sorted(starts)

    def test_thirty_day_labels(self, fixed_now: datetime) -> None:
        """Test week labels for the 30-day preset."""
        buckets = make_buckets(DateRange.from_preset("30d", now=fixed_now))

        assert [bucket.label for bucket in buckets] == ["Week 1", "Week 2", "Week 3", "Week 4"]

    def test_window_end_falls_in_last_bucket(self, fixed_now: datetime) -> None:
        """Test that the inclusive end maps to the last bucket."""
        date_range = DateRange.from_preset("7d", now=fixed_now)

        assert bucket_index(date_range, date_range.start) == 0
        assert bucket_index(date_range, date_range.end) == 6

    def test_zero_length_range(self, fixed_now: datetime) -> None:
        """Test that a zero-length custom range has one bucket."""
        date_range = DateRange(start=fixed_now, end=fixed_now)

        assert len(make_buckets(date_range)) == 1
        assert bucket_index(date_range, fixed_now) == 0


class TestChartData:
    """Tests for AnalyticsService.compute_chart_data."""

    @pytest.mark.parametrize(("preset", "count"), [("7d", 7), ("30d", 4), ("90d", 12), ("1y", 12)])
    def test_empty_window_has_full_zero_series(
        self,
        service: AnalyticsService,
        fixed_now: datetime,
        preset: str,
        count: int,
    ) -> None:
        """Test that time series cover the span with zero buckets."""
        charts = charts_by_id(service, AnalyticsFilter.from_preset(preset, now=fixed_now))

        for chart_id in ("revenue-trend", "engagement-trend"):
            points = charts[chart_id].data
            assert len(points) == count
            assert all(point.value == 0 for point in points)
        assert charts["activity-by-category"].data == ()
        assert charts["platform-performance"].data == ()

    def test_chart_order_and_types(self, service: AnalyticsService, filter_7d: AnalyticsFilter) -> None:
        """Test the fixed chart order and chart types."""
        charts = service.compute_chart_data(filter_7d)

        assert [chart.id for chart in charts] == [
            "revenue-trend",
            "engagement-trend",
            "activity-by-category",
            "platform-performance",
        ]
        assert charts[0].type is ChartType.LINE
        assert charts[0].unit == "$"
        assert charts[2].type is ChartType.BAR

    def test_revenue_is_summed_per_bucket(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_7d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that values land in the bucket of their timestamp."""
        at(days=6, hours=12)
        tracker.track_product_sale("a", 10.0)
        tracker.track_product_sale("b", 5.0)
        at(hours=1)
        tracker.track_product_sale("c", 2.5)

        points = charts_by_id(service, filter_7d)["revenue-trend"].data
        values = [point.value for point in points]

        assert values == [15.0, 0, 0, 0, 0, 0, 2.5]

    def test_category_chart_first_seen_order(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_7d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that categories appear in the order first ingested."""
        at(days=1)
        tracker.track_product_sale("p", 1.0)
        tracker.track_testimony_shared("t")
        tracker.track_product_sale("p", 1.0)
        tracker.track_error("x", "y")

        points = charts_by_id(service, filter_7d)["activity-by-category"].data

        assert [(point.label, point.value) for point in points] == [
            ("Business", 2.0),
            ("Content", 1.0),
            ("Diagnostics", 1.0),
        ]

    def test_platform_chart(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_7d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test engagement per platform in first-seen order with colors."""
        at(days=1)
        tracker.track_product_sale("p", 1.0, "Printify")
        tracker.track_post_engagement("a", "like", "Instagram")
        tracker.track_post_engagement("b", "like", "Instagram")
        tracker.track_post_engagement("c", "like", "Facebook")

        points = charts_by_id(service, filter_7d)["platform-performance"].data

        assert [(point.label, point.value) for point in points] == [
            ("Printify", 0),
            ("Instagram", 2.0),
            ("Facebook", 1.0),
        ]
        assert points[1].color == "#E4405F"

    def test_chart_to_dict(self, service: AnalyticsService, filter_7d: AnalyticsFilter) -> None:
        """Test the rendering dictionary of a chart."""
        chart = service.compute_chart_data(filter_7d)[0].to_dict()

        assert chart["id"] == "revenue-trend"
        assert chart["type"] == "line"
        assert len(chart["data"]) == 7
        assert chart["data"][0]["start"] == (filter_7d.date_range.start).isoformat()

    def test_custom_range_buckets(self, service: AnalyticsService, fixed_now: datetime) -> None:
        """Test that custom ranges get one bucket per day up to 12."""
        filter_ = AnalyticsFilter(DateRange(start=fixed_now - timedelta(days=3), end=fixed_now))

        points = charts_by_id(service, filter_)["revenue-trend"].data

        assert len(points) == 3
