# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for insight rules."""

from collections.abc import Callable

import pytest

from kingdom_analytics.domains.analytics import (
    AnalyticsFilter,
    AnalyticsService,
    EventTracker,
)
from kingdom_analytics.domains.analytics.insights import confidence, impact_for


def insight_ids(service: AnalyticsService, filter_: AnalyticsFilter) -> list[str]:
    return [insight.id for insight in service.compute_insights(filter_)]


class TestConfidence:
    """Tests for the confidence formula."""

    def test_range(self) -> None:
        """Test that confidence stays within [0.5, 1)."""
        assert confidence(0, 0.0) == 0.5
        assert 0.5 <= confidence(1000, 50.0) < 1.0

    def test_monotone_in_sample_size(self) -> None:
        """Test that more samples raise confidence."""
        assert confidence(10, 0.5) > confidence(5, 0.5) > confidence(1, 0.5)

    def test_monotone_in_deviation(self) -> None:
        """Test that larger deviations raise confidence."""
        assert confidence(5, 2.0) > confidence(5, 1.0) > confidence(5, 0.3)

    def test_formula(self) -> None:
        """Test a worked value."""
        assert confidence(5, 1.0) == pytest.approx(0.5 + 0.49 * 0.5 * 0.5)

    @pytest.mark.parametrize(("deviation", "impact"), [(0.3, "low"), (0.5, "medium"), (1.5, "high")])
    def test_impact(self, deviation: float, impact: str) -> None:
        """Test impact buckets."""
        assert impact_for(deviation) == impact


class TestInsightRules:
    """Tests for AnalyticsService.compute_insights."""

    def test_empty_window_has_no_insights(
        self, service: AnalyticsService, filter_30d: AnalyticsFilter
    ) -> None:
        """Test that no events produce no insights."""
        assert service.compute_insights(filter_30d) == ()

    def test_content_type_rule(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that an outperforming content type is reported."""
        at(days=2)
        for post_id in ("v1", "v2"):
            for _ in range(3):
                tracker.track_post_engagement(post_id, "like", "Instagram", "video")
        for post_id in ("i1", "i2"):
            tracker.track_post_engagement(post_id, "like", "Instagram", "image")

        insights = {insight.id: insight for insight in service.compute_insights(filter_30d)}

        assert "content-type-video" in insights
        assert "content-type-image" not in insights
        video = insights["content-type-video"]
        assert video.sample_size == 6
        assert video.confidence == pytest.approx(confidence(6, 0.5))
        assert video.type == "content"

    def test_content_type_rule_needs_samples(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that small samples are not reported."""
        at(days=2)
        tracker.track_post_engagement("v1", "like", "Instagram", "video")
        tracker.track_post_engagement("v1", "like", "Instagram", "video")
        tracker.track_post_engagement("i1", "like", "Instagram", "image")

        assert not any(i.startswith("content-type") for i in insight_ids(service, filter_30d))

    def test_revenue_platform_rule(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that a dominant revenue platform is reported."""
        at(days=3)
        for _ in range(3):
            tracker.track_product_sale("p", 10.0, "Printify")
        tracker.track_product_sale("p", 10.0, "Etsy")

        assert "revenue-platform-Printify" in insight_ids(service, filter_30d)

    def test_peak_hour_rule(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that the busiest engagement hour is reported."""
        at(days=2, hours=3)  # 09:00 UTC
        for post_id in ("a", "b", "c"):
            tracker.track_post_engagement(post_id, "like", "Instagram")
        at(days=2, hours=-3)  # 15:00 UTC
        tracker.track_post_engagement("d", "like", "Instagram")

        assert "peak-hour-09" in insight_ids(service, filter_30d)

    def test_revenue_momentum_rule(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_7d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that revenue growth vs the trailing window is reported."""
        at(days=10)
        tracker.track_product_sale("p", 100.0)
        at(days=2)
        tracker.track_product_sale("p", 75.0)
        tracker.track_product_sale("p", 75.0)

        insights = {insight.id: insight for insight in service.compute_insights(filter_7d)}

        assert insights["revenue-momentum"].title == "Revenue is growing"
        assert insights["revenue-momentum"].mood == "celebratory"

    def test_ai_reliability_rule(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that frequent AI failures are reported."""
        at(days=1)
        tracker.track_ai_content_generated("caption", True)
        tracker.track_ai_content_generated("caption", True)
        tracker.track_ai_content_generated("caption", False)
        tracker.track_ai_content_generated("caption", False)

        assert "ai-reliability" in insight_ids(service, filter_30d)

    def test_insights_are_deterministic_and_ranked(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test reproducible results ordered by confidence, then id."""
        at(days=3)
        for _ in range(3):
            tracker.track_product_sale("p", 10.0, "Printify")
        tracker.track_product_sale("p", 10.0, "Etsy")
        for _ in range(4):
            tracker.track_ai_content_generated("caption", False)

        first = service.compute_insights(filter_30d)
        second = service.compute_insights(filter_30d)

        assert first == second
        assert len(first) >= 2
        keys = [(-insight.confidence, insight.id) for insight in first]
        assert keys == sorted(keys)

    def test_mark_insight_implemented(
        self,
        tracker: EventTracker,
        service: AnalyticsService,
        filter_30d: AnalyticsFilter,
        at: Callable[..., None],
    ) -> None:
        """Test that the implemented flag follows user actions."""
        at(days=1)
        for _ in range(4):
            tracker.track_ai_content_generated("caption", False)

        service.mark_insight_implemented("ai-reliability")
        (insight,) = service.compute_insights(filter_30d)
        assert insight.implemented is True

        service.mark_insight_implemented("ai-reliability", implemented=False)
        (insight,) = service.compute_insights(filter_30d)
        assert insight.implemented is False
