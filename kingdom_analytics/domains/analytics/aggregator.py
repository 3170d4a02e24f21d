# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics aggregation primitives.

Pure functions over event snapshots. The service selects the events in a
filter's window (and in the trailing comparison window), then builds metric
cards, chart series, platform and hashtag statistics from them.

Window rules:
- The current window is inclusive, ``start <= timestamp <= end``.
- The trailing window is the equally long span right before it,
  ``start - duration <= timestamp < start``.
- Both windows apply the filter's mode rule (see AnalyticsFilter.matches_mode).

Usage:
    from kingdom_analytics.domains.analytics.aggregator import (
        build_metric_cards,
        select_window,
    )

    current = select_window(events, filter_)
    previous = select_trailing(events, filter_)
    cards = build_metric_cards(current, previous, filter_)
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from kingdom_analytics.domains.analytics.content import LABELS
from kingdom_analytics.domains.analytics.filters import AnalyticsFilter, DatePreset, DateRange
from kingdom_analytics.domains.analytics.schema import Event
from kingdom_analytics.domains.analytics.views import (
    ChartData,
    ChartPoint,
    ChartType,
    HashtagAnalytics,
    MetricCard,
    MetricFormat,
    PlatformAnalytics,
    Trend,
)
from kingdom_analytics.infrastructure.events.types import EventCategory, EventKind

# Discriminator tags aggregated by the KPI cards
REVENUE = "revenue"
ENGAGEMENT = "engagement"
REACH = "reach"
FOLLOWERS = "followers"
CONVERSION = "conversion"
VIEW = "view"
CLICK = "click"

PERIOD_LABELS: dict[DatePreset, str] = {
    DatePreset.LAST_7_DAYS: "Last 7 days",
    DatePreset.LAST_30_DAYS: "Last 30 days",
    DatePreset.LAST_90_DAYS: "Last 90 days",
    DatePreset.LAST_YEAR: "Last year",
}

PLATFORM_COLORS: dict[str, str] = {
    "instagram": "#E4405F",
    "facebook": "#1877F2",
    "tiktok": "#000000",
    "youtube": "#FF0000",
    "twitter": "#1DA1F2",
    "x": "#000000",
    "linkedin": "#0A66C2",
    "pinterest": "#E60023",
    "printify": "#39B75D",
    "etsy": "#F1641E",
}
DEFAULT_PLATFORM_COLOR = "#8B5CF6"

CATEGORY_COLORS: dict[EventCategory, str] = {
    EventCategory.CONTENT: "#6366F1",
    EventCategory.ENGAGEMENT: "#EF4444",
    EventCategory.BUSINESS: "#10B981",
    EventCategory.CONVERSION: "#8B5CF6",
    EventCategory.CREATION: "#F59E0B",
    EventCategory.AI: "#06B6D4",
    EventCategory.JOURNEY: "#64748B",
    EventCategory.COMMUNITY: "#EC4899",
    EventCategory.MARKETING: "#3B82F6",
    EventCategory.DIAGNOSTICS: "#DC2626",
    EventCategory.CUSTOM: "#A3A3A3",
}

FAITH_HASHTAG_KEYWORDS = ("faith", "god", "prayer")
ENCOURAGEMENT_HASHTAG_KEYWORDS = ("hope", "love", "support")

TRENDING_MIN_USAGE = 10
TRENDING_MIN_REACH = 1000


@dataclass(frozen=True)
class CardSpec:
    """Static presentation data for a metric card."""

    id: str
    format: MetricFormat
    icon: str
    color: str


CARD_SPECS: tuple[CardSpec, ...] = (
    CardSpec("revenue", MetricFormat.CURRENCY, "dollar-sign", "#10B981"),
    CardSpec("engagement", MetricFormat.NUMBER, "heart", "#EF4444"),
    CardSpec("reach", MetricFormat.NUMBER, "eye", "#3B82F6"),
    CardSpec("conversions", MetricFormat.PERCENTAGE, "target", "#8B5CF6"),
    CardSpec("followers", MetricFormat.NUMBER, "users", "#F59E0B"),
    CardSpec("content", MetricFormat.NUMBER, "book-open", "#6366F1"),
)


# =============================================================================
# Window selection
# =============================================================================


def select_window(events: Iterable[Event], filter_: AnalyticsFilter) -> tuple[Event, ...]:
    """Events inside the filter's inclusive window that match its mode."""
    date_range = filter_.date_range
    return tuple(
        event
        for event in events
        if date_range.contains(event.timestamp) and filter_.matches_mode(event.mode)
    )


def select_trailing(events: Iterable[Event], filter_: AnalyticsFilter) -> tuple[Event, ...]:
    """Events in the half-open trailing window that match the filter's mode."""
    trailing = filter_.date_range.trailing()
    return tuple(
        event
        for event in events
        if trailing.start <= event.timestamp < trailing.end and filter_.matches_mode(event.mode)
    )


# =============================================================================
# KPI calculators
# =============================================================================


def sum_type(events: Iterable[Event], type_tag: str) -> float:
    """Sum the values of events carrying a discriminator tag."""
    return math.fsum(event.value for event in events if event.type == type_tag)


def count_type(events: Iterable[Event], type_tag: str) -> int:
    return sum(1 for event in events if event.type == type_tag)


def total_revenue(events: Iterable[Event]) -> float:
    """Revenue in the events, rounded to cents."""
    return round(sum_type(events, REVENUE), 2)


def conversion_rate(events: Sequence[Event]) -> float:
    """Conversions per hundred views and clicks.

    Returns:
        Percentage; 0 when there were no views or clicks.
    """
    opportunities = count_type(events, VIEW) + count_type(events, CLICK)
    if opportunities == 0:
        return 0.0
    return round(sum_type(events, CONVERSION) / opportunities * 100, 2)


def content_activity(events: Iterable[Event]) -> int:
    """Number of content-category events."""
    return sum(1 for event in events if event.category is EventCategory.CONTENT)


def kpi_value(card_id: str, events: Sequence[Event]) -> float:
    """Compute the value a metric card shows for a set of events."""
    if card_id == "revenue":
        return total_revenue(events)
    if card_id == "engagement":
        return sum_type(events, ENGAGEMENT)
    if card_id == "reach":
        return sum_type(events, REACH)
    if card_id == "conversions":
        return conversion_rate(events)
    if card_id == "followers":
        return sum_type(events, FOLLOWERS)
    if card_id == "content":
        return float(content_activity(events))
    raise KeyError(card_id)


def percent_change(current: float, previous: float) -> float:
    """Relative change vs. the trailing window, in percent.

    Returns:
        ``(current - previous) / previous * 100`` rounded to one decimal;
        100 when previous is 0 and current is positive; 0 when both are 0.
    """
    if previous == 0:
        if current > 0:
            return 100.0
        if current < 0:
            return -100.0
        return 0.0
    return round((current - previous) / abs(previous) * 100, 1)


def period_label(date_range: DateRange) -> str:
    """Human period text for a window, e.g. ``Last 7 days``."""
    if date_range.preset is not None:
        return PERIOD_LABELS[date_range.preset]
    return f"{date_range.start:%Y-%m-%d} to {date_range.end:%Y-%m-%d}"


def build_metric_cards(
    current: Sequence[Event],
    previous: Sequence[Event],
    filter_: AnalyticsFilter,
) -> tuple[MetricCard, ...]:
    """Build the KPI cards for a window.

    Args:
        current: Events selected for the filter's window.
        previous: Events selected for the trailing window.
        filter_: The query filter.

    Returns:
        Cards in display order.
    """
    period = period_label(filter_.date_range)
    cards = []
    for spec in CARD_SPECS:
        value = kpi_value(spec.id, current)
        change = percent_change(value, kpi_value(spec.id, previous))
        copy = LABELS[spec.id]
        cards.append(
            MetricCard(
                id=spec.id,
                title=copy.title,
                faith_mode_title=copy.faith_mode_title,
                encouragement_mode_title=copy.encouragement_mode_title,
                value=value,
                format=spec.format,
                trend=Trend.from_change(change),
                change=change,
                period=period,
                icon=spec.icon,
                color=spec.color,
            )
        )
    return tuple(cards)


# =============================================================================
# Time buckets
# =============================================================================


@dataclass(frozen=True)
class Bucket:
    """One slice of a chart's time axis."""

    index: int
    start: datetime
    label: str


def _bucket_label(date_range: DateRange, index: int, start: datetime) -> str:
    preset = date_range.preset
    if preset is DatePreset.LAST_7_DAYS:
        return f"{start:%a}"
    if preset is DatePreset.LAST_30_DAYS:
        return f"Week {index + 1}"
    if preset in (DatePreset.LAST_90_DAYS, DatePreset.LAST_YEAR):
        return f"{start:%b}"
    return f"{start:%b} {start.day}"


def make_buckets(date_range: DateRange) -> tuple[Bucket, ...]:
    """Split a window into its fixed number of equal buckets."""
    count = date_range.bucket_count
    width = date_range.duration / count
    buckets = []
    for index in range(count):
        start = date_range.start + width * index
        buckets.append(Bucket(index=index, start=start, label=_bucket_label(date_range, index, start)))
    return tuple(buckets)


def bucket_index(date_range: DateRange, moment: datetime) -> int:
    """Index of the bucket a timestamp inside the window falls into."""
    count = date_range.bucket_count
    if date_range.duration <= timedelta(0):
        return 0
    offset = (moment - date_range.start) / date_range.duration
    return min(int(offset * count), count - 1)


def bucket_series(
    events: Iterable[Event],
    date_range: DateRange,
    type_tag: str,
) -> tuple[ChartPoint, ...]:
    """Sum event values per bucket; buckets without events report 0."""
    buckets = make_buckets(date_range)
    values: list[list[float]] = [[] for _ in buckets]
    for event in events:
        if event.type == type_tag and date_range.contains(event.timestamp):
            values[bucket_index(date_range, event.timestamp)].append(event.value)
    return tuple(
        ChartPoint(label=bucket.label, value=math.fsum(values[bucket.index]), start=bucket.start)
        for bucket in buckets
    )


# =============================================================================
# Categorical series
# =============================================================================


def category_series(events: Iterable[Event]) -> tuple[ChartPoint, ...]:
    """Event counts per taxonomy category, in first-seen order."""
    counts: dict[EventCategory, int] = {}
    for event in events:
        counts[event.category] = counts.get(event.category, 0) + 1
    return tuple(
        ChartPoint(label=category.value.title(), value=float(count), color=CATEGORY_COLORS[category])
        for category, count in counts.items()
    )


def platform_color(platform: str) -> str:
    return PLATFORM_COLORS.get(platform.lower(), DEFAULT_PLATFORM_COLOR)


def platform_series(events: Iterable[Event]) -> tuple[ChartPoint, ...]:
    """Engagement per platform, in order of the platform's first event."""
    totals: dict[str, list[float]] = {}
    for event in events:
        platform = event.platform
        if platform is None:
            continue
        bucket = totals.setdefault(platform, [])
        if event.type == ENGAGEMENT:
            bucket.append(event.value)
    return tuple(
        ChartPoint(label=platform, value=math.fsum(values), color=platform_color(platform))
        for platform, values in totals.items()
    )


def build_charts(events: Sequence[Event], filter_: AnalyticsFilter) -> tuple[ChartData, ...]:
    """Build every dashboard chart for the events of one window."""
    date_range = filter_.date_range
    period = period_label(date_range)

    def chart(chart_id: str, chart_type: ChartType, unit: str, data: tuple[ChartPoint, ...]) -> ChartData:
        copy = LABELS[chart_id]
        return ChartData(
            id=chart_id,
            title=copy.title,
            faith_mode_title=copy.faith_mode_title,
            encouragement_mode_title=copy.encouragement_mode_title,
            type=chart_type,
            unit=unit,
            period=period,
            data=data,
        )

    return (
        chart("revenue-trend", ChartType.LINE, "$", bucket_series(events, date_range, REVENUE)),
        chart("engagement-trend", ChartType.LINE, "", bucket_series(events, date_range, ENGAGEMENT)),
        chart("activity-by-category", ChartType.BAR, "events", category_series(events)),
        chart("platform-performance", ChartType.BAR, "", platform_series(events)),
    )


# =============================================================================
# Platform and hashtag statistics
# =============================================================================


def platform_analytics(
    platform: str,
    current: Sequence[Event],
    previous: Sequence[Event],
) -> PlatformAnalytics:
    """Totals for one platform; growth compares follower gains to the trailing window."""
    mine = [event for event in current if event.platform == platform]
    before = [event for event in previous if event.platform == platform]
    followers = sum_type(mine, FOLLOWERS)
    return PlatformAnalytics(
        platform=platform,
        followers=followers,
        engagement=sum_type(mine, ENGAGEMENT),
        reach=sum_type(mine, REACH),
        clicks=float(count_type(mine, CLICK)),
        conversions=sum_type(mine, CONVERSION),
        revenue=total_revenue(mine),
        growth_rate=percent_change(followers, sum_type(before, FOLLOWERS)),
    )


def categorize_hashtag(hashtag: str) -> str:
    """Classify a hashtag as faith, encouragement or general."""
    lowered = hashtag.lower()
    if any(keyword in lowered for keyword in FAITH_HASHTAG_KEYWORDS):
        return "faith"
    if any(keyword in lowered for keyword in ENCOURAGEMENT_HASHTAG_KEYWORDS):
        return "encouragement"
    return "general"


def hashtag_performance(engagement: float) -> str:
    if engagement > 100:
        return "excellent"
    if engagement > 50:
        return "good"
    if engagement > 20:
        return "average"
    return "poor"


def hashtag_analytics(events: Iterable[Event]) -> tuple[HashtagAnalytics, ...]:
    """Per-hashtag usage, reach and engagement, in first-seen order.

    ``hashtag_used`` events contribute usage, their ``reach`` property and
    their value as engagement. Hashtags listed on ``content_created``
    events contribute usage only.
    """
    stats: dict[str, dict[str, float]] = {}

    def entry(hashtag: str) -> dict[str, float]:
        return stats.setdefault(hashtag, {"usage": 0, "reach": 0.0, "engagement": 0.0})

    for event in events:
        if event.name is EventKind.HASHTAG_USED:
            current = entry(event.properties["hashtag"])
            current["usage"] += 1
            current["reach"] += event.properties.get("reach", 0.0)
            current["engagement"] += event.value
        elif event.name is EventKind.CONTENT_CREATED:
            for hashtag in event.properties.get("hashtags", ()):
                entry(hashtag)["usage"] += 1

    return tuple(
        HashtagAnalytics(
            hashtag=hashtag,
            usage=int(values["usage"]),
            reach=values["reach"],
            engagement=values["engagement"],
            trending=values["usage"] > TRENDING_MIN_USAGE and values["reach"] > TRENDING_MIN_REACH,
            category=categorize_hashtag(hashtag),
            performance=hashtag_performance(values["engagement"]),
        )
        for hashtag, values in stats.items()
    )
