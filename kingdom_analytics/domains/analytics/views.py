# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Derived analytics views.

Every view is recomputed per query and returned as a new frozen object, so
callers hold independent copies and cannot change what the service stores.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from kingdom_analytics.domains.analytics.content import resolve
from kingdom_analytics.domains.analytics.filters import AnalyticsFilter, ContentMode
from kingdom_analytics.utils.datetime import format_iso, utc_now


class MetricFormat(str, Enum):
    """Display hint for a metric value."""

    NUMBER = "number"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"


class Trend(str, Enum):
    """Direction of change vs. the trailing window."""

    UP = "up"
    DOWN = "down"
    FLAT = "flat"

    @classmethod
    def from_change(cls, change: float) -> "Trend":
        if change > 0:
            return cls.UP
        if change < 0:
            return cls.DOWN
        return cls.FLAT


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class MetricCard:
    """One KPI tile on the dashboard."""

    id: str
    title: str
    value: float
    format: MetricFormat
    trend: Trend
    change: float
    period: str
    icon: str
    color: str
    faith_mode_title: str | None = None
    encouragement_mode_title: str | None = None

    def display_title(
        self,
        mode: ContentMode | str = ContentMode.BOTH,
        active_mode: ContentMode | str | None = None,
    ) -> str:
        """Title for the given view mode and display toggle."""
        return resolve(self, mode, active_mode=active_mode)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for rendering."""
        return {
            "id": self.id,
            "title": self.title,
            "faith_mode_title": self.faith_mode_title,
            "encouragement_mode_title": self.encouragement_mode_title,
            "value": self.value,
            "format": self.format.value,
            "trend": self.trend.value,
            "change": self.change,
            "period": self.period,
            "icon": self.icon,
            "color": self.color,
        }


@dataclass(frozen=True)
class ChartPoint:
    """A labelled value in a chart series."""

    label: str
    value: float
    color: str | None = None
    start: datetime | None = None


@dataclass(frozen=True)
class ChartData:
    """A chart series."""

    id: str
    title: str
    type: ChartType
    unit: str
    period: str
    data: tuple[ChartPoint, ...]
    faith_mode_title: str | None = None
    encouragement_mode_title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for rendering."""
        return {
            "id": self.id,
            "title": self.title,
            "faith_mode_title": self.faith_mode_title,
            "encouragement_mode_title": self.encouragement_mode_title,
            "type": self.type.value,
            "unit": self.unit,
            "period": self.period,
            "data": [
                {
                    "label": point.label,
                    "value": point.value,
                    "color": point.color,
                    "start": format_iso(point.start),
                }
                for point in self.data
            ],
        }


@dataclass(frozen=True)
class AIInsight:
    """A ranked, advisory observation about the window's data.

    Attributes:
        confidence: In [0, 1]; grows with sample size and with how far the
            observation deviates from the baseline.
        implemented: Whether the user marked the suggestion as acted upon.
    """

    id: str
    type: str
    title: str
    description: str
    reasoning: str
    confidence: float
    category: str
    mood: str
    impact: str
    sample_size: int
    implemented: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for rendering."""
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "reasoning": self.reasoning,
            "confidence": self.confidence,
            "category": self.category,
            "mood": self.mood,
            "impact": self.impact,
            "sample_size": self.sample_size,
            "implemented": self.implemented,
        }


@dataclass(frozen=True)
class Alert:
    """A rule-triggered notice."""

    id: str
    type: str
    title: str
    message: str
    severity: AlertSeverity
    action_required: bool
    created_at: datetime
    dismissed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for rendering."""
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "severity": self.severity.value,
            "action_required": self.action_required,
            "dismissed": self.dismissed,
            "created_at": format_iso(self.created_at),
        }


@dataclass(frozen=True)
class PlatformAnalytics:
    """Per-platform totals for a window."""

    platform: str
    followers: float = 0.0
    engagement: float = 0.0
    reach: float = 0.0
    clicks: float = 0.0
    conversions: float = 0.0
    revenue: float = 0.0
    growth_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for rendering."""
        return {
            "platform": self.platform,
            "followers": self.followers,
            "engagement": self.engagement,
            "reach": self.reach,
            "clicks": self.clicks,
            "conversions": self.conversions,
            "revenue": self.revenue,
            "growth_rate": self.growth_rate,
        }


@dataclass(frozen=True)
class HashtagAnalytics:
    """Usage statistics for one hashtag."""

    hashtag: str
    usage: int
    reach: float
    engagement: float
    trending: bool
    category: str
    performance: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for rendering."""
        return {
            "hashtag": self.hashtag,
            "usage": self.usage,
            "reach": self.reach,
            "engagement": self.engagement,
            "trending": self.trending,
            "category": self.category,
            "performance": self.performance,
        }


@dataclass(frozen=True)
class AnalyticsDashboard:
    """Everything a dashboard screen renders for one filter.

    Attributes:
        filter: Filter the views were computed for (may be the fallback).
        notices: Non-blocking messages for the screen (e.g. filter reset).
        stale: True when the views are cached results from an earlier query.
    """

    filter: AnalyticsFilter
    title: str
    metrics: tuple[MetricCard, ...] = ()
    charts: tuple[ChartData, ...] = ()
    insights: tuple[AIInsight, ...] = ()
    alerts: tuple[Alert, ...] = ()
    notices: tuple[str, ...] = ()
    stale: bool = False
    generated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for rendering."""
        date_range = self.filter.date_range
        return {
            "title": self.title,
            "filter": {
                "start": format_iso(date_range.start),
                "end": format_iso(date_range.end),
                "preset": date_range.preset.value if date_range.preset else None,
                "mode": self.filter.mode.value,
            },
            "metrics": [card.to_dict() for card in self.metrics],
            "charts": [chart.to_dict() for chart in self.charts],
            "insights": [insight.to_dict() for insight in self.insights],
            "alerts": [alert.to_dict() for alert in self.alerts],
            "notices": list(self.notices),
            "stale": self.stale,
            "generated_at": format_iso(self.generated_at),
        }
