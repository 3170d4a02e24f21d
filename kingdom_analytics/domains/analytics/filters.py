# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Query filter value objects.

Every aggregation query takes an AnalyticsFilter: a date range plus a
content mode. Filters built from a preset capture ``now`` once, so the same
filter instance describes the same window across repeated queries within a
dashboard session.

Usage:
    from kingdom_analytics.domains.analytics.filters import (
        AnalyticsFilter,
        ContentMode,
        DatePreset,
    )

    filter_ = AnalyticsFilter.from_preset(DatePreset.LAST_7_DAYS, ContentMode.FAITH)
    previous = filter_.date_range.trailing()
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from kingdom_analytics.domains.analytics.exceptions import InvalidFilterError
from kingdom_analytics.utils.datetime import days_ago, ensure_utc, utc_now


class ContentMode(str, Enum):
    """The app's content personality."""

    FAITH = "faith"
    ENCOURAGEMENT = "encouragement"
    BOTH = "both"


class DatePreset(str, Enum):
    """Named date windows offered by the dashboards."""

    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    LAST_YEAR = "1y"

    @property
    def days(self) -> int:
        """Length of the window in days."""
        return PRESET_DAYS[self]

    @property
    def bucket_count(self) -> int:
        """Number of time-series buckets charts use for this window."""
        return PRESET_BUCKETS[self]


PRESET_DAYS: dict[DatePreset, int] = {
    DatePreset.LAST_7_DAYS: 7,
    DatePreset.LAST_30_DAYS: 30,
    DatePreset.LAST_90_DAYS: 90,
    DatePreset.LAST_YEAR: 365,
}

PRESET_BUCKETS: dict[DatePreset, int] = {
    DatePreset.LAST_7_DAYS: 7,
    DatePreset.LAST_30_DAYS: 4,
    DatePreset.LAST_90_DAYS: 12,
    DatePreset.LAST_YEAR: 12,
}

MAX_CUSTOM_BUCKETS = 12

# Allowed slack between a preset and the literal range it labels
PRESET_TOLERANCE = timedelta(seconds=1)


@dataclass(frozen=True)
class DateRange:
    """Inclusive time window ``[start, end]``.

    Attributes:
        start: Window start (UTC).
        end: Window end (UTC).
        preset: Preset the window was built from, if any. A convenience
            label; the literal range is authoritative.
    """

    start: datetime
    end: datetime
    preset: DatePreset | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_utc(self.start))
        object.__setattr__(self, "end", ensure_utc(self.end))
        if self.preset is not None and not isinstance(self.preset, DatePreset):
            object.__setattr__(self, "preset", DatePreset(self.preset))

    @classmethod
    def from_preset(
        cls,
        preset: DatePreset | str,
        now: datetime | None = None,
    ) -> "DateRange":
        """Build the window ending at ``now`` for a preset.

        Args:
            preset: Preset token (``7d``, ``30d``, ``90d``, ``1y``).
            now: Window end; captured from the clock when omitted.

        Returns:
            DateRange spanning the preset's length.
        """
        preset = DatePreset(preset)
        end = ensure_utc(now) if now is not None else utc_now()
        return cls(start=days_ago(preset.days, now=end), end=end, preset=preset)

    @property
    def duration(self) -> timedelta:
        """Length of the window."""
        return self.end - self.start

    @property
    def days(self) -> int:
        """Length of the window in whole days, rounded up (at least 1)."""
        seconds = self.duration.total_seconds()
        return max(1, int(-(-seconds // 86400)))

    @property
    def bucket_count(self) -> int:
        """Number of chart buckets for this window."""
        if self.preset is not None:
            return self.preset.bucket_count
        return max(1, min(self.days, MAX_CUSTOM_BUCKETS))

    def validate(self) -> None:
        """Check the window's invariants.

        Raises:
            InvalidFilterError: If start is after end, or the preset does not
                match the literal span.
        """
        if self.start > self.end:
            raise InvalidFilterError(
                "Date range start must not be after end",
                {"start": self.start.isoformat(), "end": self.end.isoformat()},
            )
        if self.preset is not None:
            expected = timedelta(days=self.preset.days)
            if abs(self.duration - expected) > PRESET_TOLERANCE:
                raise InvalidFilterError(
                    f"Date range does not match preset {self.preset.value}",
                    {
                        "preset": self.preset.value,
                        "duration_seconds": self.duration.total_seconds(),
                    },
                )

    def contains(self, moment: datetime) -> bool:
        """Check whether a timestamp falls inside ``[start, end]``."""
        return self.start <= moment <= self.end

    def trailing(self) -> "DateRange":
        """The equally long window immediately before this one.

        The trailing window is half-open, ``[start - duration, start)``;
        ``contains`` is not used on it (see aggregator.select_window).
        """
        return DateRange(start=self.start - self.duration, end=self.start)


@dataclass(frozen=True)
class AnalyticsFilter:
    """Date range and mode scoping an aggregation query.

    Attributes:
        date_range: Window the query covers.
        mode: Which mode's events count. Events without a mode, or tagged
            ``both``, count toward every mode.
    """

    date_range: DateRange
    mode: ContentMode = ContentMode.BOTH

    def __post_init__(self) -> None:
        if not isinstance(self.mode, ContentMode):
            object.__setattr__(self, "mode", ContentMode(self.mode))

    @classmethod
    def from_preset(
        cls,
        preset: DatePreset | str,
        mode: ContentMode | str = ContentMode.BOTH,
        now: datetime | None = None,
    ) -> "AnalyticsFilter":
        """Build a filter for a preset window ending at ``now``.

        Args:
            preset: Preset token.
            mode: Content mode to aggregate.
            now: Window end; captured once from the clock when omitted.

        Returns:
            AnalyticsFilter instance.

        Example:
            >>> f = AnalyticsFilter.from_preset("7d")
            >>> f.date_range.duration.days
            7
        """
        return cls(date_range=DateRange.from_preset(preset, now=now), mode=ContentMode(mode))

    @classmethod
    def default(
        cls,
        preset: DatePreset | str = DatePreset.LAST_30_DAYS,
        now: datetime | None = None,
    ) -> "AnalyticsFilter":
        """Safe fallback filter used when a requested filter is invalid."""
        return cls.from_preset(preset, ContentMode.BOTH, now=now)

    def validate(self) -> None:
        """Raise InvalidFilterError if the filter cannot be queried."""
        self.date_range.validate()

    def with_mode(self, mode: ContentMode | str) -> "AnalyticsFilter":
        """Copy of this filter scoped to another mode."""
        return replace(self, mode=ContentMode(mode))

    def matches_mode(self, event_mode: str | None) -> bool:
        """Check whether an event tagged ``event_mode`` counts for this filter.

        Args:
            event_mode: The event's ``mode`` property, if any.

        Returns:
            True if the event should be aggregated.
        """
        if self.mode is ContentMode.BOTH or event_mode is None:
            return True
        return event_mode in (self.mode.value, ContentMode.BOTH.value)
