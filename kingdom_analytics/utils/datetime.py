# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for Kingdom Analytics.

All event timestamps and filter boundaries are timezone-aware UTC. Callers
that hand in naive datetimes get them interpreted as UTC, so windows computed
from different sources never mix naive and aware values.

Usage:
------
    from kingdom_analytics.utils.datetime import utc_now

    # For current time
    now = utc_now()

    # For dataclass defaults
    timestamp: datetime = field(default_factory=utc_now)
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    # Already aware - convert to UTC
    return dt.astimezone(timezone.utc)


def days_ago(days: int, now: datetime | None = None) -> datetime:
    """Get a datetime N days before ``now`` (defaults to the current time).

    Args:
        days: Number of days to go back.
        now: Reference point; current UTC time when omitted.

    Returns:
        Timezone-aware UTC datetime.
    """
    reference = ensure_utc(now) if now is not None else utc_now()
    return reference - timedelta(days=days)


def format_iso(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 string.

    Args:
        dt: Datetime to format.

    Returns:
        ISO 8601 formatted string or None.
    """
    if dt is None:
        return None

    dt_utc = ensure_utc(dt)
    return dt_utc.isoformat()


def parse_iso(iso_string: str | None) -> datetime | None:
    """Parse an ISO 8601 datetime string.

    Args:
        iso_string: ISO 8601 formatted string; a trailing ``Z`` means UTC.

    Returns:
        Timezone-aware UTC datetime or None.

    Raises:
        ValueError: If the string is not ISO 8601.
    """
    if iso_string is None:
        return None

    dt = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    return ensure_utc(dt)
