# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mode-aware copy resolution.

Dashboard copy comes in up to three variants: a default, a faith-mode
override and an encouragement-mode override. For a field ``x`` the
overrides live in ``faith_mode_x`` and ``encouragement_mode_x``. resolve()
picks the variant for a mode and falls back to the default.

The display mode is never read from storage here. Callers read the
``faithMode`` setting themselves and pass the result in, e.g. through
display_mode_from_settings().

Example:
    >>> resolve({"title": "Analytics", "faith_mode_title": "Kingdom Analytics"},
    ...         ContentMode.BOTH, active_mode=ContentMode.FAITH)
    'Kingdom Analytics'
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kingdom_analytics.domains.analytics.filters import ContentMode

# Settings key holding the user's display mode (True = faith)
FAITH_MODE_SETTING = "faithMode"


@dataclass(frozen=True)
class ContentItem:
    """A piece of copy with optional per-mode overrides."""

    title: str
    faith_mode_title: str | None = None
    encouragement_mode_title: str | None = None
    description: str | None = None
    faith_mode_description: str | None = None
    encouragement_mode_description: str | None = None


def _lookup(item: Mapping[str, Any] | object, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def resolve(
    item: Mapping[str, Any] | object,
    mode: ContentMode | str = ContentMode.BOTH,
    *,
    active_mode: ContentMode | str | None = None,
    field: str = "title",
) -> str:
    """Pick the copy variant for a mode.

    Args:
        item: Mapping or object carrying ``field`` and optional
            ``faith_mode_<field>`` / ``encouragement_mode_<field>``.
        mode: Mode of the view being rendered. ``both`` defers to
            ``active_mode``.
        active_mode: The user's current display mode toggle.
        field: Base field name to resolve.

    Returns:
        The override for the effective mode, or the default text.
    """
    mode = ContentMode(mode)
    target = mode
    if mode is ContentMode.BOTH:
        target = ContentMode(active_mode) if active_mode is not None else ContentMode.BOTH

    if target is not ContentMode.BOTH:
        override = _lookup(item, f"{target.value}_mode_{field}")
        if override:
            return override

    default = _lookup(item, field)
    return default if default is not None else ""


def display_mode_from_settings(settings: Mapping[str, Any]) -> ContentMode:
    """Map the persisted ``faithMode`` flag to a display mode.

    Args:
        settings: Key/value settings read by the caller.

    Returns:
        FAITH when the flag is true or absent, ENCOURAGEMENT when false.
    """
    flag = settings.get(FAITH_MODE_SETTING)
    if flag is None:
        return ContentMode.FAITH
    if isinstance(flag, str):
        flag = flag.strip().lower() in ("true", "1", "yes")
    return ContentMode.FAITH if flag else ContentMode.ENCOURAGEMENT


LABELS: dict[str, ContentItem] = {
    # Metric cards
    "revenue": ContentItem(
        title="Total Revenue",
        faith_mode_title="Kingdom Revenue",
        encouragement_mode_title="Blessing Revenue",
    ),
    "engagement": ContentItem(
        title="Engagement",
        faith_mode_title="Fellowship Engagement",
        encouragement_mode_title="Community Support",
    ),
    "reach": ContentItem(
        title="Content Reach",
        faith_mode_title="Gospel Reach",
        encouragement_mode_title="Hope Reach",
    ),
    "conversions": ContentItem(
        title="Conversion Rate",
        faith_mode_title="Kingdom Impact",
        encouragement_mode_title="Lives Touched",
    ),
    "followers": ContentItem(
        title="New Followers",
        faith_mode_title="Community Growth",
        encouragement_mode_title="Circle Growth",
    ),
    "content": ContentItem(
        title="Content Activity",
        faith_mode_title="Ministry Moments",
        encouragement_mode_title="Uplifting Moments",
    ),
    # Charts
    "revenue-trend": ContentItem(
        title="Revenue Growth",
        faith_mode_title="Kingdom Growth",
        encouragement_mode_title="Blessing Growth",
    ),
    "engagement-trend": ContentItem(
        title="Engagement Over Time",
        faith_mode_title="Fellowship Over Time",
        encouragement_mode_title="Support Over Time",
    ),
    "activity-by-category": ContentItem(
        title="Activity by Category",
        faith_mode_title="Ministry Activity",
        encouragement_mode_title="Uplifting Activity",
    ),
    "platform-performance": ContentItem(
        title="Platform Performance",
        faith_mode_title="Ministry Reach",
        encouragement_mode_title="Platform Impact",
    ),
    # Dashboard
    "dashboard": ContentItem(
        title="Analytics",
        faith_mode_title="Kingdom Analytics",
        encouragement_mode_title="Impact Analytics",
    ),
}


def label(key: str, mode: ContentMode | str, active_mode: ContentMode | str | None = None) -> str:
    """Resolve a catalog label by key."""
    return resolve(LABELS[key], mode, active_mode=active_mode)
