# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event taxonomy for Kingdom Analytics.

Components:
- EventKind: The closed set of tracked event names
- EventCategory: Taxonomy groups (content, engagement, business, ...)
- ValueUnit: What an event's numeric value measures
- EventRegistry: Category and unit lookups per kind

Quick Start:
    from kingdom_analytics.infrastructure.events import EventKind, EventRegistry

    EventRegistry.get_category(EventKind.PRODUCT_SALE)  # EventCategory.BUSINESS
    EventRegistry.is_known("not_an_event")  # False
"""

from kingdom_analytics.infrastructure.events.types import (
    EventCategory,
    EventKind,
    EventRegistry,
    ValueUnit,
)

__all__ = [
    "EventKind",
    "EventCategory",
    "EventRegistry",
    "ValueUnit",
]
