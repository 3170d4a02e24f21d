# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for Kingdom Analytics.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
"""

from kingdom_analytics.utils.datetime import (
    days_ago,
    ensure_utc,
    format_iso,
    parse_iso,
    utc_now,
)
from kingdom_analytics.utils.logging import (
    bind_context,
    clear_context,
    get_logger,
    setup_logging,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    # Datetime
    "utc_now",
    "ensure_utc",
    "days_ago",
    "format_iso",
    "parse_iso",
]
