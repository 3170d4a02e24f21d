# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for Kingdom Analytics.

Example:
    >>> from kingdom_analytics.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from kingdom_analytics.core.config.settings import (
    AnalyticsSettings,
    DatabaseSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "AnalyticsSettings",
    "DatabaseSettings",
]
