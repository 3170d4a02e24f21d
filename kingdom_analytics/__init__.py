"""Kingdom Analytics.

Event analytics pipeline for the Kingdom Studios creator apps: a typed event
tracker, an aggregation service that derives dashboard metrics, charts,
insights and alerts, and the mode-aware copy resolver used to label them.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
