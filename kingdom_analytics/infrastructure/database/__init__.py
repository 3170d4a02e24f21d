# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the SQL-backed event store."""

from kingdom_analytics.infrastructure.database.connection import (
    create_database_engine,
    create_sessionmaker,
    init_schema,
)
from kingdom_analytics.infrastructure.database.models import AnalyticsEventRecord, Base

__all__ = [
    "AnalyticsEventRecord",
    "Base",
    "create_database_engine",
    "create_sessionmaker",
    "init_schema",
]
