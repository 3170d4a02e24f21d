# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database connection management for the SQL event store.

Uses the SQLAlchemy 2.0 API. The engine and sessionmaker are created
explicitly by the container and handed to SQLEventStore; nothing here is
held in module-level state.

Example:
    from kingdom_analytics.infrastructure.database.connection import (
        create_database_engine,
        create_sessionmaker,
        init_schema,
    )

    engine = create_database_engine(settings.database)
    init_schema(engine)
    sessionmaker = create_sessionmaker(engine)
"""

from typing import TYPE_CHECKING

from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kingdom_analytics.domains.analytics.exceptions import EventStoreError
from kingdom_analytics.infrastructure.database.models import Base

if TYPE_CHECKING:
    from kingdom_analytics.core.config.settings import DatabaseSettings


def create_database_engine(settings: "DatabaseSettings") -> Engine:
    """Create the engine for the configured database.

    SQLite connections get the configured busy timeout so a locked
    database surfaces as an error instead of blocking; in-memory SQLite
    shares one connection so every session sees the same tables.

    Args:
        settings: Database settings.

    Returns:
        SQLAlchemy engine.

    Raises:
        EventStoreError: If the engine cannot be created.
    """
    kwargs: dict = {"echo": settings.echo}
    if settings.is_sqlite:
        kwargs["connect_args"] = {
            "timeout": settings.connect_timeout,
            "check_same_thread": False,
        }
        if settings.url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
        kwargs["pool_timeout"] = settings.connect_timeout

    try:
        return create_engine(settings.url, **kwargs)
    except (SQLAlchemyError, ValueError) as e:
        raise EventStoreError("Failed to create analytics database engine", e) from e


def create_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    """Create the session factory used by SQLEventStore."""
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def init_schema(engine: Engine) -> None:
    """Create the analytics tables if they do not exist.

    Raises:
        EventStoreError: If the tables cannot be created.
    """
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise EventStoreError("Failed to create analytics tables", e) from e
