# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event stores.

The analytics service owns exactly one store. Two implementations ship:

- InMemoryEventStore: append-only ring buffer guarded by a lock. Appends
  are O(1); snapshots copy the buffer under the same lock, so a query never
  sees a half-appended event.
- SQLEventStore: one row per event via SQLAlchemy. Each append runs in its
  own transaction and each snapshot is a single SELECT, giving the atomic
  write path and consistent reads an externalized store needs.

Both return events in ingestion order. ``since`` lets the service skip
events older than the trailing comparison window.
"""

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Protocol, runtime_checkable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from kingdom_analytics.domains.analytics.exceptions import (
    EventStoreError,
    QueryTimeoutError,
)
from kingdom_analytics.domains.analytics.schema import Event, validate_event
from kingdom_analytics.infrastructure.database.models import AnalyticsEventRecord
from kingdom_analytics.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


@runtime_checkable
class EventStore(Protocol):
    """Append-only event storage owned by the analytics service."""

    def append(self, event: Event) -> None:
        """Append one event."""
        ...

    def snapshot(
        self,
        since: datetime | None = None,
        timeout: float | None = None,
    ) -> tuple[Event, ...]:
        """Return a consistent copy of stored events in ingestion order."""
        ...

    def clear(self) -> None:
        """Remove every event."""
        ...

    def __len__(self) -> int: ...


class InMemoryEventStore:
    """Lock-guarded in-memory ring buffer.

    Attributes:
        capacity: Maximum number of events kept; the oldest are dropped
            first once full. None means unbounded.
    """

    def __init__(self, capacity: int | None = None) -> None:
        """Initialize the store.

        Args:
            capacity: Optional maximum number of events.
        """
        if capacity is not None and capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._events: deque[Event] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._evicted = 0

    def append(self, event: Event) -> None:
        """Append one event, evicting the oldest when full."""
        with self._lock:
            if self.capacity is not None and len(self._events) == self.capacity:
                self._evicted += 1
            self._events.append(event)

    def snapshot(
        self,
        since: datetime | None = None,
        timeout: float | None = None,
    ) -> tuple[Event, ...]:
        """Copy the buffer.

        Args:
            since: Drop events with timestamps before this moment.
            timeout: Seconds to wait for the lock; waits indefinitely if None.

        Returns:
            Events in ingestion order.

        Raises:
            QueryTimeoutError: If the lock is not acquired within timeout.
        """
        acquired = self._lock.acquire(timeout=timeout if timeout is not None else -1)
        if not acquired:
            raise QueryTimeoutError("Timed out waiting for event store snapshot", timeout)
        try:
            events = tuple(self._events)
        finally:
            self._lock.release()

        if since is None:
            return events
        since = ensure_utc(since)
        return tuple(event for event in events if event.timestamp >= since)

    def clear(self) -> None:
        """Remove every event."""
        with self._lock:
            self._events.clear()
            self._evicted = 0

    @property
    def evicted(self) -> int:
        """Number of events dropped because the buffer was full."""
        return self._evicted

    def __len__(self) -> int:
        return len(self._events)


def _is_timeout(error: OperationalError) -> bool:
    message = str(error.orig).lower() if error.orig is not None else str(error).lower()
    return "locked" in message or "timeout" in message or "timed out" in message


class SQLEventStore:
    """Event store backed by a SQL database.

    Attributes:
        _sessionmaker: Session factory bound to the analytics database.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Initialize the store.

        Args:
            session_factory: Sessionmaker bound to an engine whose schema
                has been created (see init_schema).
        """
        self._sessionmaker = session_factory

    def append(self, event: Event) -> None:
        """Insert one event in its own transaction.

        Raises:
            QueryTimeoutError: If the database stayed locked.
            EventStoreError: On any other database failure.
        """
        payload = event.to_dict()["properties"]
        record = AnalyticsEventRecord(
            event_id=event.event_id,
            name=event.name.value,
            value=event.value,
            occurred_at=event.timestamp,
            event_type=event.type,
            mode=event.mode,
            properties=payload,
        )
        try:
            with self._sessionmaker.begin() as session:
                session.add(record)
        except OperationalError as e:
            if _is_timeout(e):
                raise QueryTimeoutError("Timed out appending analytics event") from e
            raise EventStoreError("Failed to append analytics event", e) from e
        except SQLAlchemyError as e:
            raise EventStoreError("Failed to append analytics event", e) from e

    def snapshot(
        self,
        since: datetime | None = None,
        timeout: float | None = None,
    ) -> tuple[Event, ...]:
        """Read events in ingestion order with a single SELECT.

        Args:
            since: Only return events at or after this moment.
            timeout: Unused; the engine's connect and pool timeouts apply.

        Raises:
            QueryTimeoutError: If the database stayed locked or the pool
                had no free connection.
            EventStoreError: On any other database failure.
        """
        statement = select(AnalyticsEventRecord).order_by(AnalyticsEventRecord.sequence)
        if since is not None:
            statement = statement.where(AnalyticsEventRecord.occurred_at >= ensure_utc(since))

        try:
            with self._sessionmaker() as session:
                records = session.scalars(statement).all()
        except PoolTimeoutError as e:
            raise QueryTimeoutError("Timed out waiting for a database connection", timeout) from e
        except OperationalError as e:
            if _is_timeout(e):
                raise QueryTimeoutError("Timed out reading analytics events", timeout) from e
            raise EventStoreError("Failed to read analytics events", e) from e
        except SQLAlchemyError as e:
            raise EventStoreError("Failed to read analytics events", e) from e

        events = []
        for record in records:
            # SQLite drops tzinfo; timestamps were stored as UTC
            events.append(
                validate_event(
                    record.name,
                    record.value,
                    record.properties,
                    timestamp=ensure_utc(record.occurred_at),
                    event_id=record.event_id,
                )
            )
        logger.debug("Loaded %d analytics events from database", len(events))
        if since is not None:
            since = ensure_utc(since)
            return tuple(event for event in events if event.timestamp >= since)
        return tuple(events)

    def clear(self) -> None:
        """Delete every stored event."""
        try:
            with self._sessionmaker.begin() as session:
                session.execute(delete(AnalyticsEventRecord))
        except SQLAlchemyError as e:
            raise EventStoreError("Failed to clear analytics events", e) from e

    def __len__(self) -> int:
        try:
            with self._sessionmaker() as session:
                return session.scalar(select(func.count(AnalyticsEventRecord.sequence))) or 0
        except SQLAlchemyError as e:
            raise EventStoreError("Failed to count analytics events", e) from e
