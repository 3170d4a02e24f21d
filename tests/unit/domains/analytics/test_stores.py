# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the in-memory event store."""

import threading
from datetime import datetime, timedelta

import pytest

from kingdom_analytics.domains.analytics import (
    Event,
    EventStore,
    InMemoryEventStore,
    QueryTimeoutError,
    validate_event,
)


def make_sale(product_id: str, timestamp: datetime) -> Event:
    return validate_event(
        "product_sale",
        1.0,
        {"type": "revenue", "product_id": product_id},
        timestamp=timestamp,
    )


class TestInMemoryEventStore:
    """Tests for InMemoryEventStore."""

    def test_satisfies_protocol(self) -> None:
        """Test that the store implements the EventStore protocol."""
        assert isinstance(InMemoryEventStore(), EventStore)

    def test_snapshot_preserves_ingestion_order(self, fixed_now: datetime) -> None:
        """Test that events come back in append order, not time order."""
        store = InMemoryEventStore()
        store.append(make_sale("late", fixed_now))
        store.append(make_sale("early", fixed_now - timedelta(days=3)))

        ids = [event.properties["product_id"] for event in store.snapshot()]

        assert ids == ["late", "early"]
        assert len(store) == 2

    def test_snapshot_is_a_copy(self, fixed_now: datetime) -> None:
        """Test that later appends do not change an earlier snapshot."""
        store = InMemoryEventStore()
        store.append(make_sale("a", fixed_now))
        snapshot = store.snapshot()

        store.append(make_sale("b", fixed_now))

        assert len(snapshot) == 1

    def test_since_filters_old_events(self, fixed_now: datetime) -> None:
        """Test that since drops events before the cutoff."""
        store = InMemoryEventStore()
        store.append(make_sale("old", fixed_now - timedelta(days=40)))
        store.append(make_sale("new", fixed_now - timedelta(days=1)))

        events = store.snapshot(since=fixed_now - timedelta(days=30))

        assert [event.properties["product_id"] for event in events] == ["new"]

    def test_capacity_evicts_oldest(self, fixed_now: datetime) -> None:
        """Test ring buffer eviction."""
        store = InMemoryEventStore(capacity=2)
        for product_id in ("a", "b", "c"):
            store.append(make_sale(product_id, fixed_now))

        assert [event.properties["product_id"] for event in store.snapshot()] == ["b", "c"]
        assert store.evicted == 1

    def test_invalid_capacity(self) -> None:
        """Test that a non-positive capacity is rejected."""
        with pytest.raises(ValueError):
            InMemoryEventStore(capacity=0)

    def test_clear(self, fixed_now: datetime) -> None:
        """Test that clear empties the store."""
        store = InMemoryEventStore(capacity=1)
        store.append(make_sale("a", fixed_now))
        store.append(make_sale("b", fixed_now))

        store.clear()

        assert len(store) == 0
        assert store.evicted == 0

    def test_snapshot_times_out_while_locked(self) -> None:
        """Test that a held lock surfaces as QueryTimeoutError."""
        store = InMemoryEventStore()
        store._lock.acquire()
        try:
            with pytest.raises(QueryTimeoutError) as exc_info:
                store.snapshot(timeout=0.01)
        finally:
            store._lock.release()

        assert exc_info.value.timeout == 0.01

    def test_concurrent_appends(self, fixed_now: datetime) -> None:
        """Test that concurrent appends are all retained."""
        store = InMemoryEventStore()

        def worker(prefix: str) -> None:
            for i in range(200):
                store.append(make_sale(f"{prefix}-{i}", fixed_now))

        threads = [threading.Thread(target=worker, args=(str(n),)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.snapshot()) == 800
