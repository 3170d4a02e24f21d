# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Process-wide wiring of the analytics pipeline.

build_container() is called once at process start. It configures logging,
builds the configured event store, and hands it to the service and tracker.
Nothing is kept in module-level state: the caller owns the container and
threads the tracker and service to the code that needs them.

Example:
    from kingdom_analytics.container import build_container

    container = build_container()
    container.tracker.track_product_sale("p1", 24.99, "Printify")
    dashboard = container.service.get_dashboard()
    ...
    container.close()
"""

from dataclasses import dataclass

from sqlalchemy import Engine

from kingdom_analytics.core.config import Settings, get_settings
from kingdom_analytics.domains.analytics import (
    AnalyticsService,
    EventStore,
    EventTracker,
    InMemoryEventStore,
    SQLEventStore,
)
from kingdom_analytics.infrastructure.database import (
    create_database_engine,
    create_sessionmaker,
    init_schema,
)
from kingdom_analytics.utils.logging import bind_context, clear_context, get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class AnalyticsContainer:
    """The constructed pipeline.

    Attributes:
        settings: Settings the pipeline was built from.
        store: Event store owned by the service.
        service: Aggregation service.
        tracker: Event tracker forwarding to the service.
        engine: Database engine when the SQL store is configured.
    """

    settings: Settings
    store: EventStore
    service: AnalyticsService
    tracker: EventTracker
    engine: Engine | None = None

    def close(self) -> None:
        """Release database connections and the bound logging context."""
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Analytics database connections closed")
        clear_context()


def build_store(settings: Settings) -> tuple[EventStore, Engine | None]:
    """Create the configured event store.

    Returns:
        The store, and the engine backing it for the SQL backend.

    Raises:
        EventStoreError: If the SQL store cannot be initialized.
    """
    if settings.analytics.store_backend == "sql":
        engine = create_database_engine(settings.database)
        init_schema(engine)
        logger.info("Using SQL event store")
        return SQLEventStore(create_sessionmaker(engine)), engine

    logger.info("Using in-memory event store", capacity=settings.analytics.store_capacity)
    return InMemoryEventStore(capacity=settings.analytics.store_capacity), None


def build_container(
    settings: Settings | None = None,
    configure_logging: bool = True,
) -> AnalyticsContainer:
    """Build the analytics pipeline.

    Args:
        settings: Settings to use; the cached settings when omitted.
        configure_logging: Whether to install the structlog configuration.

    Returns:
        AnalyticsContainer instance.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)

    store, engine = build_store(settings)
    service = AnalyticsService(store, settings.analytics)
    tracker = EventTracker(service)

    bind_context(environment=settings.environment)
    logger.info("Analytics pipeline ready", backend=settings.analytics.store_backend)
    return AnalyticsContainer(
        settings=settings,
        store=store,
        service=service,
        tracker=tracker,
        engine=engine,
    )
