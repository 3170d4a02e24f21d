# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event record and schema validation.

``validate_event`` is the only way events are built: it checks the name
against the taxonomy, the value for finiteness, and the properties against
the kind's typed model, and returns an immutable Event.

Usage:
    from kingdom_analytics.domains.analytics.schema import validate_event

    event = validate_event(
        "product_sale",
        24.99,
        {"type": "revenue", "product_id": "p1", "platform": "Printify"},
    )
"""

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any
from uuid import uuid4

from pydantic import ValidationError

from kingdom_analytics.domains.analytics.exceptions import (
    InvalidPropertyError,
    InvalidValueError,
    MissingRequiredPropertyError,
    UnknownEventKindError,
)
from kingdom_analytics.domains.analytics.properties import PROPERTY_MODELS
from kingdom_analytics.infrastructure.events.types import (
    EventCategory,
    EventKind,
    EventRegistry,
)
from kingdom_analytics.utils.datetime import ensure_utc, format_iso, utc_now


@dataclass(frozen=True)
class Event:
    """A single tracked occurrence.

    Attributes:
        name: Event kind.
        value: Kind-dependent magnitude (count, amount, seconds, ...).
        timestamp: When the event happened (UTC), fixed at creation.
        properties: Read-only payload; always carries ``type``.
        event_id: Unique identifier.
    """

    name: EventKind
    value: float
    timestamp: datetime
    properties: Mapping[str, Any]
    event_id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def type(self) -> str:
        """Discriminator tag of the payload."""
        return self.properties["type"]

    @property
    def mode(self) -> str | None:
        """Content mode the event was recorded under, if any."""
        return self.properties.get("mode")

    @property
    def category(self) -> EventCategory:
        """Taxonomy category of the event's kind."""
        return EventRegistry.get_category(self.name)

    @property
    def platform(self) -> str | None:
        """Platform the event relates to, if any."""
        return self.properties.get("platform")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "event_id": self.event_id,
            "name": self.name.value,
            "value": self.value,
            "timestamp": format_iso(self.timestamp),
            "properties": {
                key: list(value) if isinstance(value, tuple) else value
                for key, value in self.properties.items()
            },
        }


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def _freeze(properties: dict[str, Any]) -> Mapping[str, Any]:
    frozen = {
        key: tuple(value) if isinstance(value, list) else value
        for key, value in properties.items()
    }
    return MappingProxyType(frozen)


def validate_event(
    name: EventKind | str,
    value: float,
    properties: Mapping[str, Any] | None = None,
    timestamp: datetime | None = None,
    event_id: str | None = None,
) -> Event:
    """Build a schema-conformant Event.

    Args:
        name: Event kind or its string value.
        value: Finite numeric magnitude.
        properties: Payload; must satisfy the kind's property model.
        timestamp: When the event happened; now when omitted.
        event_id: Identifier to keep (when rehydrating stored events).

    Returns:
        Immutable Event whose fields equal the inputs.

    Raises:
        UnknownEventKindError: If name is not in the taxonomy.
        InvalidValueError: If value is not a finite real number.
        MissingRequiredPropertyError: If a required property is absent.
        InvalidPropertyError: If a property is mistyped or not allowed.
    """
    if not EventRegistry.is_known(name):
        raise UnknownEventKindError(name)
    kind = EventKind(name)

    if not _is_finite_number(value):
        raise InvalidValueError(kind.value, value)

    model = PROPERTY_MODELS[kind]
    try:
        parsed = model.model_validate(dict(properties or {}))
    except ValidationError as e:
        errors = e.errors()
        missing = [
            ".".join(str(part) for part in error["loc"])
            for error in errors
            if error["type"] == "missing"
        ]
        if missing:
            raise MissingRequiredPropertyError(kind.value, missing) from e
        raise InvalidPropertyError(
            kind.value,
            {
                ".".join(str(part) for part in error["loc"]) or "__root__": error["msg"]
                for error in errors
            },
        ) from e

    event_kwargs: dict[str, Any] = {}
    if event_id is not None:
        event_kwargs["event_id"] = event_id

    return Event(
        name=kind,
        value=float(value),
        timestamp=ensure_utc(timestamp) if timestamp is not None else utc_now(),
        properties=_freeze(parsed.model_dump(exclude_none=True)),
        **event_kwargs,
    )
