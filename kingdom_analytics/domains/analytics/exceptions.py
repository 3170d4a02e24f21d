# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for the analytics domain.

This module defines the exception hierarchy for analytics operations:
- AnalyticsError: Base exception for all analytics errors
- SchemaError: An event could not be built from the given inputs
    - UnknownEventKindError: Name outside the taxonomy
    - InvalidValueError: Value is not a finite number
    - MissingRequiredPropertyError: A kind-specific field is absent
    - InvalidPropertyError: A field has the wrong type or is not allowed
- InvalidFilterError: A query filter is inconsistent (start after end)
- QueryTimeoutError: The event store did not answer in time
- EventStoreError: The event store failed for another reason
"""

from typing import Any


class AnalyticsError(Exception):
    """Base exception for all analytics errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize analytics error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class SchemaError(AnalyticsError):
    """Raised when an event fails taxonomy or payload validation."""


class UnknownEventKindError(SchemaError):
    """Raised when an event name is not part of the taxonomy.

    Attributes:
        name: The rejected event name.
    """

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Unknown event kind: {name!r}", {"name": repr(name)})


class InvalidValueError(SchemaError):
    """Raised when an event value is not a finite real number.

    Attributes:
        value: The rejected value.
    """

    def __init__(self, name: str, value: object):
        self.value = value
        super().__init__(
            f"Invalid value for event {name!r}: {value!r}",
            {"name": name, "value": repr(value)},
        )


class MissingRequiredPropertyError(SchemaError):
    """Raised when a kind-specific required property is absent.

    Attributes:
        fields: Names of the missing properties.
    """

    def __init__(self, name: str, fields: list[str]):
        self.fields = fields
        super().__init__(
            f"Event {name!r} is missing required properties: {', '.join(fields)}",
            {"name": name, "fields": fields},
        )


class InvalidPropertyError(SchemaError):
    """Raised when a property has the wrong type, tag, or is not allowed.

    Attributes:
        errors: Field name to error message mapping.
    """

    def __init__(self, name: str, errors: dict[str, str]):
        self.errors = errors
        super().__init__(
            f"Event {name!r} has invalid properties",
            {"name": name, "errors": errors},
        )


class InvalidFilterError(AnalyticsError):
    """Raised when a query filter is inconsistent.

    Queries raise this before computing anything.
    """


class QueryTimeoutError(AnalyticsError):
    """Raised when the event store does not produce a snapshot in time.

    Callers treat this as retryable and may show cached results.

    Attributes:
        timeout: Seconds waited before giving up.
    """

    def __init__(self, message: str, timeout: float | None = None):
        self.timeout = timeout
        super().__init__(message, {"timeout": timeout} if timeout is not None else None)


class EventStoreError(AnalyticsError):
    """Raised when the event store fails for a reason other than a timeout.

    Attributes:
        original_error: The underlying driver or database error.
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        self.original_error = original_error
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message
