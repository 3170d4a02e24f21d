# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Alert rules.

Alerts flag conditions that need the creator's attention. Thresholds come
from AnalyticsSettings. Every alert is stamped with the window end so the
same events and filter always produce the same alerts.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from kingdom_analytics.domains.analytics.aggregator import percent_change, total_revenue
from kingdom_analytics.domains.analytics.schema import Event
from kingdom_analytics.domains.analytics.views import Alert, AlertSeverity
from kingdom_analytics.infrastructure.events.types import EventKind

# Performance metric carrying request latency in milliseconds
RESPONSE_TIME_METRIC = "response_time"


@dataclass(frozen=True)
class AlertThresholds:
    """Trigger levels for the alert rules."""

    error_count: int = 5
    revenue_drop_percent: float = 20.0
    revenue_milestone: float = 1000.0
    response_time_ms: float = 1000.0
    ai_failure_rate: float = 0.1
    min_samples: int = 3


def evaluate_alerts(
    current: Sequence[Event],
    previous: Sequence[Event],
    thresholds: AlertThresholds,
    created_at: datetime,
) -> tuple[Alert, ...]:
    """Evaluate every alert rule for a window.

    Args:
        current: Window events.
        previous: Trailing window events.
        thresholds: Trigger levels.
        created_at: Timestamp stamped on the alerts.

    Returns:
        Triggered alerts, errors first.
    """
    alerts: list[Alert] = []

    def add(alert_id: str, title: str, message: str, severity: AlertSeverity, action: bool) -> None:
        alerts.append(
            Alert(
                id=alert_id,
                type=alert_id,
                title=title,
                message=message,
                severity=severity,
                action_required=action,
                created_at=created_at,
            )
        )

    errors = [event for event in current if event.name is EventKind.ERROR]
    if len(errors) >= thresholds.error_count:
        add(
            "error-spike",
            "Errors are piling up",
            f"{len(errors)} errors were recorded this period.",
            AlertSeverity.ERROR,
            True,
        )

    revenue = total_revenue(current)
    previous_revenue = total_revenue(previous)
    if previous_revenue > 0:
        change = percent_change(revenue, previous_revenue)
        if change <= -thresholds.revenue_drop_percent:
            add(
                "revenue-drop",
                "Revenue dropped",
                f"Revenue fell {abs(change):.1f}% compared to the previous period.",
                AlertSeverity.WARNING,
                True,
            )

    if thresholds.revenue_milestone > 0 and revenue >= thresholds.revenue_milestone:
        add(
            "revenue-milestone",
            "Revenue milestone reached",
            f"You earned ${revenue:.2f} this period.",
            AlertSeverity.SUCCESS,
            False,
        )

    latencies = [
        event.value
        for event in current
        if event.name is EventKind.PERFORMANCE and event.properties["metric"] == RESPONSE_TIME_METRIC
    ]
    if latencies:
        average = math.fsum(latencies) / len(latencies)
        if average > thresholds.response_time_ms:
            add(
                "slow-response",
                "Responses are slow",
                f"Average response time was {average:.0f} ms.",
                AlertSeverity.WARNING,
                False,
            )

    generations = [event for event in current if event.name is EventKind.AI_CONTENT_GENERATED]
    if len(generations) >= thresholds.min_samples:
        failures = sum(1 for event in generations if not event.properties["success"])
        rate = failures / len(generations)
        if rate > thresholds.ai_failure_rate:
            add(
                "ai-failures",
                "AI generations are failing",
                f"{failures} of {len(generations)} AI generations failed.",
                AlertSeverity.WARNING,
                False,
            )

    if not current and previous:
        add(
            "quiet-period",
            "It has been quiet",
            "No activity was recorded this period.",
            AlertSeverity.INFO,
            False,
        )

    order = {
        AlertSeverity.ERROR: 0,
        AlertSeverity.WARNING: 1,
        AlertSeverity.SUCCESS: 2,
        AlertSeverity.INFO: 3,
    }
    alerts.sort(key=lambda alert: (order[alert.severity], alert.id))
    return tuple(alerts)
