# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""CSV export of window events."""

import csv
import io
import json
from collections.abc import Iterable

from kingdom_analytics.domains.analytics.schema import Event
from kingdom_analytics.utils.datetime import format_iso

CSV_COLUMNS = ("timestamp", "name", "type", "value", "mode", "properties")


def events_to_csv(events: Iterable[Event]) -> str:
    """Render events as CSV, one row per event in the given order.

    The ``properties`` column holds the full payload as compact JSON with
    sorted keys.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for event in events:
        payload = event.to_dict()["properties"]
        writer.writerow(
            (
                format_iso(event.timestamp),
                event.name.value,
                event.type,
                event.value,
                event.mode or "",
                json.dumps(payload, sort_keys=True, separators=(",", ":")),
            )
        )
    return buffer.getvalue()
