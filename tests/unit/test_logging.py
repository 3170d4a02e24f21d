# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging configuration."""

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from kingdom_analytics.core.config import Settings
from kingdom_analytics.utils.logging import bind_context, clear_context, setup_logging


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Restore root handlers and structlog defaults after the test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    package_level = logging.getLogger("kingdom_analytics").level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("kingdom_analytics").setLevel(package_level)
    clear_context()
    structlog.reset_defaults()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_installs_single_root_handler(self, restore_logging: None) -> None:
        """Test that the root logger gets one structlog-formatted handler."""
        setup_logging(Settings(log_level="WARNING"))

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_production_renders_json(
        self,
        restore_logging: None,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that stdlib records are rendered as JSON with bound context."""
        setup_logging(Settings(environment="production", debug=False))
        bind_context(screen="analytics")

        logging.getLogger("kingdom_analytics.test").warning("Exported %d events", 3)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Exported 3 events"
        assert record["level"] == "warning"
        assert record["screen"] == "analytics"
