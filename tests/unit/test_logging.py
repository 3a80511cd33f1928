# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for log setup."""

import io
import json
import logging
from collections.abc import Callable, Generator

import pytest
import structlog

from expertchat.core.config.settings import Settings
from expertchat.utils.logging import HANDLER_NAME, bind_context, clear_context, setup_logging


def _installed_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if h.get_name() == HANDLER_NAME]


@pytest.fixture
def configure() -> Generator[Callable[[str], io.StringIO], None, None]:
    """Run setup_logging and redirect its handler into a buffer."""
    root = logging.getLogger()
    root_level = root.level
    package_level = logging.getLogger("expertchat").level

    def _configure(environment: str) -> io.StringIO:
        setup_logging(Settings(environment=environment, log_level="DEBUG"))
        buffer = io.StringIO()
        _installed_handlers()[0].setStream(buffer)
        return buffer

    yield _configure

    for handler in _installed_handlers():
        root.removeHandler(handler)
    root.setLevel(root_level)
    logging.getLogger("expertchat").setLevel(package_level)
    clear_context()
    structlog.reset_defaults()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_lines_carry_bound_context(self, configure) -> None:
        """Test that stdlib records render as JSON with the bound ids."""
        buffer = configure("test")
        bind_context(request_id="req-1", session_id="abc")

        logging.getLogger("expertchat.domains.chat").warning("Posted %d messages", 3)

        line = json.loads(buffer.getvalue().strip().splitlines()[-1])
        assert line["event"] == "Posted 3 messages"
        assert line["level"] == "warning"
        assert line["logger"] == "expertchat.domains.chat"
        assert line["request_id"] == "req-1"
        assert line["session_id"] == "abc"
        assert "timestamp" in line

    def test_cleared_context_is_not_rendered(self, configure) -> None:
        """Test that ids do not outlive clear_context."""
        buffer = configure("test")
        bind_context(request_id="req-1")
        clear_context()

        logging.getLogger("expertchat").info("after")

        line = json.loads(buffer.getvalue().strip().splitlines()[-1])
        assert "request_id" not in line

    def test_exceptions_are_rendered(self, configure) -> None:
        """Test that exc_info ends up in the JSON line."""
        buffer = configure("test")

        try:
            raise ConnectionError("broker down")
        except ConnectionError:
            logging.getLogger("expertchat").error("Dispatch failed", exc_info=True)

        line = json.loads(buffer.getvalue().strip().splitlines()[-1])
        assert "ConnectionError: broker down" in line["exception"]

    def test_development_uses_console_output(self, configure) -> None:
        """Test that development output is not JSON."""
        buffer = configure("development")

        logging.getLogger("expertchat").info("hello console")

        output = buffer.getvalue()
        assert "hello console" in output
        with pytest.raises(json.JSONDecodeError):
            json.loads(output.strip().splitlines()[-1])

    def test_repeated_setup_keeps_one_handler(self, configure) -> None:
        """Test that calling setup twice does not duplicate output."""
        configure("test")
        configure("test")

        assert len(_installed_handlers()) == 1

    def test_third_party_loggers_are_quieted(self, configure) -> None:
        """Test noisy library loggers are raised to WARNING."""
        configure("test")

        assert logging.getLogger("sqlalchemy").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("expertchat").level == logging.DEBUG
