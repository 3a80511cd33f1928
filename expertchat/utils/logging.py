# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Log output for the service.

Modules log through ``logging.getLogger(__name__)``. ``setup_logging``
installs one stdout handler whose formatter runs the records through
structlog, so every line carries the request and session ids bound with
``bind_context``. Output is colored console text in development and one
JSON object per line everywhere else.

Example:
    >>> setup_logging(get_settings())
    >>> bind_context(request_id="7f3a", session_id="c0ffee")
    >>> logging.getLogger("expertchat.chat").info("Posted %d messages", 3)
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from expertchat.core.config.settings import Settings

HANDLER_NAME = "expertchat"

# Libraries that are chatty at INFO.
QUIET_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "sqlalchemy",
    "aiosqlite",
    "asyncio",
    "dramatiq",
)


def _build_formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_output:
        render: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        render = [structlog.dev.ConsoleRenderer(colors=True)]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
    )


def setup_logging(settings: "Settings") -> None:
    """Install the stdout handler and set log levels.

    Safe to call more than once; a previously installed handler is
    replaced, other root handlers are left alone.

    Args:
        settings: Provides ``log_level`` and the environment.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(_build_formatter(json_output=not settings.is_development))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("expertchat").setLevel(log_level)


def bind_context(**kwargs: object) -> None:
    """Attach fields to every log line emitted from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop all fields bound with ``bind_context``.

    The request middleware calls this around each request so ids never
    leak from one request into the next.
    """
    structlog.contextvars.clear_contextvars()
