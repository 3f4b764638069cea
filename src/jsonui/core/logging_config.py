"""
Structured Logging Configuration
structlog on top of the `jsonui` stdlib logger, with session context.
"""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from .config import Settings, get_settings

ROOT_LOGGER = "jsonui"


def configure_logging(
    level: str | None = None,
    json_logs: bool | None = None,
    settings: Settings | None = None,
) -> None:
    """
    Configure structured logging for the engine.

    Only the `jsonui` logger hierarchy gets a handler, so the host
    application's own logging setup is left alone. Calling this again
    replaces the previous handler.

    Args:
        level: Log level; defaults to `settings.log_level`
        json_logs: JSON lines instead of console output; defaults to `settings.json_logs`
        settings: Settings to read defaults from (process settings if omitted)
    """
    settings = settings or get_settings()
    level = level or settings.log_level
    json_logs = settings.json_logs if json_logs is None else json_logs

    # JSON lines: structlog hands the event dict to python-json-logger as `extra`
    handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        handler.setFormatter(jsonlogger.JsonFormatter("%(message)s"))
        renderer: Any = structlog.stdlib.render_to_log_kwargs
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    engine_logger = logging.getLogger(ROOT_LOGGER)
    for existing in list(engine_logger.handlers):
        engine_logger.removeHandler(existing)
    engine_logger.addHandler(handler)
    engine_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    engine_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for an engine module (pass `__name__`)."""
    return structlog.get_logger(name)


class LogContext:
    """
    Bind `session_id`, `generation_id` and similar keys to every log line
    emitted in scope, including from nested builders and dispatchers.

    Nesting restores the outer values on exit.
    """

    def __init__(self, **context: Any):
        self.context = {key: value for key, value in context.items() if value is not None}
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
        self._tokens = {}
