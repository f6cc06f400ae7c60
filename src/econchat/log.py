"""structlog configuration and per-request log context."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

# SDK loggers that log every HTTP request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "anthropic", "google_genai")


def setup_logging(level: str = "INFO", log_format: str = "console") -> None:
    """Configure structlog once per process. ``log_format`` is ``console`` or ``json``."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    match log_format:
        case "json":
            renderer: Any = structlog.processors.JSONRenderer()
        case _:
            renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.set_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def request_context(**fields: Any) -> Iterator[None]:
    """Bind ``fields`` to every log line emitted inside the block, in this task only."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield
