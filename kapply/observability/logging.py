"""Structured logging for kapply, built on structlog.

kapply is a library first: nothing is configured on import. Hosts call
``setup_logging`` once; until then structlog's defaults apply.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_RENDERERS = {
    "json": structlog.processors.JSONRenderer,
    "console": structlog.dev.ConsoleRenderer,
}


def setup_logging(level: str = "info", fmt: str = "json") -> None:
    """Route kapply's logs to stderr at *level*, rendered as JSON or for a console."""
    if fmt not in _RENDERERS:
        raise ValueError(f"Invalid log format: {fmt}. Must be one of {set(_RENDERERS)}")
    threshold = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            _RENDERERS[fmt](),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    """Logger bound to a component name plus any extra context (e.g. inventory_id)."""
    return structlog.get_logger(component=component, **context)  # type: ignore[return-value]
