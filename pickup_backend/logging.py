"""
Logging for the pickup backend (structlog over stdlib logging).

Application events and uvicorn's own records go through one handler, so both
come out as console lines in development or JSON lines in production.
Events about one day of routes carry venue_id and business_date through
ledger_context() instead of repeating them at every call.
"""

import logging
import sys
from datetime import date
from typing import Any, ContextManager

import structlog


def _isoformat_dates(_logger: Any, _method: str, event_dict: dict) -> dict:
    """date/datetime values -> ISO strings (business dates are logged as plain dates)."""
    for key, value in event_dict.items():
        if isinstance(value, date):
            event_dict[key] = value.isoformat()
    return event_dict


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _isoformat_dates,
    ]
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Records from uvicorn/fastapi (plain stdlib) get the same processors.
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


def ledger_context(venue_id: str, business_date: date) -> ContextManager:
    """Bind venue_id and business_date to every event logged inside the block."""
    return structlog.contextvars.bound_contextvars(venue_id=venue_id, business_date=business_date)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
