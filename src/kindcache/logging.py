"""
Structured logging for kindcache.

Every module logs through ``get_logger(__name__)`` with snake_case event
names and key/value context::

    logger.debug("kind_conflict", key="orders", expected="set", actual="list")
    logger.warning("endpoint_unreachable", host="replica-1", port=6380, error="...")

Nothing is configured on import. Applications that already set up structlog
keep their own pipeline; others call ``configure_logging()`` once at startup.

Events emitted by this package:
    connection_configured, connection_materialized, connection_closed,
    endpoint_unreachable, no_endpoint_answered, connection_failed,
    kind_conflict, expiry_applied, list_elements_removed

Tags:
    logging, structlog, observability, kindcache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from kindcache.errors import CacheError
from kindcache.settings import get_settings


def _service_metadata(service: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service


def expand_cache_errors(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Render any ``CacheError`` value in the event as its ``to_dict()`` form."""
    for name, value in list(event_dict.items()):
        if isinstance(value, CacheError):
            event_dict[name] = value.to_dict()
    return event_dict


def configure_logging(
    level: str | None = None,
    *,
    json_format: bool | None = None,
    service: str = "kindcache",
    add_timestamp: bool = True,
) -> None:
    """Route structlog through the stdlib root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR; ``None`` uses
            ``CacheSettings.log_level``.
        json_format: JSON lines when True, colored console when False,
            JSON unless stdout is a terminal when None.
        service: Value of the ``service.name`` field.
        add_timestamp: Prefix events with an ISO timestamp.
    """
    numeric_level = getattr(logging, (level or get_settings().log_level).upper())
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _service_metadata(service),
        expand_cache_errors,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))
    processors.append(
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    """Structured logger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


__all__ = ["configure_logging", "expand_cache_errors", "get_logger"]
