"""
Logging Configuration

Structured logging setup using structlog. Every entry carries the
environment and, while a request is being served, its request id.
Buyer contact details never reach the log output in clear.
"""
import logging
import sys
import uuid
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from config.settings import settings

CONTACT_KEYS = ("phone", "email")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["environment"] = settings.environment
    event_dict["service"] = "buyerleads"
    return event_dict


def mask_contact(value: str) -> str:
    """
    Keep the shape of a phone number or email while hiding most of it.

    >>> mask_contact("9876543210")
    '******3210'
    >>> mask_contact("rajesh.kumar@email.com")
    'r***@email.com'
    """
    if "@" in value:
        local, _, domain = value.partition("@")
        return f"{local[:1]}***@{domain}"
    return "*" * max(len(value) - 4, 0) + value[-4:]


def mask_contact_fields(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask phone and email values passed as log keys."""
    for key in CONTACT_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and value:
            event_dict[key] = mask_contact(value)
    return event_dict


def bind_request_context(request_id: Optional[str] = None, **values: Any) -> str:
    """
    Start a fresh logging context for one request.

    Args:
        request_id: Caller supplied id; a new one is generated when absent
        **values: Extra keys to bind (method, path, ...)

    Returns:
        The request id in effect
    """
    request_id = request_id or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **values)
    return request_id


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def setup_logging() -> structlog.BoundLogger:
    """
    Configure structured logging for the application.

    Called once on API startup and by the command-line scripts.

    Returns:
        Configured structlog logger instance
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )
    # SQL statement logging follows database_echo
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        mask_contact_fields,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.processors.ExceptionRenderer())
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Logger for a module, typically ``get_logger(__name__)``."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
