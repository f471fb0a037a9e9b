"""Structured logging configuration using structlog.

Form records carry SSNs, EINs and account numbers. Events that include
those keys are masked before rendering so they never reach log output.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import orjson
import structlog
from structlog.types import Processor

from src.core.config import settings

# Context variables for request/session correlation
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
owner_ctx: ContextVar[str | None] = ContextVar("owner", default=None)
document_type_ctx: ContextVar[str | None] = ContextVar("document_type", default=None)

SENSITIVE_KEYS = frozenset(
    {
        "employeeSSN",
        "employee_ssn",
        "employerEIN",
        "employer_ein",
        "accountNumber",
        "account_number",
        "routingNumber",
        "routing_number",
        "password",
    }
)


@contextmanager
def document_context(document_type: str) -> Iterator[None]:
    """Bind a document type to every event logged inside the block."""
    token = document_type_ctx.set(document_type)
    try:
        yield
    finally:
        document_type_ctx.reset(token)


def _mask(value: object) -> str:
    text = str(value)
    return "***" + text[-4:] if len(text) > 4 else "***"


def _redact_sensitive(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask identifiers and secrets, keeping the last four characters."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = "***" if key == "password" else _mask(event_dict[key])
    return event_dict


def _add_context_vars(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add context variables to log events.

    Args:
        logger: The logger instance (unused).
        method_name: The logging method name (unused).
        event_dict: The log event dictionary.

    Returns:
        Updated event dictionary with context variables.
    """
    if request_id := request_id_ctx.get():
        event_dict["request_id"] = request_id
    if owner := owner_ctx.get():
        event_dict["owner"] = owner
    if document_type := document_type_ctx.get():
        event_dict["document_type"] = document_type
    return event_dict


def _orjson_serializer(obj: Any, **kwargs: Any) -> str:
    """Serialize log event to JSON using orjson.

    Decimal values (amounts, rates) are emitted as strings.

    Args:
        obj: Object to serialize.
        **kwargs: Additional keyword arguments (unused).

    Returns:
        JSON string representation.
    """
    return orjson.dumps(obj, default=str).decode("utf-8")


def configure_logging() -> None:
    """Configure structlog for the application.

    Development mode: ConsoleRenderer with colors for readability.
    Production mode: JSONRenderer with orjson for structured logging.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_context_vars,
        _redact_sensitive,
    ]

    log_format = settings.log_format.lower() if settings.log_format else None
    use_json = log_format == "json" or (
        log_format is None and settings.environment != "development"
    )

    if use_json:
        # JSON output with explicit message field for observability tooling.
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_serializer),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging through the same stream
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name. Defaults to __name__ of caller.

    Returns:
        Configured structlog bound logger.
    """
    return structlog.get_logger(name)
