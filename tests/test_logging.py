"""Tests for structured logging configuration."""

import structlog

from src.core.config import settings
from src.core.logging import (
    _add_context_vars,
    _redact_sensitive,
    configure_logging,
    document_context,
    owner_ctx,
    request_id_ctx,
)


def _reset_structlog() -> None:
    """Reset structlog defaults to avoid test cross-talk."""
    structlog.reset_defaults()


def test_configure_logging_uses_json_when_log_format_json() -> None:
    """Use JSON logging when log_format=json, even in development."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "development"
        settings.log_format = "json"
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
        assert any(
            isinstance(processor, structlog.processors.EventRenamer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()


def test_configure_logging_uses_console_when_log_format_console() -> None:
    """Use console logging when log_format=console in development."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "development"
        settings.log_format = "console"
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.dev.ConsoleRenderer)
            for processor in processors
        )
        assert not any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()


def test_sensitive_fields_are_masked() -> None:
    """SSNs and account numbers keep only their last four characters."""
    event = _redact_sensitive(
        None,
        "info",
        {
            "event": "document_generated",
            "employeeSSN": "123-45-6789",
            "accountNumber": "123456789",
            "password": "hunter22",
            "grossPay": "2000.00",
        },
    )

    assert event["employeeSSN"] == "***6789"
    assert event["accountNumber"] == "***6789"
    assert event["password"] == "***"
    assert event["grossPay"] == "2000.00"


def test_document_context_binds_and_resets() -> None:
    """Document type is added inside the block and removed after it."""
    with document_context("paystub"):
        inside = _add_context_vars(None, "info", {"event": "x"})
    outside = _add_context_vars(None, "info", {"event": "x"})

    assert inside["document_type"] == "paystub"
    assert "document_type" not in outside


def test_request_and_owner_context_vars() -> None:
    request_token = request_id_ctx.set("req-1")
    owner_token = owner_ctx.set("user-1")
    try:
        event = _add_context_vars(None, "info", {"event": "x"})
    finally:
        owner_ctx.reset(owner_token)
        request_id_ctx.reset(request_token)

    assert event["request_id"] == "req-1"
    assert event["owner"] == "user-1"
