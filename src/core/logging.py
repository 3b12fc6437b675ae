"""Logging and observability configuration using Pydantic Logfire.

This module provides standardized logging utilities and configuration.
All modules should use Python's standard logging library (logging.getLogger(__name__)),
and Logfire will automatically capture and enrich these logs.

Standard usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})

Structured logging utilities:
    log_with_context(logger, "info", "Message", league_id="123", period="this_month")
"""

import logging

import logfire

from src.core.config import settings


def configure_logfire() -> None:
    """Configure Pydantic Logfire with token from environment.

    Records are only shipped when a token is configured; spans and logs are
    still created locally so the service code never has to check.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name="stepleague",
        service_version="0.1.0",
        environment=settings.service_environment,
        send_to_logfire="if-token-present",
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def span(name: str) -> logfire.LogfireSpan:
    """Create a custom span for service layer functions.

    Usage:
        with span("leaderboard_service.get_global_leaderboard"):
            # Your service logic here
            pass
    """
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Log a message with structured context fields.

    Args:
        logger: Logger instance to use
        level: Log level ("debug", "info", "warning", "error", "critical")
        message: Log message
        **context: Additional context fields (user_id, league_id, period, etc.)

    Usage:
        log_with_context(logger, "info", "Leaderboard built", league_id="123", entries=12)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)


def log_with_user_context(
    logger: logging.Logger,
    level: str,
    message: str,
    user_id: str | None = None,
    **extra: object,
) -> None:
    """Log a message with user context.

    Args:
        logger: Logger instance to use
        level: Log level ("debug", "info", "warning", "error", "critical")
        message: Log message
        user_id: User ID to include in context
        **extra: Additional context fields

    Usage:
        log_with_user_context(logger, "info", "Milestone detected", user_id="123", kind="personal_best")
    """
    context = {"user_id": user_id, **extra} if user_id else extra
    log_with_context(logger, level, message, **context)
