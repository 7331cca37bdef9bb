"""Logging infrastructure.

Structured logging with:
- JSONL format for log aggregation
- Automatic context injection (event_type, recipient_id, ...)
- QueueHandler + QueueListener for non-blocking I/O

Basic usage:
    from notification_service.infra.logging import log_context
    import logging

    logger = logging.getLogger(__name__)

    with log_context(event_type="welcome", recipient_id="u-1"):
        logger.info("Dispatching")  # Includes event_type and recipient_id
"""

from notification_service.infra.logging.config import (
    configure_logging,
    setup_logging,
    shutdown,
)
from notification_service.infra.logging.context import (
    ContextBoundLogger,
    ContextInjectingFilter,
    get_log_context,
    get_logger,
    log_context,
    reset_log_context,
    set_log_context,
)
from notification_service.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextBoundLogger",
    "ContextInjectingFilter",
    "JSONFormatter",
    "configure_logging",
    "get_log_context",
    "get_logger",
    "log_context",
    "reset_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
