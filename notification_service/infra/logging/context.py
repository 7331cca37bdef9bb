"""Context management for structured logging.

Provides automatic context injection into log records using contextvars,
so identifiers such as event_type or recipient_id are included in every log
line emitted while a dispatch is in flight.

Each asyncio task gets its own copy of the context, so per-channel tasks
spawned by the dispatcher inherit the dispatch context without leaking
their own additions back to siblings.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

# Each async task gets its own copy automatically
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> Token[dict[str, Any]]:
    """Add fields to the logging context of the current async task/thread.

    Returns a token for :func:`reset_log_context`.

    Example:
        ```python
        set_log_context(event_type="welcome", recipient_id="u-1")
        logger.info("Dispatching")  # Includes event_type and recipient_id
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    return _log_context.set(current)


def reset_log_context(token: Token[dict[str, Any]]) -> None:
    """Restore the context that was current before ``token`` was issued."""
    _log_context.reset(token)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return _log_context.get().copy()


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Scope fields to a block; tasks created inside inherit them."""
    token = set_log_context(**kwargs)
    try:
        yield
    finally:
        reset_log_context(token)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that injects the contextvars log context into LogRecords.

    Attached to the queue handler, so records from every logger pick it up.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = _log_context.get()

        for key, value in context.items():
            # Don't overwrite existing attributes
            if not hasattr(record, key):
                setattr(record, key, value)

        return True


class ContextBoundLogger(logging.LoggerAdapter):
    """Logger adapter that binds permanent context to a logger instance.

    Example:
        ```python
        logger = ContextBoundLogger(logging.getLogger(__name__), channel="sms")
        logger.info("Sending")  # Always includes channel

        retry_logger = logger.bind(attempt=2)
        ```
    """

    def __init__(self, logger: logging.Logger, **context: Any) -> None:
        super().__init__(logger, context)

    def bind(self, **context: Any) -> ContextBoundLogger:
        """Create new logger with additional bound context."""
        merged = {**self.extra, **context}
        return ContextBoundLogger(self.logger, **merged)

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        kwargs["extra"] = {**self.extra, **extra}
        return msg, kwargs


def get_logger(name: str, **context: Any) -> ContextBoundLogger:
    """Get logger with bound context.

    Example:
        ```python
        logger = get_logger(__name__, channel="email")
        logger.info("Email sent", extra={"provider_id": "<abc@host>"})
        ```
    """
    return ContextBoundLogger(logging.getLogger(name), **context)
