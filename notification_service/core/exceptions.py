"""Custom exception classes for the notification engine.

Only configuration errors ever escape ``dispatch``. Template and provider
errors are raised inside a channel and converted into that channel's
``Failed`` outcome by the dispatcher.
"""

from __future__ import annotations

from typing import Any


class NotificationError(Exception):
    """Base notification exception.

    All custom exceptions inherit from this class.

    Attributes:
        detail: Human-readable error message.
        code: Machine-readable error identifier.
        extra: Additional context-specific information about the error.

    Example:
        raise NotificationError(
            detail="Something went wrong",
            code="internal-error",
            extra={"event_type": "welcome"},
        )
    """

    code: str = "notification-error"

    def __init__(
        self,
        detail: str,
        code: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize notification exception.

        Args:
            detail: Human-readable error message.
            code: Error type identifier (defaults to the class code).
            extra: Additional context about the error.
        """
        self.detail = detail
        if code is not None:
            self.code = code
        self.extra = extra or {}
        super().__init__(detail)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logs and API error bodies."""
        return {"code": self.code, "detail": self.detail, **self.extra}


class ConfigurationError(NotificationError):
    """Raised when dispatch configuration is missing or invalid."""

    code = "configuration-error"


class UnknownEventTypeError(ConfigurationError):
    """Raised when an event type has no channel configuration at all.

    Example:
        raise UnknownEventTypeError("doesNotExist")
    """

    code = "unknown-event-type"

    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__(
            detail=f"Unknown event type: {event_type}",
            extra={"event_type": event_type},
        )


class TemplateError(NotificationError):
    """Base class for template lookup, validation and rendering failures."""

    code = "template-error"

    def __init__(
        self,
        detail: str,
        template_id: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.template_id = template_id
        merged = {"template_id": template_id, **(extra or {})}
        super().__init__(detail=detail, extra=merged)


class TemplateNotFoundError(TemplateError):
    """Raised when a template id is not registered for a channel."""

    code = "template-not-found"

    def __init__(self, template_id: str, channel: str | None = None) -> None:
        self.channel = channel
        where = f" for channel {channel}" if channel else ""
        super().__init__(
            detail=f"Template '{template_id}' not found{where}",
            template_id=template_id,
            extra={"channel": channel},
        )


class TemplateValidationError(TemplateError):
    """Raised when required template data is missing or invalid.

    Attributes:
        fields: Names of the missing or invalid fields, in template order.
    """

    code = "template-validation-error"

    def __init__(
        self,
        template_id: str,
        missing: list[str] | None = None,
        invalid: list[str] | None = None,
    ) -> None:
        self.missing = list(missing or [])
        self.invalid = list(invalid or [])
        self.fields = [*self.missing, *self.invalid]
        parts = []
        if self.missing:
            parts.append(f"missing: {', '.join(self.missing)}")
        if self.invalid:
            parts.append(f"invalid: {', '.join(self.invalid)}")
        super().__init__(
            detail=f"Template '{template_id}' data failed validation ({'; '.join(parts)})",
            template_id=template_id,
            extra={"missing": self.missing, "invalid": self.invalid},
        )


class TemplateRenderError(TemplateError):
    """Raised when Jinja2 fails to compile or render a template."""

    code = "template-render-error"


class ProviderError(NotificationError):
    """Raised by channel providers to signal a classified delivery failure.

    Attributes:
        retryable: Whether the retry policy may attempt the send again.
    """

    code = "provider-error"

    def __init__(
        self,
        detail: str,
        retryable: bool,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.retryable = retryable
        super().__init__(detail=detail, extra={"retryable": retryable, **(extra or {})})


class InvalidDestinationError(ProviderError):
    """Raised when a destination cannot be addressed by the channel."""

    code = "invalid-destination"

    def __init__(self, destination: str, reason: str) -> None:
        self.destination = destination
        super().__init__(
            detail=f"Invalid destination {destination!r}: {reason}",
            retryable=False,
        )


__all__ = [
    "ConfigurationError",
    "InvalidDestinationError",
    "NotificationError",
    "ProviderError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "TemplateValidationError",
    "UnknownEventTypeError",
]
