"""Value types for notification dispatch.

Everything here is immutable. Channel outcomes form a closed union
(``Sent | Skipped | Failed``) so callers can ``match`` on them exhaustively:

    match result.channels[Channel.SMS]:
        case Sent(provider_id=pid):
            ...
        case Skipped(reason=SkipReason.QUIET_HOURS, scheduled_for=when):
            ...
        case Failed(error=error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from frozendict import frozendict

from notification_service.core.exceptions import UnknownEventTypeError

if TYPE_CHECKING:
    from collections.abc import Mapping


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Channel(StrEnum):
    """Delivery channel. Declaration order is dispatch order."""

    EMAIL = "email"
    SMS = "sms"
    WHATSAPP = "whatsapp"

    @classmethod
    def ordered(cls, channels: Any = None) -> tuple[Channel, ...]:
        """Return ``channels`` (or every channel) in fixed dispatch order."""
        if channels is None:
            return tuple(cls)
        wanted = {cls(c) for c in channels}
        return tuple(c for c in cls if c in wanted)

    @property
    def uses_phone(self) -> bool:
        return self is not Channel.EMAIL


class Priority(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class OutcomeStatus(StrEnum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(StrEnum):
    DISABLED = "disabled"
    NO_CONTACT_INFO = "no_contact_info"
    OPTED_OUT = "opted_out"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    QUIET_HOURS = "quiet_hours"
    RATE_LIMITED = "rate_limited"


class FailureReason(StrEnum):
    TEMPLATE_NOT_FOUND = "template_not_found"
    VALIDATION_ERROR = "validation_error"
    RENDER_ERROR = "render_error"
    INVALID_DESTINATION = "invalid_destination"
    PROVIDER_ERROR = "provider_error"
    RETRIES_EXHAUSTED = "retries_exhausted"
    TIMEOUT = "timeout"
    EXCEPTION = "exception"


# --------------------------------------------------------------------------
# Requests and configuration
# --------------------------------------------------------------------------


@dataclass(frozen=True)
class Recipient:
    """Who a notification is addressed to.

    Attributes:
        id: Caller-side user identifier, echoed into the result.
        first_name: Used for greetings when templates ask for it.
        email: Destination for the email channel.
        phone: Destination for SMS and WhatsApp, in any local or E.164 form.
        preferred_channels: Channels the recipient accepts; None accepts all.
    """

    id: str
    first_name: str | None = None
    email: str | None = None
    phone: str | None = None
    preferred_channels: frozenset[Channel] | None = None

    def __post_init__(self) -> None:
        if self.preferred_channels is not None:
            object.__setattr__(
                self,
                "preferred_channels",
                frozenset(Channel(c) for c in self.preferred_channels),
            )

    def contact_for(self, channel: Channel) -> str | None:
        value = self.phone if channel.uses_phone else self.email
        if value is None or not value.strip():
            return None
        return value.strip()

    def accepts(self, channel: Channel) -> bool:
        return self.preferred_channels is None or channel in self.preferred_channels


@dataclass(frozen=True)
class NotificationRequest:
    """One business event addressed to one recipient."""

    recipient: Recipient
    event_type: str
    data: Mapping[str, Any] = field(default_factory=frozendict)
    channels: tuple[Channel, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", frozendict(self.data or {}))
        if self.channels is not None:
            object.__setattr__(self, "channels", Channel.ordered(self.channels))


@dataclass(frozen=True)
class ChannelConfig:
    """Per-(event, channel) routing entry."""

    channel: Channel
    enabled: bool
    template_id: str
    priority: Priority = Priority.MEDIUM
    delay_ms: int = 0

    def __post_init__(self) -> None:
        if self.delay_ms < 0:
            msg = f"delay_ms must be >= 0, got {self.delay_ms}"
            raise ValueError(msg)


# --------------------------------------------------------------------------
# Rendered content
# --------------------------------------------------------------------------


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class SmsContent:
    text: str
    length: int
    max_length: int
    exceeds_max_length: bool = False


@dataclass(frozen=True)
class ChatContent:
    """Plain chat-style text used by WhatsApp."""

    text: str
    length: int


RenderedContent = EmailContent | SmsContent | ChatContent


# --------------------------------------------------------------------------
# Provider results
# --------------------------------------------------------------------------


@dataclass(frozen=True)
class SendOutcome:
    """Result of a single provider call.

    ``code`` is a machine-readable failure class (e.g. ``invalid-destination``)
    when the sender can name one.
    """

    success: bool
    provider_id: str | None = None
    error: str | None = None
    retryable: bool = False
    code: str | None = None

    @classmethod
    def ok(cls, provider_id: str | None) -> SendOutcome:
        return cls(success=True, provider_id=provider_id)

    @classmethod
    def failure(cls, error: str, *, retryable: bool, code: str | None = None) -> SendOutcome:
        return cls(success=False, error=error, retryable=retryable, code=code)


@dataclass(frozen=True)
class DeliveryReport:
    """Everything the retry policy observed while delivering one channel."""

    outcome: SendOutcome
    attempts: int
    retries: int = 0
    exhausted: bool = False
    errors: tuple[str, ...] = ()
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.outcome.success


# --------------------------------------------------------------------------
# Channel outcomes
# --------------------------------------------------------------------------


@dataclass(frozen=True)
class Sent:
    channel: Channel
    provider_id: str | None = None
    attempts: int = 1
    timestamp: datetime = field(default_factory=_utcnow)

    status: ClassVar[OutcomeStatus] = OutcomeStatus.SENT
    reason: ClassVar[str | None] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": str(self.channel),
            "status": str(self.status),
            "provider_id": self.provider_id,
            "attempts": self.attempts,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class Skipped:
    channel: Channel
    reason: SkipReason
    scheduled_for: datetime | None = None
    timestamp: datetime = field(default_factory=_utcnow)

    status: ClassVar[OutcomeStatus] = OutcomeStatus.SKIPPED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "channel": str(self.channel),
            "status": str(self.status),
            "reason": str(self.reason),
            "timestamp": self.timestamp.isoformat(),
        }
        if self.scheduled_for is not None:
            data["scheduled_for"] = self.scheduled_for.isoformat()
        return data


@dataclass(frozen=True)
class Failed:
    channel: Channel
    reason: FailureReason
    error: str
    attempts: int = 0
    fields: tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=_utcnow)

    status: ClassVar[OutcomeStatus] = OutcomeStatus.FAILED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "channel": str(self.channel),
            "status": str(self.status),
            "reason": str(self.reason),
            "error": self.error,
            "attempts": self.attempts,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.fields:
            data["fields"] = list(self.fields)
        return data


ChannelOutcome = Sent | Skipped | Failed


@dataclass(frozen=True)
class NotificationResult:
    """Aggregate of every channel outcome for one dispatch.

    ``error`` is set only when the event type is unknown; ``channels`` is then
    empty.
    """

    event_type: str
    recipient_id: str
    channels: Mapping[Channel, ChannelOutcome] = field(default_factory=frozendict)
    error: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "channels", frozendict(self.channels))

    def _with_status(self, status: OutcomeStatus) -> dict[Channel, ChannelOutcome]:
        return {ch: out for ch, out in self.channels.items() if out.status is status}

    @property
    def sent(self) -> dict[Channel, ChannelOutcome]:
        return self._with_status(OutcomeStatus.SENT)

    @property
    def skipped(self) -> dict[Channel, ChannelOutcome]:
        return self._with_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> dict[Channel, ChannelOutcome]:
        return self._with_status(OutcomeStatus.FAILED)

    @property
    def ok(self) -> bool:
        """True when the event was known and no channel failed."""
        return self.error is None and not self.failed

    @property
    def any_sent(self) -> bool:
        return bool(self.sent)

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise UnknownEventTypeError(self.event_type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "recipient_id": self.recipient_id,
            "timestamp": self.timestamp.isoformat(),
            "error": self.error,
            "channels": {str(ch): out.to_dict() for ch, out in self.channels.items()},
        }
