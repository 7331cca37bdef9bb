"""Base protocol and shared behaviour for channel senders."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from notification_service.core.exceptions import InvalidDestinationError, ProviderError
from notification_service.features.notifications.metrics import (
    notification_retry_attempts_total,
)
from notification_service.features.notifications.schemas import (
    Channel,
    DeliveryReport,
    RenderedContent,
    SendOutcome,
)
from notification_service.infra.logging import get_logger
from notification_service.utils.retry import RetryPolicy

if TYPE_CHECKING:
    from notification_service.core.settings import EmailSettings, SmsSettings, WhatsAppSettings

PROVIDER_UNAVAILABLE = "provider_unavailable"


@runtime_checkable
class ChannelSender(Protocol):
    """Protocol for channel-specific senders.

    Each channel (email, sms, whatsapp) implements this protocol so the
    dispatcher can treat providers uniformly.
    """

    channel: Channel

    @property
    def available(self) -> bool:
        """False once the sender has disabled itself."""
        ...

    async def send(self, destination: str, content: RenderedContent) -> SendOutcome:
        """Make exactly one provider call."""
        ...

    async def deliver(self, destination: str, content: RenderedContent) -> DeliveryReport:
        """Send with the sender's retry policy applied."""
        ...


def build_retry_policy(settings: EmailSettings | SmsSettings | WhatsAppSettings) -> RetryPolicy:
    return RetryPolicy(
        max_retries=settings.max_retries,
        base_delay=settings.retry_delay,
        exponential=settings.retry_backoff,
    )


class BaseChannelSender(ABC):
    """Shared send/deliver plumbing.

    Subclasses implement ``_send`` (one provider call returning the provider
    message id) and may override ``prepare_destination`` and
    ``is_retryable``. ``send`` never raises: every failure is folded into a
    ``SendOutcome`` classified as retryable or terminal.
    """

    channel: ClassVar[Channel]

    def __init__(self, retry_policy: RetryPolicy | None = None) -> None:
        self.retry_policy = retry_policy or RetryPolicy()
        self._disabled_reason: str | None = None
        self._logger = get_logger(__name__, channel=str(self.channel))

    @property
    def available(self) -> bool:
        return self._disabled_reason is None

    @property
    def disabled_reason(self) -> str | None:
        return self._disabled_reason

    def disable(self, reason: str) -> None:
        """Mark the sender permanently unavailable."""
        self._disabled_reason = reason
        self._logger.warning(f"{self.channel} sender disabled: {reason}")

    def prepare_destination(self, destination: str) -> str:
        """Return the canonical destination or raise InvalidDestinationError."""
        cleaned = destination.strip()
        if not cleaned:
            raise InvalidDestinationError(destination, "empty destination")
        return cleaned

    def is_retryable(self, exc: Exception) -> bool:
        """Classify an unexpected provider exception.

        Network trouble is retryable: OSError covers ConnectionError,
        TimeoutError and DNS failures.
        """
        return isinstance(exc, OSError)

    @abstractmethod
    async def _send(self, destination: str, content: RenderedContent) -> str | None:
        """Perform one provider call and return the provider message id."""

    async def send(self, destination: str, content: RenderedContent) -> SendOutcome:
        if not self.available:
            return SendOutcome.failure(PROVIDER_UNAVAILABLE, retryable=False, code=PROVIDER_UNAVAILABLE)

        try:
            prepared = self.prepare_destination(destination)
        except InvalidDestinationError as exc:
            self._logger.warning(exc.detail)
            return SendOutcome.failure(exc.detail, retryable=False, code=exc.code)

        try:
            provider_id = await self._send(prepared, content)
        except ProviderError as exc:
            self._logger.warning(
                f"{self.channel} provider error: {exc.detail}",
                extra={"retryable": exc.retryable, "error_code": exc.code},
            )
            return SendOutcome.failure(exc.detail, retryable=exc.retryable, code=exc.code)
        except Exception as exc:
            retryable = self.is_retryable(exc)
            self._logger.warning(
                f"{self.channel} send raised {type(exc).__name__}: {exc}",
                extra={"retryable": retryable},
            )
            return SendOutcome.failure(f"{type(exc).__name__}: {exc}", retryable=retryable)

        self._logger.info(
            f"{self.channel} message accepted by provider",
            extra={"provider_id": provider_id},
        )
        return SendOutcome.ok(provider_id)

    async def deliver(self, destination: str, content: RenderedContent) -> DeliveryReport:
        def _count_retry(outcome: SendOutcome, retry: int, delay: float) -> None:
            notification_retry_attempts_total.labels(channel=str(self.channel)).inc()

        result = await self.retry_policy.execute(
            lambda: self.send(destination, content),
            name=f"{self.channel}.send",
            on_retry=_count_retry,
        )
        return DeliveryReport(
            outcome=result.outcome,
            attempts=result.attempts,
            retries=result.retries,
            exhausted=result.exhausted,
            errors=tuple(result.statistics.errors),
            duration=result.statistics.duration,
        )
