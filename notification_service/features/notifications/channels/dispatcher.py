"""Main notification dispatcher coordinating all channels."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from notification_service.core.exceptions import (
    TemplateError,
    TemplateNotFoundError,
    TemplateValidationError,
    UnknownEventTypeError,
)
from notification_service.features.notifications.config import QuietHoursPolicy
from notification_service.features.notifications.metrics import (
    notification_channel_outcome_total,
    notification_delivery_duration_seconds,
    notification_dispatched_total,
)
from notification_service.features.notifications.schemas import (
    Channel,
    ChannelOutcome,
    Failed,
    FailureReason,
    NotificationRequest,
    NotificationResult,
    Sent,
    SkipReason,
    Skipped,
)
from notification_service.infra.logging import get_logger, log_context

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Mapping

    from notification_service.features.notifications.channels.base import ChannelSender
    from notification_service.features.notifications.config import EventConfigStore
    from notification_service.features.notifications.schemas import (
        ChannelConfig,
        DeliveryReport,
        Recipient,
    )
    from notification_service.features.notifications.templates import TemplateRenderer
    from notification_service.infra.logging import ContextBoundLogger
    from notification_service.infra.ratelimit import ChannelRateLimiter


def _utcnow() -> datetime:
    return datetime.now(UTC)


class NotificationDispatcher:
    """Fans one business event out to email, SMS and WhatsApp.

    For each requested channel the dispatcher resolves configuration, applies
    skip rules (disabled, missing contact, opt-out, provider unavailable,
    quiet hours, rate limit), then runs every remaining channel as its own
    asyncio task: wait ``delay_ms``, render, deliver with retries. Per-channel
    failures never escape; only an unknown event type is reported at the top
    level of the result.

    Args:
        senders: One sender per channel. Missing channels count as unavailable.
        renderer: Template renderer.
        config_store: Event routing table.
        quiet_hours: Quiet-hours policy (disabled when omitted).
        rate_limiter: Optional per-channel send budget.
        timeout: Seconds to wait for all channel tasks. Channels still running
            afterwards report ``Failed(timeout)`` and finish in the background.
        clock: Returns the current aware datetime.
        sleep: Awaitable used for per-channel delays.
    """

    def __init__(
        self,
        senders: Mapping[Channel, ChannelSender],
        renderer: TemplateRenderer,
        config_store: EventConfigStore,
        *,
        quiet_hours: QuietHoursPolicy | None = None,
        rate_limiter: ChannelRateLimiter | None = None,
        timeout: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._senders = dict(senders)
        self._renderer = renderer
        self._config = config_store
        self._quiet_hours = quiet_hours or QuietHoursPolicy()
        self._rate_limiter = rate_limiter
        self._timeout = timeout
        self._clock = clock
        self._sleep = sleep
        self._logger = get_logger(__name__)
        # Strong references to timed-out tasks until they finish
        self._background: set[asyncio.Task[ChannelOutcome]] = set()

    @property
    def config_store(self) -> EventConfigStore:
        return self._config

    @property
    def renderer(self) -> TemplateRenderer:
        return self._renderer

    @property
    def senders(self) -> dict[Channel, ChannelSender]:
        return dict(self._senders)

    @property
    def background_tasks(self) -> frozenset[asyncio.Task[ChannelOutcome]]:
        return frozenset(self._background)

    async def dispatch(
        self,
        recipient: Recipient,
        event_type: str,
        data: Mapping[str, Any] | None = None,
        *,
        channels: Iterable[Channel | str] | None = None,
    ) -> NotificationResult:
        """Dispatch ``event_type`` to ``recipient``.

        Args:
            recipient: Who to notify.
            event_type: Configured event name, e.g. ``caseUpdate``.
            data: Template variables.
            channels: Restrict or extend the channel set. Defaults to the
                channels enabled for the event; channels named here but
                disabled report Skipped(disabled).

        Returns:
            NotificationResult with exactly one outcome per requested channel,
            or an empty result carrying ``error`` for an unknown event type.
        """
        request = NotificationRequest(
            recipient=recipient,
            event_type=event_type,
            data=data or {},
            channels=tuple(channels) if channels is not None else None,
        )
        return await self.dispatch_request(request)

    async def dispatch_request(self, request: NotificationRequest) -> NotificationResult:
        """Dispatch a prepared request.

        The event type and recipient id are put in the log context for the
        duration, so sender and per-channel task log lines carry them too.
        """
        with log_context(event_type=request.event_type, recipient_id=request.recipient.id):
            return await self._dispatch(request)

    async def _dispatch(self, request: NotificationRequest) -> NotificationResult:
        recipient = request.recipient
        event_type = request.event_type
        log = self._logger.bind(event_type=event_type, recipient_id=recipient.id)

        if not self._config.has_event(event_type):
            error = UnknownEventTypeError(event_type)
            notification_dispatched_total.labels(event_type="unknown").inc()
            log.error(error.detail)
            return NotificationResult(event_type=event_type, recipient_id=recipient.id, error=error.detail)

        notification_dispatched_total.labels(event_type=event_type).inc()

        # Explicitly named channels still report Skipped(disabled)
        if request.channels is not None:
            requested = request.channels
        else:
            requested = self._config.enabled_channels(event_type)
        now = self._clock()
        data = self._template_data(recipient, request.data)

        outcomes: dict[Channel, ChannelOutcome] = {}
        tasks: dict[Channel, asyncio.Task[ChannelOutcome]] = {}

        for channel in requested:
            config = self._config.get_config(event_type, channel)
            skipped = self._check_skip(channel, config, recipient, now, log)
            if skipped is not None:
                outcomes[channel] = skipped
                continue
            destination = recipient.contact_for(channel)
            tasks[channel] = asyncio.create_task(
                self._run_channel(channel, config, destination, data, log),
                name=f"notify:{event_type}:{channel}",
            )

        if tasks:
            log.debug(f"Dispatching to channels: {', '.join(tasks)}")
            done, _pending = await asyncio.wait(tasks.values(), timeout=self._timeout)
            for channel, task in tasks.items():
                if task in done:
                    outcomes[channel] = self._task_outcome(channel, task)
                else:
                    log.warning(
                        f"{channel} did not finish within {self._timeout}s",
                        extra={"channel": str(channel)},
                    )
                    outcomes[channel] = Failed(
                        channel=channel,
                        reason=FailureReason.TIMEOUT,
                        error=f"no outcome within {self._timeout}s",
                    )
                    self._background.add(task)
                    task.add_done_callback(self._background.discard)

        ordered = {channel: outcomes[channel] for channel in requested}
        for outcome in ordered.values():
            notification_channel_outcome_total.labels(
                channel=str(outcome.channel),
                status=str(outcome.status),
                reason=str(outcome.reason) if outcome.reason else "none",
            ).inc()

        result = NotificationResult(event_type=event_type, recipient_id=recipient.id, channels=ordered)
        log.info(
            f"Dispatched {event_type}: {len(result.sent)} sent, "
            f"{len(result.skipped)} skipped, {len(result.failed)} failed",
        )
        return result

    async def dispatch_many(
        self,
        recipients: Iterable[Recipient],
        event_type: str,
        data: Mapping[str, Any] | None = None,
    ) -> list[NotificationResult]:
        """Dispatch the same event to several recipients concurrently."""
        return list(
            await asyncio.gather(
                *(self.dispatch(recipient, event_type, data) for recipient in recipients),
            ),
        )

    def _template_data(self, recipient: Recipient, data: Mapping[str, Any]) -> dict[str, Any]:
        merged = dict(data)
        merged.setdefault("recipient_id", recipient.id)
        for key in ("first_name", "email", "phone"):
            value = getattr(recipient, key)
            if value is not None:
                merged.setdefault(key, value)
        return merged

    def _check_skip(
        self,
        channel: Channel,
        config: ChannelConfig | None,
        recipient: Recipient,
        now: datetime,
        log: ContextBoundLogger,
    ) -> Skipped | None:
        reason: SkipReason | None = None
        scheduled_for: datetime | None = None

        if config is None or not config.enabled:
            reason = SkipReason.DISABLED
        elif recipient.contact_for(channel) is None:
            reason = SkipReason.NO_CONTACT_INFO
        elif not recipient.accepts(channel):
            reason = SkipReason.OPTED_OUT
        elif (sender := self._senders.get(channel)) is None or not sender.available:
            reason = SkipReason.PROVIDER_UNAVAILABLE
        elif (scheduled_for := self._quiet_hours.should_hold(config.priority, now)) is not None:
            reason = SkipReason.QUIET_HOURS
        elif self._rate_limiter is not None:
            allowed, meta = self._rate_limiter.check_limit(str(channel))
            if not allowed:
                reason = SkipReason.RATE_LIMITED
                log.info(
                    f"{channel} rate limited, retry after {meta['retry_after']}s",
                    extra={"channel": str(channel)},
                )

        if reason is None:
            return None
        if reason is not SkipReason.RATE_LIMITED:
            log.info(f"Skipping {channel}: {reason}", extra={"channel": str(channel)})
        return Skipped(channel=channel, reason=reason, scheduled_for=scheduled_for, timestamp=now)

    async def _run_channel(
        self,
        channel: Channel,
        config: ChannelConfig,
        destination: str,
        data: Mapping[str, Any],
        log: ContextBoundLogger,
    ) -> ChannelOutcome:
        log = log.bind(channel=str(channel), template_id=config.template_id)
        try:
            if config.delay_ms:
                await self._sleep(config.delay_ms / 1000)

            content = self._renderer.render(config.template_id, data, channel=channel)

            sender = self._senders[channel]
            with notification_delivery_duration_seconds.labels(channel=str(channel)).time():
                report = await sender.deliver(destination, content)
        except TemplateNotFoundError as exc:
            log.warning(exc.detail)
            return Failed(channel=channel, reason=FailureReason.TEMPLATE_NOT_FOUND, error=exc.detail)
        except TemplateValidationError as exc:
            log.warning(exc.detail, extra={"fields": exc.fields})
            return Failed(
                channel=channel,
                reason=FailureReason.VALIDATION_ERROR,
                error=exc.detail,
                fields=tuple(exc.fields),
            )
        except TemplateError as exc:
            log.warning(exc.detail)
            return Failed(channel=channel, reason=FailureReason.RENDER_ERROR, error=exc.detail)
        except Exception as exc:
            log.exception(f"Unexpected error while sending {channel}")
            return Failed(channel=channel, reason=FailureReason.EXCEPTION, error=f"{type(exc).__name__}: {exc}")

        return self._outcome_from_report(channel, report, log)

    def _outcome_from_report(
        self,
        channel: Channel,
        report: DeliveryReport,
        log: ContextBoundLogger,
    ) -> ChannelOutcome:
        outcome = report.outcome
        if outcome.success:
            return Sent(channel=channel, provider_id=outcome.provider_id, attempts=report.attempts)

        if report.exhausted:
            reason = FailureReason.RETRIES_EXHAUSTED
        elif outcome.code == "invalid-destination":
            reason = FailureReason.INVALID_DESTINATION
        else:
            reason = FailureReason.PROVIDER_ERROR

        log.warning(
            f"{channel} delivery failed after {report.attempts} attempt(s): {outcome.error}",
            extra={"reason": str(reason), "attempts": report.attempts},
        )
        return Failed(
            channel=channel,
            reason=reason,
            error=outcome.error or "unknown error",
            attempts=report.attempts,
        )

    def _task_outcome(self, channel: Channel, task: asyncio.Task[ChannelOutcome]) -> ChannelOutcome:
        if task.cancelled():
            return Failed(channel=channel, reason=FailureReason.EXCEPTION, error="channel task cancelled")
        return task.result()

    async def aclose(self) -> None:
        """Close sender resources that need it (e.g. HTTP clients)."""
        for sender in self._senders.values():
            aclose = getattr(sender, "aclose", None)
            if aclose is not None:
                await aclose()
