"""Event routing table and quiet-hours policy.

The store is built once at startup and never mutated afterwards. Lookups are
plain dictionary reads, so concurrent dispatches never contend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from frozendict import frozendict

from notification_service.core.exceptions import ConfigurationError
from notification_service.features.notifications.schemas import Channel, ChannelConfig, Priority

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from notification_service.core.settings import NotificationSettings

_E, _S, _W = Channel.EMAIL, Channel.SMS, Channel.WHATSAPP


def _cfg(channel: Channel, template_id: str, priority: Priority, delay_ms: int = 0, *, enabled: bool = True) -> ChannelConfig:
    return ChannelConfig(channel=channel, enabled=enabled, template_id=template_id, priority=priority, delay_ms=delay_ms)


DEFAULT_EVENTS: frozendict[str, frozendict[Channel, ChannelConfig]] = frozendict(
    {
        "welcome": frozendict(
            {
                _E: _cfg(_E, "welcome", Priority.HIGH),
                _S: _cfg(_S, "welcome", Priority.MEDIUM, 30_000),
                _W: _cfg(_W, "welcome", Priority.LOW, 60_000, enabled=False),
            },
        ),
        "appointmentConfirmation": frozendict(
            {
                _E: _cfg(_E, "appointment-confirmation", Priority.HIGH),
                _S: _cfg(_S, "appointmentConfirmation", Priority.HIGH, 5_000),
                _W: _cfg(_W, "appointmentConfirmation", Priority.MEDIUM, 30_000, enabled=False),
            },
        ),
        "appointmentReminder": frozendict(
            {
                _E: _cfg(_E, "appointment-reminder", Priority.HIGH),
                _S: _cfg(_S, "appointmentReminder", Priority.HIGH),
                _W: _cfg(_W, "appointmentReminder", Priority.MEDIUM, 10_000, enabled=False),
            },
        ),
        "caseUpdate": frozendict(
            {
                _E: _cfg(_E, "case-update", Priority.HIGH),
                _S: _cfg(_S, "caseUpdate", Priority.MEDIUM, 10_000),
                _W: _cfg(_W, "caseUpdate", Priority.MEDIUM, 30_000, enabled=False),
            },
        ),
        "paymentConfirmation": frozendict(
            {
                _E: _cfg(_E, "payment-confirmation", Priority.HIGH),
                _S: _cfg(_S, "paymentConfirmation", Priority.HIGH, 5_000),
                _W: _cfg(_W, "paymentConfirmation", Priority.MEDIUM, 15_000, enabled=False),
            },
        ),
        "documentRequest": frozendict(
            {
                _E: _cfg(_E, "document-request", Priority.MEDIUM),
                _S: _cfg(_S, "documentRequest", Priority.MEDIUM, 30_000),
                _W: _cfg(_W, "documentRequest", Priority.LOW, 60_000, enabled=False),
            },
        ),
        "hearingNotice": frozendict(
            {
                _E: _cfg(_E, "hearing-notice", Priority.CRITICAL),
                _S: _cfg(_S, "hearingNotice", Priority.CRITICAL),
                _W: _cfg(_W, "hearingNotice", Priority.HIGH, 5_000, enabled=False),
            },
        ),
        # Security sensitive: no WhatsApp entry at all
        "passwordReset": frozendict(
            {
                _E: _cfg(_E, "password-reset", Priority.CRITICAL),
                _S: _cfg(_S, "passwordReset", Priority.CRITICAL),
            },
        ),
        "emergencyContact": frozendict(
            {
                _E: _cfg(_E, "emergency-contact", Priority.CRITICAL),
                _S: _cfg(_S, "emergencyContact", Priority.CRITICAL),
                _W: _cfg(_W, "emergencyContact", Priority.CRITICAL),
            },
        ),
    },
)


class EventConfigStore:
    """Read-only ``(event_type, channel) -> ChannelConfig`` lookup.

    Example:
        store = EventConfigStore(DEFAULT_EVENTS)
        store.get_config("welcome", Channel.SMS).delay_ms  # 30000
        store.is_enabled("welcome", Channel.WHATSAPP)  # False
    """

    def __init__(self, events: Mapping[str, Mapping[Channel, ChannelConfig]]) -> None:
        checked: dict[str, frozendict[Channel, ChannelConfig]] = {}
        for event_type, channels in events.items():
            for channel, config in channels.items():
                if config.channel is not Channel(channel):
                    msg = f"{event_type}: config for {channel} declares channel {config.channel}"
                    raise ConfigurationError(msg, extra={"event_type": event_type})
            checked[event_type] = frozendict({Channel(ch): cfg for ch, cfg in channels.items()})
        self._events: frozendict[str, frozendict[Channel, ChannelConfig]] = frozendict(checked)

    def has_event(self, event_type: str) -> bool:
        return event_type in self._events

    def get_config(self, event_type: str, channel: Channel) -> ChannelConfig | None:
        channels = self._events.get(event_type)
        if channels is None:
            return None
        return channels.get(Channel(channel))

    def is_enabled(self, event_type: str, channel: Channel) -> bool:
        config = self.get_config(event_type, channel)
        return config is not None and config.enabled

    def channels_for(self, event_type: str) -> tuple[Channel, ...]:
        """Configured channels for an event in dispatch order (enabled or not)."""
        return Channel.ordered(self._events.get(event_type, ()))

    def enabled_channels(self, event_type: str) -> tuple[Channel, ...]:
        """Channels an event goes out on when the caller names none."""
        return tuple(c for c in self.channels_for(event_type) if self.is_enabled(event_type, c))

    def event_types(self) -> list[str]:
        return list(self._events)

    def with_overrides(self, overrides: Mapping[str, bool]) -> EventConfigStore:
        """Return a new store with ``"<event>.<channel>"`` enable flags applied.

        Overrides for unknown events or channels raise ConfigurationError.
        """
        events = {name: dict(channels) for name, channels in self._events.items()}
        for key, enabled in overrides.items():
            event_type, _, channel_name = key.rpartition(".")
            try:
                channel = Channel(channel_name.lower())
            except ValueError:
                msg = f"Unknown channel in override {key!r}"
                raise ConfigurationError(msg, extra={"override": key}) from None
            config = events.get(event_type, {}).get(channel)
            if config is None:
                msg = f"Override {key!r} does not match a configured event channel"
                raise ConfigurationError(msg, extra={"override": key})
            events[event_type][channel] = ChannelConfig(
                channel=config.channel,
                enabled=enabled,
                template_id=config.template_id,
                priority=config.priority,
                delay_ms=config.delay_ms,
            )
        return EventConfigStore(events)


def build_event_config_store(settings: NotificationSettings | None = None) -> EventConfigStore:
    """Built-in event table with ``settings.channel_overrides`` applied."""
    store = EventConfigStore(DEFAULT_EVENTS)
    if settings is not None and settings.channel_overrides:
        store = store.with_overrides(settings.channel_overrides)
    return store


@dataclass(frozen=True)
class QuietHoursPolicy:
    """Local-time window during which non-exempt notifications are held back.

    The window is half-open, ``[start, end)``, and may wrap midnight
    (22:00-07:00). ``start == end`` is an empty window.
    """

    enabled: bool = False
    start: time = time(22, 0)
    end: time = time(7, 0)
    tz: ZoneInfo = field(default_factory=lambda: ZoneInfo("Africa/Nairobi"))
    exempt_priorities: frozenset[str] = frozenset({Priority.CRITICAL.value})

    @classmethod
    def from_settings(cls, settings: NotificationSettings) -> QuietHoursPolicy:
        return cls(
            enabled=settings.quiet_hours_enabled,
            start=settings.quiet_start_time,
            end=settings.quiet_end_time,
            tz=settings.tzinfo,
            exempt_priorities=frozenset(settings.quiet_hours_exempt_priorities),
        )

    def must_respect(self, priority: Priority | str) -> bool:
        return self.enabled and str(priority).lower() not in self.exempt_priorities

    def is_quiet(self, now: datetime) -> bool:
        if not self.enabled or self.start == self.end:
            return False
        local = now.astimezone(self.tz).time().replace(tzinfo=None)
        if self.start < self.end:
            return self.start <= local < self.end
        return local >= self.start or local < self.end

    def next_available(self, now: datetime) -> datetime:
        """The next end-of-window instant strictly after ``now``."""
        local_now = now.astimezone(self.tz)
        candidate = datetime.combine(local_now.date(), self.end, tzinfo=self.tz)
        if candidate <= local_now:
            candidate = datetime.combine(local_now.date() + timedelta(days=1), self.end, tzinfo=self.tz)
        return candidate

    def should_hold(self, priority: Priority | str, now: datetime) -> datetime | None:
        """Return the resume time when a ``priority`` send must wait, else None."""
        if self.must_respect(priority) and self.is_quiet(now):
            return self.next_available(now)
        return None
