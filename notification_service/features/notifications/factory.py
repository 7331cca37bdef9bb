"""Wiring: build a dispatcher from environment settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from notification_service.core.settings import (
    get_email_settings,
    get_notification_settings,
    get_sms_settings,
    get_whatsapp_settings,
)
from notification_service.features.notifications.channels.dispatcher import (
    NotificationDispatcher,
)
from notification_service.features.notifications.channels.email import EmailSender
from notification_service.features.notifications.channels.sms import SmsSender
from notification_service.features.notifications.channels.whatsapp import WhatsAppSender
from notification_service.features.notifications.config import (
    QuietHoursPolicy,
    build_event_config_store,
)
from notification_service.features.notifications.schemas import Channel
from notification_service.features.notifications.templates import TemplateRenderer
from notification_service.infra.ratelimit import DAY, HOUR, ChannelRateLimiter, RateLimit

if TYPE_CHECKING:
    from notification_service.core.settings import (
        EmailSettings,
        NotificationSettings,
        SmsSettings,
        WhatsAppSettings,
    )


def _windows(per_hour: int, per_day: int) -> list[RateLimit]:
    # 0 means unlimited
    return [RateLimit(limit, window) for limit, window in ((per_hour, HOUR), (per_day, DAY)) if limit > 0]


def build_rate_limiter(
    email: EmailSettings,
    sms: SmsSettings,
    whatsapp: WhatsAppSettings,
) -> ChannelRateLimiter:
    return ChannelRateLimiter(
        {
            str(Channel.EMAIL): _windows(email.max_per_hour, email.max_per_day),
            str(Channel.SMS): _windows(sms.max_per_hour, sms.max_per_day),
            str(Channel.WHATSAPP): _windows(whatsapp.max_per_hour, whatsapp.max_per_day),
        },
    )


def build_notification_dispatcher(
    *,
    notification_settings: NotificationSettings | None = None,
    email_settings: EmailSettings | None = None,
    sms_settings: SmsSettings | None = None,
    whatsapp_settings: WhatsAppSettings | None = None,
) -> NotificationDispatcher:
    """Construct a dispatcher with every collaborator built from settings.

    Omitted settings are read through the cached loaders. Configuration is
    resolved here once; the dispatcher only ever sees immutable objects.
    """
    notify = notification_settings or get_notification_settings()
    email = email_settings or get_email_settings()
    sms = sms_settings or get_sms_settings()
    whatsapp = whatsapp_settings or get_whatsapp_settings()

    senders = {
        Channel.EMAIL: EmailSender(email),
        Channel.SMS: SmsSender(sms, country_code=notify.default_country_code),
        Channel.WHATSAPP: WhatsAppSender(whatsapp, country_code=notify.default_country_code),
    }

    return NotificationDispatcher(
        senders=senders,
        renderer=TemplateRenderer(settings=notify, sms_max_length=sms.max_length),
        config_store=build_event_config_store(notify),
        quiet_hours=QuietHoursPolicy.from_settings(notify),
        rate_limiter=build_rate_limiter(email, sms, whatsapp) if notify.rate_limiting_enabled else None,
        timeout=notify.dispatch_timeout_seconds,
    )


# Singleton instance
_dispatcher: NotificationDispatcher | None = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """Get or create the singleton NotificationDispatcher instance."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = build_notification_dispatcher()
    return _dispatcher


def reset_notification_dispatcher() -> None:
    """Forget the singleton so the next call rebuilds it from fresh settings."""
    global _dispatcher
    _dispatcher = None
