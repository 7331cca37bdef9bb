"""Channel senders and the dispatcher that coordinates them."""

from __future__ import annotations

from notification_service.features.notifications.channels.base import (
    BaseChannelSender,
    ChannelSender,
    build_retry_policy,
)
from notification_service.features.notifications.channels.dispatcher import (
    NotificationDispatcher,
)
from notification_service.features.notifications.channels.email import EmailSender
from notification_service.features.notifications.channels.sms import SmsSender
from notification_service.features.notifications.channels.whatsapp import WhatsAppSender

__all__ = [
    "BaseChannelSender",
    "ChannelSender",
    "EmailSender",
    "NotificationDispatcher",
    "SmsSender",
    "WhatsAppSender",
    "build_retry_policy",
]
