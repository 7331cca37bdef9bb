"""Pydantic Settings v2 configuration, one model per concern.

Import settings via cached loaders:
    from notification_service.core.settings import get_notification_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .email import EmailSettings
from .loader import (
    clear_settings_cache,
    get_email_settings,
    get_logging_settings,
    get_notification_settings,
    get_sms_settings,
    get_whatsapp_settings,
)
from .logs import LoggingSettings
from .notifications import NotificationSettings, parse_hhmm
from .sms import SmsSettings
from .whatsapp import WhatsAppSettings

__all__ = [
    "EmailSettings",
    "LoggingSettings",
    "NotificationSettings",
    "SmsSettings",
    "WhatsAppSettings",
    "clear_settings_cache",
    "get_email_settings",
    "get_logging_settings",
    "get_notification_settings",
    "get_sms_settings",
    "get_whatsapp_settings",
    "parse_hhmm",
]
