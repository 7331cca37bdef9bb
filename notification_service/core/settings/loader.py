"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process. Every model is frozen, so a loaded instance is never mutated.

Testing:
    In tests, clear the cache to force reload:
    get_notification_settings.cache_clear()

    Or construct settings directly:
    settings = NotificationSettings(quiet_hours_enabled=True)
"""

from __future__ import annotations

from functools import lru_cache

from .email import EmailSettings
from .logs import LoggingSettings
from .notifications import NotificationSettings
from .sms import SmsSettings
from .whatsapp import WhatsAppSettings


@lru_cache(maxsize=1)
def get_email_settings() -> EmailSettings:
    """Get cached email channel settings."""
    return EmailSettings()


@lru_cache(maxsize=1)
def get_sms_settings() -> SmsSettings:
    """Get cached SMS channel settings."""
    return SmsSettings()


@lru_cache(maxsize=1)
def get_whatsapp_settings() -> WhatsAppSettings:
    """Get cached WhatsApp channel settings."""
    return WhatsAppSettings()


@lru_cache(maxsize=1)
def get_notification_settings() -> NotificationSettings:
    """Get cached dispatch policy settings."""
    return NotificationSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance (tests and CLI reloads)."""
    get_email_settings.cache_clear()
    get_sms_settings.cache_clear()
    get_whatsapp_settings.cache_clear()
    get_notification_settings.cache_clear()
    get_logging_settings.cache_clear()
