"""Unit tests for notification settings models."""
from __future__ import annotations

from datetime import time

import pytest
from pydantic import SecretStr, ValidationError

from notification_service.core.settings import (
    EmailSettings,
    NotificationSettings,
    SmsSettings,
    WhatsAppSettings,
    get_notification_settings,
    parse_hhmm,
)


@pytest.mark.unit
class TestNotificationSettings:
    """Test suite for NotificationSettings."""

    def test_defaults(self):
        settings = NotificationSettings()

        assert settings.quiet_hours_enabled is False
        assert settings.quiet_start_time == time(22, 0)
        assert settings.quiet_end_time == time(7, 0)
        assert settings.timezone == "Africa/Nairobi"
        assert settings.quiet_hours_exempt_priorities == ["critical"]
        assert settings.dispatch_timeout_seconds is None
        assert settings.default_country_code == "254"

    def test_frozen(self):
        settings = NotificationSettings()

        with pytest.raises(ValidationError):
            settings.quiet_hours_enabled = True

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("NOTIFY_QUIET_HOURS_ENABLED", "true")
        monkeypatch.setenv("NOTIFY_QUIET_HOURS_START", "21:30")
        monkeypatch.setenv("NOTIFY_CHANNEL_OVERRIDES", '{"welcome.sms": false}')

        settings = get_notification_settings()

        assert settings.quiet_hours_enabled is True
        assert settings.quiet_start_time == time(21, 30)
        assert settings.channel_overrides == {"welcome.sms": False}

    @pytest.mark.parametrize("value", ["24:00", "7:00", "noon", "22:60"])
    def test_invalid_quiet_hours(self, value):
        with pytest.raises(ValidationError):
            NotificationSettings(quiet_hours_start=value)

    def test_invalid_timezone(self):
        with pytest.raises(ValidationError):
            NotificationSettings(timezone="Mars/Olympus_Mons")

    def test_exempt_priorities_normalized(self):
        settings = NotificationSettings(quiet_hours_exempt_priorities=[" Critical ", "HIGH", ""])
        assert settings.quiet_hours_exempt_priorities == ["critical", "high"]

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            NotificationSettings(dispatch_timeout_seconds=0)


@pytest.mark.unit
class TestParseHHMM:
    def test_parses(self):
        assert parse_hhmm("07:05") == time(7, 5)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_hhmm("7am")


@pytest.mark.unit
class TestChannelSettings:
    """Test suite for provider settings."""

    def test_email_defaults(self):
        settings = EmailSettings(enabled=True)

        assert settings.smtp_port == 587
        assert settings.max_retries == 3
        assert settings.retry_delay == 5.0
        assert settings.max_per_hour == 100
        assert settings.max_per_day == 1000
        assert settings.is_configured is False

    def test_email_configured(self):
        settings = EmailSettings(enabled=True, smtp_host="smtp.example.com")
        assert settings.is_configured is True
        assert settings.get_smtp_url() == "smtp://smtp.example.com:587"

    def test_email_tls_ssl_exclusive(self):
        with pytest.raises(ValidationError):
            EmailSettings(use_tls=True, use_ssl=True)

    def test_email_auth_pair(self):
        with pytest.raises(ValidationError):
            EmailSettings(smtp_username="user")

    def test_sms_defaults(self):
        settings = SmsSettings(enabled=True)

        assert settings.max_length == 160
        assert settings.max_retries == 3
        assert settings.retry_delay == 3.0
        assert (settings.max_per_hour, settings.max_per_day) == (50, 200)
        assert settings.is_configured is False

    def test_sms_configured(self):
        settings = SmsSettings(
            enabled=True,
            twilio_account_sid="AC123",
            twilio_auth_token=SecretStr("secret"),
            from_number="+15550001111",
        )
        assert settings.is_configured is True

    def test_whatsapp_defaults(self):
        settings = WhatsAppSettings(enabled=True)

        assert settings.api_base_url == "https://graph.facebook.com/v18.0"
        assert settings.max_retries == 2
        assert settings.retry_delay == 2.0
        assert (settings.max_per_hour, settings.max_per_day) == (30, 100)
        assert settings.is_configured is False
