"""SMS channel settings for Twilio delivery.

Environment variables use SMS_ prefix.
Example: SMS_ENABLED=true, SMS_TWILIO_ACCOUNT_SID=AC123
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SmsSettings(BaseSettings):
    """Twilio credentials, message limits and retry policy for the SMS channel."""

    enabled: bool = Field(
        default=False,
        description="Enable SMS sending functionality",
    )

    twilio_account_sid: str | None = Field(
        default=None,
        description="Twilio account SID",
    )
    twilio_auth_token: SecretStr | None = Field(
        default=None,
        description="Twilio auth token",
    )
    from_number: str | None = Field(
        default=None,
        description="Sender phone number in E.164 format",
    )

    max_length: int = Field(
        default=160,
        ge=1,
        le=1600,
        description="Single-segment SMS length; longer messages log a warning",
    )

    max_retries: int = Field(default=3, ge=0, le=10)
    retry_delay: float = Field(default=3.0, ge=0.0, le=300.0)
    retry_backoff: bool = Field(default=True)

    max_per_hour: int = Field(default=50, ge=0)
    max_per_day: int = Field(default=200, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="SMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def is_configured(self) -> bool:
        """Check if Twilio credentials are present."""
        return bool(
            self.enabled
            and self.twilio_account_sid
            and self.twilio_auth_token
            and self.from_number,
        )
