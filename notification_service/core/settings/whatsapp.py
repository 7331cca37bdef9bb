"""WhatsApp Business (Cloud API) channel settings.

Environment variables use WHATSAPP_ prefix.
Example: WHATSAPP_ENABLED=true, WHATSAPP_PHONE_NUMBER_ID=1234567890
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class WhatsAppSettings(BaseSettings):
    """WhatsApp Cloud API credentials and delivery policy."""

    enabled: bool = Field(
        default=False,
        description="Enable WhatsApp sending functionality",
    )

    access_token: SecretStr | None = Field(
        default=None,
        description="WhatsApp Business API bearer token",
    )
    phone_number_id: str | None = Field(
        default=None,
        description="Phone number ID registered with the WhatsApp Business account",
    )
    api_base_url: str = Field(
        default="https://graph.facebook.com/v18.0",
        description="Graph API base URL",
    )
    timeout: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="HTTP timeout in seconds",
    )

    max_retries: int = Field(default=2, ge=0, le=10)
    retry_delay: float = Field(default=2.0, ge=0.0, le=300.0)
    retry_backoff: bool = Field(default=True)

    max_per_hour: int = Field(default=30, ge=0)
    max_per_day: int = Field(default=100, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="WHATSAPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def is_configured(self) -> bool:
        """Check if the Cloud API token and phone number ID are present."""
        return bool(self.enabled and self.access_token and self.phone_number_id)
