"""Email channel settings for SMTP delivery.

Environment variables use EMAIL_ prefix.
Example: EMAIL_ENABLED=true, EMAIL_SMTP_HOST=smtp.example.com
"""

from __future__ import annotations

from pydantic import EmailStr, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmailSettings(BaseSettings):
    """SMTP provider, retry and rate limit configuration for the email channel.

    Environment variables use EMAIL_ prefix.
    Example: EMAIL_SMTP_HOST=smtp.gmail.com, EMAIL_SMTP_PORT=587
    """

    # Feature toggle
    enabled: bool = Field(
        default=False,
        description="Enable email sending functionality",
    )

    # SMTP Configuration
    smtp_host: str | None = Field(
        default=None,
        max_length=255,
        description="SMTP server hostname",
    )
    smtp_port: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP server port (587 for TLS, 465 for SSL, 25 for plain)",
    )
    smtp_username: str | None = Field(
        default=None,
        max_length=255,
        description="SMTP authentication username",
    )
    smtp_password: SecretStr | None = Field(
        default=None,
        description="SMTP authentication password",
    )

    # TLS/SSL Configuration
    use_tls: bool = Field(
        default=True,
        description="Use STARTTLS (port 587). Set False for SSL (port 465) or plain (port 25)",
    )
    use_ssl: bool = Field(
        default=False,
        description="Use implicit SSL/TLS (port 465). Mutually exclusive with use_tls",
    )

    # Sender Configuration
    from_email: EmailStr = Field(
        default="noreply@legalpro.co.ke",
        description="Default sender email address",
    )
    from_name: str = Field(
        default="LegalPro",
        max_length=100,
        description="Default sender display name",
    )

    # Delivery Settings
    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="SMTP connection timeout in seconds",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum retry attempts after the first failed send",
    )
    retry_delay: float = Field(
        default=5.0,
        ge=0.0,
        le=300.0,
        description="Base delay between retry attempts in seconds",
    )
    retry_backoff: bool = Field(
        default=True,
        description="Double the retry delay after each attempt",
    )

    # Rate Limiting
    max_per_hour: int = Field(
        default=100,
        ge=0,
        description="Maximum emails per hour (0 = unlimited)",
    )
    max_per_day: int = Field(
        default=1000,
        ge=0,
        description="Maximum emails per day (0 = unlimited)",
    )

    @model_validator(mode="after")
    def validate_tls_ssl_exclusive(self) -> EmailSettings:
        """Ensure TLS and SSL are mutually exclusive."""
        if self.use_tls and self.use_ssl:
            msg = "use_tls and use_ssl are mutually exclusive"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def validate_smtp_auth(self) -> EmailSettings:
        """Require username and password together."""
        has_username = self.smtp_username is not None
        has_password = self.smtp_password is not None
        if has_username != has_password:
            msg = "Both smtp_username and smtp_password must be provided together"
            raise ValueError(msg)
        return self

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def is_configured(self) -> bool:
        """Check if email is properly configured for sending."""
        return self.enabled and bool(self.smtp_host)

    @property
    def requires_auth(self) -> bool:
        """Check if SMTP authentication is configured."""
        return self.smtp_username is not None and self.smtp_password is not None

    def get_smtp_url(self) -> str:
        """Get SMTP URL for debugging (without password)."""
        scheme = "smtps" if self.use_ssl else "smtp"
        auth = f"{self.smtp_username}@" if self.smtp_username else ""
        return f"{scheme}://{auth}{self.smtp_host}:{self.smtp_port}"
