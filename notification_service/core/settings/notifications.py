"""Dispatch policy settings: quiet hours, timeouts, channel toggles, branding.

Environment variables use NOTIFY_ prefix.
Example: NOTIFY_QUIET_HOURS_ENABLED=true, NOTIFY_QUIET_HOURS_START=22:00
Channel toggles are JSON: NOTIFY_CHANNEL_OVERRIDES='{"welcome.sms": false}'
"""

from __future__ import annotations

import re
from datetime import time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str) -> time:
    """Parse a ``HH:MM`` local-time string."""
    match = _HHMM_RE.match(value)
    if match is None:
        msg = f"Expected HH:MM (24h), got {value!r}"
        raise ValueError(msg)
    return time(int(match.group(1)), int(match.group(2)))


class NotificationSettings(BaseSettings):
    """Global notification dispatch policy."""

    # ──────────────────────────────────────────────────────────────
    # Quiet hours
    # ──────────────────────────────────────────────────────────────

    quiet_hours_enabled: bool = Field(
        default=False,
        description="Skip non-exempt notifications during the quiet-hours window",
    )
    quiet_hours_start: str = Field(
        default="22:00",
        description="Quiet hours start, local time HH:MM",
    )
    quiet_hours_end: str = Field(
        default="07:00",
        description="Quiet hours end, local time HH:MM (exclusive)",
    )
    timezone: str = Field(
        default="Africa/Nairobi",
        description="IANA timezone the quiet-hours window is expressed in",
    )
    quiet_hours_exempt_priorities: list[str] = Field(
        default_factory=lambda: ["critical"],
        description="Priorities that are delivered even during quiet hours",
    )

    # ──────────────────────────────────────────────────────────────
    # Dispatch
    # ──────────────────────────────────────────────────────────────

    dispatch_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Upper bound on how long dispatch waits for all channels (None = wait)",
    )
    channel_overrides: dict[str, bool] = Field(
        default_factory=dict,
        description='Per event/channel enable flags keyed "<event>.<channel>"',
    )
    rate_limiting_enabled: bool = Field(
        default=True,
        description="Enforce per-channel hourly/daily send budgets",
    )
    default_country_code: str = Field(
        default="254",
        pattern=r"^\d{1,3}$",
        description="Country calling code used to normalize local phone numbers",
    )

    # ──────────────────────────────────────────────────────────────
    # Branding (default template context)
    # ──────────────────────────────────────────────────────────────

    company_name: str = Field(default="LegalPro")
    support_email: str = Field(default="support@legalpro.co.ke")
    support_phone: str = Field(default="+254 726 745 739")
    frontend_url: str = Field(default="http://localhost:5173")

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("quiet_hours_start", "quiet_hours_end")
    @classmethod
    def _validate_hhmm(cls, v: str) -> str:
        parse_hhmm(v)
        return v

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            msg = f"Unknown timezone: {v}"
            raise ValueError(msg) from exc
        return v

    @field_validator("quiet_hours_exempt_priorities")
    @classmethod
    def _lowercase_priorities(cls, v: list[str]) -> list[str]:
        return [p.strip().lower() for p in v if p.strip()]

    @property
    def quiet_start_time(self) -> time:
        return parse_hhmm(self.quiet_hours_start)

    @property
    def quiet_end_time(self) -> time:
        return parse_hhmm(self.quiet_hours_end)

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
