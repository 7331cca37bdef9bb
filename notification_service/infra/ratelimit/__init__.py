"""Rate limiting for outbound notification channels."""

from __future__ import annotations

from notification_service.infra.ratelimit.limiter import (
    DAY,
    HOUR,
    ChannelRateLimiter,
    RateLimit,
)

__all__ = ["DAY", "HOUR", "ChannelRateLimiter", "RateLimit"]
