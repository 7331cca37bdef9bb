"""Unit tests for the in-process channel rate limiter."""
from __future__ import annotations

import pytest

from notification_service.infra.ratelimit import DAY, HOUR, ChannelRateLimiter, RateLimit


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.mark.unit
class TestChannelRateLimiter:
    """Test suite for ChannelRateLimiter."""

    def test_unlimited_key_always_allowed(self, clock):
        limiter = ChannelRateLimiter({}, clock=clock)

        allowed, meta = limiter.check_limit("email")

        assert allowed is True
        assert meta["remaining"] == -1
        assert limiter.get_remaining("email") is None

    def test_blocks_after_hourly_budget(self, clock):
        limiter = ChannelRateLimiter({"sms": [RateLimit(2, HOUR)]}, clock=clock)

        assert limiter.check_limit("sms")[0]
        assert limiter.check_limit("sms")[0]
        allowed, meta = limiter.check_limit("sms")

        assert allowed is False
        assert meta["limit"] == 2
        assert meta["remaining"] == 0
        assert meta["retry_after"] == HOUR

    def test_window_slides(self, clock):
        limiter = ChannelRateLimiter({"sms": [RateLimit(1, HOUR)]}, clock=clock)

        assert limiter.check_limit("sms")[0]
        clock.now += HOUR - 1
        assert not limiter.check_limit("sms")[0]
        clock.now += 1
        assert limiter.check_limit("sms")[0]

    def test_daily_window_applies_after_hourly_resets(self, clock):
        limiter = ChannelRateLimiter(
            {"whatsapp": [RateLimit(2, HOUR), RateLimit(3, DAY)]},
            clock=clock,
        )

        assert limiter.check_limit("whatsapp")[0]
        assert limiter.check_limit("whatsapp")[0]
        clock.now += HOUR
        assert limiter.check_limit("whatsapp")[0]
        allowed, meta = limiter.check_limit("whatsapp")

        assert allowed is False
        assert meta["limit"] == 3

    def test_rejected_requests_do_not_consume(self, clock):
        limiter = ChannelRateLimiter({"email": [RateLimit(1, HOUR)]}, clock=clock)

        limiter.check_limit("email")
        limiter.check_limit("email")
        limiter.check_limit("email")

        assert limiter.get_remaining("email") == 0
        clock.now += HOUR
        assert limiter.get_remaining("email") == 1

    def test_keys_are_independent(self, clock):
        limiter = ChannelRateLimiter(
            {"email": [RateLimit(1, HOUR)], "sms": [RateLimit(1, HOUR)]},
            clock=clock,
        )

        assert limiter.check_limit("email")[0]
        assert limiter.check_limit("sms")[0]
        assert not limiter.check_limit("email")[0]

    def test_reset(self, clock):
        limiter = ChannelRateLimiter({"email": [RateLimit(1, HOUR)]}, clock=clock)
        limiter.check_limit("email")

        limiter.reset("email")

        assert limiter.check_limit("email")[0]

    def test_cost_above_limit_is_rejected(self, clock):
        limiter = ChannelRateLimiter({"sms": [RateLimit(2, HOUR)]}, clock=clock)

        allowed, meta = limiter.check_limit("sms", cost=3)

        assert not allowed
        assert meta["retry_after"] == HOUR

    @pytest.mark.parametrize(("limit", "window"), [(0, HOUR), (5, 0)])
    def test_rate_limit_must_be_positive(self, limit, window):
        with pytest.raises(ValueError):
            RateLimit(limit, window)
