"""Unit tests for the retry state machine."""
from __future__ import annotations

from dataclasses import dataclass

import pytest

from notification_service.utils.retry import BackoffStrategy, RetryPolicy, RetryState


@dataclass(frozen=True)
class Attempt:
    success: bool
    retryable: bool = False
    error: str | None = None


OK = Attempt(success=True)


def transient(msg: str = "temporary") -> Attempt:
    return Attempt(success=False, retryable=True, error=msg)


def terminal(msg: str = "permanent") -> Attempt:
    return Attempt(success=False, retryable=False, error=msg)


class Script:
    """Replays attempt results and records sleeps."""

    def __init__(self, *results: Attempt) -> None:
        self.results = list(results)
        self.calls = 0
        self.sleeps: list[float] = []

    async def attempt(self) -> Attempt:
        self.calls += 1
        return self.results.pop(0) if self.results else OK

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


@pytest.mark.unit
class TestBackoffStrategy:
    """Test suite for BackoffStrategy."""

    def test_exponential_delays(self):
        strategy = BackoffStrategy(base_delay=5.0, max_delay=60.0)
        assert [strategy.calculate_delay(n) for n in (1, 2, 3, 4)] == [5.0, 10.0, 20.0, 40.0]

    def test_delay_capped(self):
        strategy = BackoffStrategy(base_delay=5.0, max_delay=12.0)
        assert strategy.calculate_delay(5) == 12.0

    def test_fixed_delay(self):
        strategy = BackoffStrategy(base_delay=3.0, exponential=False)
        assert {strategy.calculate_delay(n) for n in (1, 2, 3)} == {3.0}

    def test_jitter_stays_in_range(self):
        strategy = BackoffStrategy(base_delay=10.0, jitter=True, jitter_range=(0.5, 1.5))
        for _ in range(20):
            assert 5.0 <= strategy.calculate_delay(1) <= 15.0

    def test_retry_numbers_start_at_one(self):
        with pytest.raises(ValueError):
            BackoffStrategy().calculate_delay(0)


@pytest.mark.unit
class TestRetryPolicy:
    """Test suite for RetryPolicy.execute."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self):
        script = Script(OK)
        policy = RetryPolicy(max_retries=3, sleep=script.sleep)

        result = await policy.execute(script.attempt)

        assert result.state is RetryState.SUCCEEDED
        assert result.succeeded
        assert result.attempts == 1
        assert result.retries == 0
        assert script.sleeps == []

    @pytest.mark.asyncio
    async def test_retries_until_success(self):
        script = Script(transient(), transient(), OK)
        policy = RetryPolicy(max_retries=3, base_delay=2.0, sleep=script.sleep)

        result = await policy.execute(script.attempt)

        assert result.succeeded
        assert result.attempts == 3
        assert result.retries == 2
        assert script.sleeps == [2.0, 4.0]
        assert result.statistics.delays == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_exhaustion_keeps_last_error(self):
        script = Script(transient("first"), transient("second"), transient("third"))
        policy = RetryPolicy(max_retries=2, base_delay=1.0, sleep=script.sleep)

        result = await policy.execute(script.attempt)

        assert result.state is RetryState.FAILED
        assert result.exhausted
        assert result.attempts == 3
        assert result.retries == 2
        assert result.outcome.error == "third"
        assert result.statistics.errors == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_terminal_failure_never_retries(self):
        script = Script(terminal("auth failed"))
        policy = RetryPolicy(max_retries=5, sleep=script.sleep)

        result = await policy.execute(script.attempt)

        assert result.state is RetryState.FAILED
        assert not result.exhausted
        assert result.attempts == 1
        assert result.retries == 0
        assert script.sleeps == []

    @pytest.mark.asyncio
    async def test_terminal_after_transient_stops(self):
        script = Script(transient(), terminal())
        policy = RetryPolicy(max_retries=5, base_delay=1.0, sleep=script.sleep)

        result = await policy.execute(script.attempt)

        assert result.attempts == 2
        assert result.retries == 1
        assert not result.exhausted

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_retries", [0, 1, 2, 4])
    async def test_retry_count_never_exceeds_max(self, max_retries):
        script = Script(*[transient()] * 10)
        policy = RetryPolicy(max_retries=max_retries, base_delay=0.0, sleep=script.sleep)

        result = await policy.execute(script.attempt)

        assert result.retries == max_retries
        assert script.calls == max_retries + 1 == policy.max_attempts

    @pytest.mark.asyncio
    async def test_fixed_backoff(self):
        script = Script(transient(), transient(), OK)
        policy = RetryPolicy(max_retries=3, base_delay=3.0, exponential=False, sleep=script.sleep)

        await policy.execute(script.attempt)

        assert script.sleeps == [3.0, 3.0]

    @pytest.mark.asyncio
    async def test_on_retry_callback(self):
        script = Script(transient("x"), OK)
        seen = []
        policy = RetryPolicy(max_retries=2, base_delay=1.5, sleep=script.sleep)

        await policy.execute(script.attempt, on_retry=lambda outcome, n, delay: seen.append((outcome.error, n, delay)))

        assert seen == [("x", 1, 1.5)]

    def test_negative_max_retries_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=-1)
