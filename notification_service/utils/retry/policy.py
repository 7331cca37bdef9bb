"""Retry state machine shared by channel senders.

Each execution walks ``ATTEMPTING -> SUCCEEDED | RETRY_SCHEDULED | FAILED``.
A retryable failure moves to ``RETRY_SCHEDULED``, waits the backoff delay and
returns to ``ATTEMPTING``. A terminal failure goes straight to ``FAILED``
without consuming a retry. Exhausting ``max_retries`` also ends in ``FAILED``
with the last error attached.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar

from .strategies import BackoffStrategy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class AttemptOutcome(Protocol):
    """Shape the policy needs from an attempt result."""

    @property
    def success(self) -> bool: ...

    @property
    def retryable(self) -> bool: ...

    @property
    def error(self) -> str | None: ...


O = TypeVar("O", bound=AttemptOutcome)


class RetryState(StrEnum):
    ATTEMPTING = "attempting"
    RETRY_SCHEDULED = "retry_scheduled"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RetryStatistics:
    """Statistics captured during a retry session."""

    retries: int = 0
    total_delay: float = 0.0
    start_time: float = 0.0
    end_time: float = 0.0
    delays: list[float] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def duration(self) -> float:
        """Total time spent, including backoff waits."""
        return self.end_time - self.start_time


@dataclass(frozen=True)
class RetryResult(Generic[O]):
    """Terminal record of one retry session."""

    state: RetryState
    outcome: O
    attempts: int
    statistics: RetryStatistics
    exhausted: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state is RetryState.SUCCEEDED

    @property
    def retries(self) -> int:
        return self.statistics.retries


class RetryPolicy:
    """Bounded retry with fixed or exponential backoff.

    Args:
        max_retries: Retries allowed after the first attempt.
        base_delay: Wait before the first retry, in seconds.
        exponential: Double the wait on each subsequent retry.
        max_delay: Upper bound for a single wait.
        sleep: Awaitable sleep used between attempts (injectable for tests).

    Example:
        policy = RetryPolicy(max_retries=3, base_delay=1.0)
        result = await policy.execute(lambda: sender.send(to, content))
        if not result.succeeded:
            print(result.outcome.error, result.attempts)
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        exponential: bool = True,
        max_delay: float = 60.0,
        sleep: Callable[[float], Awaitable[object]] | None = None,
    ) -> None:
        if max_retries < 0:
            msg = "max_retries must be >= 0"
            raise ValueError(msg)
        self.max_retries = max_retries
        self.strategy = BackoffStrategy(
            base_delay=base_delay,
            max_delay=max_delay,
            exponential=exponential,
        )
        self._sleep = sleep or asyncio.sleep

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry: int) -> float:
        return self.strategy.calculate_delay(retry)

    async def execute(
        self,
        attempt: Callable[[], Awaitable[O]],
        *,
        name: str = "send",
        on_retry: Callable[[O, int, float], None] | None = None,
    ) -> RetryResult[O]:
        """Run ``attempt`` until it succeeds, fails terminally or retries run out.

        Args:
            attempt: Zero-argument coroutine factory performing one attempt.
            name: Label used in log records.
            on_retry: Called with (outcome, retry_number, delay) before each wait.
        """
        stats = RetryStatistics(start_time=time.monotonic())
        state = RetryState.ATTEMPTING
        attempts = 0

        while True:
            # ATTEMPTING
            attempts += 1
            outcome = await attempt()

            if outcome.success:
                state = RetryState.SUCCEEDED
                stats.end_time = time.monotonic()
                if stats.retries:
                    logger.info(
                        f"{name} succeeded after {stats.retries} retries",
                        extra={"operation": name, "attempts": attempts},
                    )
                return RetryResult(state=state, outcome=outcome, attempts=attempts, statistics=stats)

            stats.errors.append(outcome.error or "unknown error")

            if not outcome.retryable:
                state = RetryState.FAILED
                stats.end_time = time.monotonic()
                logger.warning(
                    f"Non-retryable failure in {name}: {outcome.error}",
                    extra={"operation": name, "attempts": attempts},
                )
                return RetryResult(state=state, outcome=outcome, attempts=attempts, statistics=stats)

            if stats.retries >= self.max_retries:
                state = RetryState.FAILED
                stats.end_time = time.monotonic()
                logger.error(
                    f"All retry attempts exhausted for {name}",
                    extra={
                        "operation": name,
                        "attempts": attempts,
                        "last_error": outcome.error,
                        "total_delay": stats.total_delay,
                    },
                )
                return RetryResult(
                    state=state,
                    outcome=outcome,
                    attempts=attempts,
                    statistics=stats,
                    exhausted=True,
                )

            # RETRY_SCHEDULED
            state = RetryState.RETRY_SCHEDULED
            stats.retries += 1
            delay = self.delay_for(stats.retries)
            stats.delays.append(delay)
            stats.total_delay += delay

            logger.warning(
                f"Retrying {name} after {delay:.2f}s (retry {stats.retries}/{self.max_retries})",
                extra={
                    "operation": name,
                    "retry": stats.retries,
                    "max_retries": self.max_retries,
                    "delay": delay,
                    "error": outcome.error,
                },
            )
            if on_retry:
                on_retry(outcome, stats.retries, delay)

            await self._sleep(delay)
            state = RetryState.ATTEMPTING
