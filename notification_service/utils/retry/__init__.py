from __future__ import annotations

from notification_service.utils.retry.policy import (
    AttemptOutcome,
    RetryPolicy,
    RetryResult,
    RetryState,
    RetryStatistics,
)
from notification_service.utils.retry.strategies import BackoffStrategy

__all__ = [
    "AttemptOutcome",
    "BackoffStrategy",
    "RetryPolicy",
    "RetryResult",
    "RetryState",
    "RetryStatistics",
]
