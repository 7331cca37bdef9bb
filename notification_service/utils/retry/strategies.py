from __future__ import annotations

import random


class BackoffStrategy:
    """Computes the wait before a retry.

    ``retry`` is 1-based: the first retry waits ``base_delay``, the second
    ``base_delay * exponential_base`` and so on, capped at ``max_delay``.
    With ``exponential=False`` every retry waits ``base_delay``.
    """

    def __init__(
        self,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential: bool = True,
        exponential_base: float = 2.0,
        jitter: bool = False,
        jitter_range: tuple[float, float] = (0.5, 1.5),
    ) -> None:
        if base_delay < 0:
            msg = "base_delay must be >= 0"
            raise ValueError(msg)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential = exponential
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.jitter_range = jitter_range

    def calculate_delay(self, retry: int) -> float:
        if retry < 1:
            msg = "retry numbers start at 1"
            raise ValueError(msg)
        if self.exponential:
            delay = self.base_delay * (self.exponential_base ** (retry - 1))
        else:
            delay = self.base_delay
        delay = min(delay, self.max_delay)
        if self.jitter:
            delay *= random.uniform(self.jitter_range[0], self.jitter_range[1])
        return delay
