"""
Retry policy.

A policy is an immutable description of how many extra attempts a call gets
and how long to wait between them. The remaining budget lives in the
pipeline's attempt loop, one per top-level call.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from restclient.shared.exceptions import RestClientError, is_retryable_error


class RetryStrategy(Enum):
    """How the wait grows from one failed attempt to the next."""
    FIXED_DELAY = "fixed_delay"
    EXPONENTIAL_BACKOFF = "exponential_backoff"
    LINEAR_BACKOFF = "linear_backoff"
    FIBONACCI_BACKOFF = "fibonacci_backoff"


def fibonacci_factor(attempt: int) -> int:
    """1, 2, 3, 5, 8, ... for attempts 1, 2, 3, 4, 5, ..."""
    previous, current = 1, 1
    for _ in range(attempt - 1):
        previous, current = current, previous + current
    return current


@dataclass(frozen=True)
class RetryPolicy:
    """Extra attempts after the first, and the wait before each of them."""
    max_retries: int = 0
    base_delay: float = 0.0
    max_delay: float = 60.0
    strategy: RetryStrategy = RetryStrategy.FIXED_DELAY
    backoff_multiplier: float = 2.0
    jitter: bool = False
    jitter_ratio: float = 0.1
    retry_on: Callable[[RestClientError], bool] = is_retryable_error

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays cannot be negative")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def should_retry(self, error: RestClientError) -> bool:
        return self.retry_on(error)

    def calculate_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        if not self.base_delay:
            return 0.0

        factors = {
            RetryStrategy.FIXED_DELAY: lambda: 1,
            RetryStrategy.LINEAR_BACKOFF: lambda: attempt,
            RetryStrategy.EXPONENTIAL_BACKOFF: lambda: self.backoff_multiplier ** (attempt - 1),
            RetryStrategy.FIBONACCI_BACKOFF: lambda: fibonacci_factor(attempt),
        }
        wait = min(self.base_delay * factors[self.strategy](), self.max_delay)

        if self.jitter:
            spread = wait * self.jitter_ratio
            wait = random.uniform(wait - spread, wait + spread)

        return max(wait, 0.0)


NO_RETRY = RetryPolicy()
