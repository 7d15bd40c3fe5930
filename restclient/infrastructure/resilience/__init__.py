"""
Resilience patterns for HTTP calls.

This module provides the retry policy, the circuit breaker and the pipeline
that composes them with a fallback around a single request executor.
"""

from .retry import (
    RetryStrategy,
    RetryPolicy,
    NO_RETRY,
)
from .circuit_breaker import (
    BreakerPermit,
    CircuitBreakerConfig,
    CircuitBreaker,
)
from .pipeline import (
    FallbackAction,
    ResiliencePipeline,
)

__all__ = [
    "RetryStrategy",
    "RetryPolicy",
    "NO_RETRY",
    "BreakerPermit",
    "CircuitBreakerConfig",
    "CircuitBreaker",
    "FallbackAction",
    "ResiliencePipeline",
]
