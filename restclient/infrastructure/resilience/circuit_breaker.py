"""
Circuit breaker guarding a downstream HTTP service.

A single breaker instance is meant to be shared by every call that targets
the same downstream: it tracks the health of the link, not of one call.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import structlog

from restclient.shared.exceptions import RestClientError
from restclient.shared.types import CircuitState

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""
    failure_threshold: int = 5  # failures before opening
    open_seconds: float = 5.0  # cool-down before a half-open trial
    expected_error_types: tuple = (RestClientError,)

    def __post_init__(self):
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if self.open_seconds < 0:
            raise ValueError("open_seconds cannot be negative")


@dataclass(frozen=True)
class BreakerPermit:
    """Admission ticket for one attempt.

    ``generation`` is the breaker generation at admission time; results
    reported with a permit from an earlier generation are ignored.
    """
    generation: int
    is_trial: bool = False


class CircuitBreaker:
    """Closed/open/half-open breaker whose transitions happen under one lock."""

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize circuit breaker.

        Args:
            name: Identifier for this circuit breaker, usually the downstream host
            config: Circuit breaker configuration
            clock: Monotonic time source in seconds
        """
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.last_transition_time = clock()
        self.generation = 0
        self._trial_in_flight = False
        self._lock = asyncio.Lock()

    async def acquire(self) -> Optional[BreakerPermit]:
        """
        Ask permission to run one attempt.

        Returns:
            A permit to report the attempt's result with, or None if the call
            must be rejected without touching the network
        """
        async with self._lock:
            if self.state == CircuitState.OPEN:
                if not self._cool_down_elapsed():
                    return None
                self._transition(CircuitState.HALF_OPEN)
                self.failure_count = 0
                self._trial_in_flight = True
                return BreakerPermit(self.generation, is_trial=True)

            if self.state == CircuitState.HALF_OPEN:
                if self._trial_in_flight:
                    return None
                self._trial_in_flight = True
                return BreakerPermit(self.generation, is_trial=True)

            return BreakerPermit(self.generation)

    async def record_success(self, permit: BreakerPermit) -> None:
        """Record successful execution."""
        async with self._lock:
            if not self._is_current(permit):
                return
            if self.state == CircuitState.HALF_OPEN:
                self._trial_in_flight = False
                self._transition(CircuitState.CLOSED)
                self.failure_count = 0
            elif self.state == CircuitState.CLOSED:
                self.failure_count = 0

    async def record_failure(self, permit: BreakerPermit, error: RestClientError) -> None:
        """Record failed execution."""
        if not isinstance(error, self.config.expected_error_types):
            async with self._lock:
                # The trial still ends; the breaker stays half-open for the next caller
                self._release_trial(permit)
            return

        async with self._lock:
            if not self._is_current(permit):
                return
            if self.state == CircuitState.HALF_OPEN:
                self._trial_in_flight = False
                self._transition(CircuitState.OPEN)
            elif self.state == CircuitState.CLOSED:
                self.failure_count += 1
                if self.failure_count >= self.config.failure_threshold:
                    self._transition(CircuitState.OPEN)
                    logger.warning(
                        "Circuit breaker opened",
                        name=self.name,
                        failure_count=self.failure_count,
                        error=str(error),
                    )

    def abandon_trial(self, permit: BreakerPermit) -> None:
        """Give back a half-open trial slot whose attempt never completed."""
        self._release_trial(permit)

    def _release_trial(self, permit: BreakerPermit) -> None:
        if self._is_current(permit) and self.state == CircuitState.HALF_OPEN:
            self._trial_in_flight = False

    def _is_current(self, permit: BreakerPermit) -> bool:
        # Only the trial permit is ever issued in HALF_OPEN, and every
        # transition bumps the generation.
        return permit.generation == self.generation

    def _cool_down_elapsed(self) -> bool:
        return self._clock() - self.last_transition_time >= self.config.open_seconds

    def _transition(self, state: CircuitState) -> None:
        previous = self.state
        self.state = state
        self.generation += 1
        self.last_transition_time = self._clock()
        logger.info(
            "Circuit breaker state changed",
            name=self.name,
            previous=previous.value,
            state=state.value,
            generation=self.generation,
        )

    def get_status(self) -> Dict[str, Any]:
        """Get current circuit breaker status."""
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "failure_threshold": self.config.failure_threshold,
            "open_seconds": self.config.open_seconds,
            "last_transition_time": self.last_transition_time,
            "generation": self.generation,
        }
