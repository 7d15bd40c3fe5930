"""
Global pytest configuration and fixtures for the REST client tests.
"""
from typing import Any

import pytest

from restclient.infrastructure.resilience import CircuitBreaker, CircuitBreakerConfig

from tests.fakes import FakeClock, FakeTransport, ok


@pytest.fixture
def fake_transport():
    """Factory for scripted transports."""
    def factory(*script: Any) -> FakeTransport:
        return FakeTransport(script)
    return factory


@pytest.fixture
def response():
    """Factory for transport responses."""
    return ok


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def breaker(clock: FakeClock) -> CircuitBreaker:
    """Breaker that opens after 3 failures for 5 seconds."""
    return CircuitBreaker(
        "httpbin",
        CircuitBreakerConfig(failure_threshold=3, open_seconds=5.0),
        clock=clock,
    )
