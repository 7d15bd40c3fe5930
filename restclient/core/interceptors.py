"""
Interceptor hook points.

Payload interceptors see the request body right before it is sent; response
interceptors see every response that came back, before it is classified.
Both are observers: they cannot change the request or the outcome.
"""

from abc import abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class PayloadInterceptor(Protocol):
    """Protocol for request payload observers."""

    @abstractmethod
    def intercept_payload(self, payload: str) -> None:
        """Observe the body about to be sent."""
        ...


@runtime_checkable
class ResponseInterceptor(Protocol):
    """Protocol for response observers."""

    @abstractmethod
    def intercept_response(self, status_code: int, body: str) -> None:
        """Observe the status code and body of a response."""
        ...
