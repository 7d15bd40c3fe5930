"""
Transport abstraction.

A transport performs exactly one HTTP exchange. It knows nothing about
status classification, retries or decoding; it only reports what came back
or that nothing usable did.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol, runtime_checkable

from restclient.shared.types import HttpMethod, StatusCode


@dataclass(frozen=True)
class TransportResponse:
    """Status code and decoded text body of one exchange."""
    status_code: StatusCode
    body: str
    headers: Mapping[str, str] = field(default_factory=dict)


class TransportFailure(Exception):
    """Raised by a transport when the exchange fails before a response arrives."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class TransportTimeoutError(TransportFailure):
    """Raised by a transport when its own deadline expires."""
    pass


@runtime_checkable
class Transport(Protocol):
    """Protocol for HTTP transport implementations."""

    @abstractmethod
    async def send(
        self,
        method: HttpMethod,
        url: str,
        headers: Mapping[str, str],
        body: Optional[str],
        timeout: Optional[float],
    ) -> TransportResponse:
        """Perform one exchange and return its response."""
        ...
