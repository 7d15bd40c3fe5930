"""
Custom exceptions for the REST client.

This module defines the error taxonomy used throughout the client. Inside the
request pipeline these errors travel as values inside ``Failure`` outcomes;
only the caller-facing terminal operations raise them.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Broad classification of a failed call."""
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    TRANSPORT = "transport"
    DECODE = "decode"
    UNAVAILABLE = "unavailable"
    CONFIGURATION = "configuration"


class HttpStatusCategory(str, Enum):
    """Category of a rejected HTTP status code."""
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"
    BAD_GATEWAY = "bad_gateway"
    UNAVAILABLE = "unavailable"
    UNEXPECTED = "unexpected"


class RestClientError(Exception):
    """Base exception for all REST client errors."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code!r})"


class ConfigurationError(RestClientError):
    """Raised when the client or a request is configured with invalid values."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class PreconditionError(ConfigurationError):
    """Raised when a function precondition is violated."""
    pass


class RestClientTimeoutError(RestClientError):
    """Raised when a request times out, locally or as reported by the server."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, url: str, status_code: Optional[int] = None, timeout_seconds: Optional[float] = None, **kwargs):
        super().__init__(f"Timeout during the request to URL {url}", url=url, status_code=status_code, **kwargs)
        self.timeout_seconds = timeout_seconds


class HttpStatusError(RestClientError):
    """Raised when the server answers with a status code that is not accepted."""

    kind = ErrorKind.HTTP_STATUS

    def __init__(self, message: str, status_code: int, category: HttpStatusCategory, url: Optional[str] = None, **kwargs):
        super().__init__(message, url=url, status_code=status_code, **kwargs)
        self.category = category


class TransportError(RestClientError):
    """Raised when the HTTP exchange itself fails (connection, protocol, ...)."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, url: str, cause: Optional[BaseException] = None, **kwargs):
        super().__init__(f"An error occurred during the request to URL {url}.", url=url, **kwargs)
        self.cause = cause


class RestClientDecodeError(RestClientError):
    """Raised when a response body cannot be deserialized into the requested shape."""

    kind = ErrorKind.DECODE

    def __init__(self, message: str, target: Optional[str] = None, body: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.target = target
        self.body = body


class CircuitBreakerOpenError(RestClientError):
    """Raised when a call is rejected because the circuit breaker is open."""

    kind = ErrorKind.UNAVAILABLE

    def __init__(self, service: str, url: Optional[str] = None, **kwargs):
        super().__init__(f"Circuit breaker open for service: {service}", url=url, **kwargs)
        self.service = service


def is_retryable_error(error: BaseException) -> bool:
    """Determine if an error is worth another attempt."""
    non_retryable = (
        RestClientDecodeError,
        ConfigurationError,
        CircuitBreakerOpenError,
    )

    if isinstance(error, non_retryable):
        return False

    return isinstance(error, RestClientError)
