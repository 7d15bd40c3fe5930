"""
Type definitions for the REST client.

This module contains the custom type definitions shared by the builder,
the pipeline and the transport layer.
"""

from typing import NewType
from enum import Enum

StatusCode = NewType('StatusCode', int)
Url = NewType('Url', str)

# Time-related types
TimeoutSeconds = NewType('TimeoutSeconds', float)


class HttpMethod(str, Enum):
    """HTTP methods the builder can issue."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def sends_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


class ContentType(str, Enum):
    """Request body encodings."""
    APPLICATION_JSON = "application/json"
    FORM_URL_ENCODED = "application/x-www-form-urlencoded"


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"
