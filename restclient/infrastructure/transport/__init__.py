"""
HTTP transports.

The pipeline talks to the network only through the ``Transport`` protocol.
"""

from .base import (
    Transport,
    TransportResponse,
    TransportFailure,
    TransportTimeoutError,
)
from .httpx_transport import HttpxTransport
from .executor import RequestExecutor

__all__ = [
    "Transport",
    "TransportResponse",
    "TransportFailure",
    "TransportTimeoutError",
    "HttpxTransport",
    "RequestExecutor",
]
