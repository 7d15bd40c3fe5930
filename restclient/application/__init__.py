"""
Caller-facing builder and client settings.
"""

from .builder import HttpClientBuilder, HttpRequest
from .config import ClientSettings

__all__ = [
    "HttpClientBuilder",
    "HttpRequest",
    "ClientSettings",
]
