"""
Resilient REST client.

A fluent, immutable request builder over httpx with status-code validation,
retries, a shared circuit breaker and fallbacks, returning either the raw
body or a pydantic-validated value.
"""

from restclient.application import ClientSettings, HttpClientBuilder, HttpRequest
from restclient.core.codec import DOTNET_CAMELCASE, JAVA_CAMELCASE, JsonCodec, SerializerOptions
from restclient.core.interceptors import PayloadInterceptor, ResponseInterceptor
from restclient.core.outcome import Failure, Outcome, Success
from restclient.core.request import RequestSpec, format_query_params, url_with_query
from restclient.core.status import StatusClassifier, classify_status
from restclient.infrastructure.logging import configure_logging
from restclient.infrastructure.resilience import (
    CircuitBreaker,
    CircuitBreakerConfig,
    ResiliencePipeline,
    RetryPolicy,
    RetryStrategy,
)
from restclient.infrastructure.transport import (
    HttpxTransport,
    RequestExecutor,
    Transport,
    TransportFailure,
    TransportResponse,
    TransportTimeoutError,
)
from restclient.shared.exceptions import (
    CircuitBreakerOpenError,
    ConfigurationError,
    ErrorKind,
    HttpStatusCategory,
    HttpStatusError,
    RestClientDecodeError,
    RestClientError,
    RestClientTimeoutError,
    TransportError,
)
from restclient.shared.types import CircuitState, ContentType, HttpMethod

__version__ = "1.0.0"

__all__ = [
    "ClientSettings",
    "HttpClientBuilder",
    "HttpRequest",
    "DOTNET_CAMELCASE",
    "JAVA_CAMELCASE",
    "JsonCodec",
    "SerializerOptions",
    "PayloadInterceptor",
    "ResponseInterceptor",
    "Failure",
    "Outcome",
    "Success",
    "RequestSpec",
    "format_query_params",
    "url_with_query",
    "StatusClassifier",
    "classify_status",
    "configure_logging",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "ResiliencePipeline",
    "RetryPolicy",
    "RetryStrategy",
    "HttpxTransport",
    "RequestExecutor",
    "Transport",
    "TransportFailure",
    "TransportResponse",
    "TransportTimeoutError",
    "CircuitBreakerOpenError",
    "ConfigurationError",
    "ErrorKind",
    "HttpStatusCategory",
    "HttpStatusError",
    "RestClientDecodeError",
    "RestClientError",
    "RestClientTimeoutError",
    "TransportError",
    "CircuitState",
    "ContentType",
    "HttpMethod",
]
