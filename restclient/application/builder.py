"""
Fluent request builder.

``HttpClientBuilder`` and ``HttpRequest`` are immutable: every call returns a
new value, so a partially built request can be shared and extended
concurrently without interference.

Example:
    ```python
    model = await (
        HttpClientBuilder.create("https://httpbin.org")
        .path("anything")
        .query("q", "Test")
        .header("X-Pwd", "x-123")
        .async_get()
        .retry(2)
        .fallback(lambda error: None)
        .get_entity(HttpBinGetModel)
    )
    ```
"""

import base64
import functools
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any, Callable, Optional, Tuple, Type, TypeVar, Union

import structlog

from restclient.application.config import ClientSettings
from restclient.core.codec import DOTNET_CAMELCASE, JsonCodec, SerializerOptions, default_codec
from restclient.core.interceptors import PayloadInterceptor, ResponseInterceptor
from restclient.core.outcome import Outcome, unwrap
from restclient.core.request import RequestSpec, format_query_params, url_with_query
from restclient.core.status import StatusClassifier, default_classifier
from restclient.infrastructure.resilience import (
    CircuitBreaker, FallbackAction, ResiliencePipeline, RetryPolicy, RetryStrategy
)
from restclient.infrastructure.transport import HttpxTransport, RequestExecutor, Transport
from restclient.shared.contracts import non_empty_string, non_negative, positive, require, valid_status_code
from restclient.shared.exceptions import ConfigurationError
from restclient.shared.types import ContentType, HttpMethod

logger = structlog.get_logger(__name__)

T = TypeVar('T')

Pairs = Tuple[Tuple[str, str], ...]


def _add_unique(pairs: Pairs, key: str, value: str, kind: str) -> Pairs:
    if any(existing == key for existing, _ in pairs):
        raise ConfigurationError(f"Duplicate {kind}: {key}", field=key, value=value)
    return pairs + ((key, value),)


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class HttpClientBuilder:
    """Accumulates URL, headers, body and timeout for a request."""
    base_url: str
    settings: ClientSettings = field(default_factory=ClientSettings)
    content_type: ContentType = ContentType.APPLICATION_JSON
    body: Optional[str] = None
    headers: Pairs = ()
    query_params: Pairs = ()
    timeout_seconds: Optional[float] = None
    payload_interceptors: Tuple[PayloadInterceptor, ...] = ()
    response_interceptors: Tuple[ResponseInterceptor, ...] = ()
    injected_transport: Optional[Transport] = None
    codec: JsonCodec = default_codec

    @classmethod
    @require(lambda cls, base_url, settings=None: non_empty_string(base_url), "Base URL cannot be empty")
    def create(cls, base_url: str, settings: Optional[ClientSettings] = None) -> "HttpClientBuilder":
        return cls(base_url=base_url, settings=settings or ClientSettings())

    # URL

    def url(self, fragment: str) -> "HttpClientBuilder":
        """Append a raw fragment to the URL."""
        return replace(self, base_url=self.base_url + fragment)

    def path(self, segment: Any) -> "HttpClientBuilder":
        """Append ``/segment``; ints and UUIDs are formatted with ``str``."""
        return replace(self, base_url=f"{self.base_url}/{segment}")

    def query(self, key: str, value: Any) -> "HttpClientBuilder":
        return replace(self, query_params=_add_unique(self.query_params, key, _stringify(value), "query parameter"))

    # Headers

    def header(self, key: str, value: Any) -> "HttpClientBuilder":
        return replace(self, headers=_add_unique(self.headers, key, _stringify(value), "header"))

    def basic_auth(self, username: str, password: str) -> "HttpClientBuilder":
        token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        return self.header("Authorization", f"Basic {token}")

    # Body

    def use_application_json(self) -> "HttpClientBuilder":
        return replace(self, content_type=ContentType.APPLICATION_JSON)

    def use_form_url_encoded(self) -> "HttpClientBuilder":
        return replace(self, content_type=ContentType.FORM_URL_ENCODED)

    def payload(self, payload: str) -> "HttpClientBuilder":
        return replace(self, body=payload)

    def form_param(self, name: str, value: Any) -> "HttpClientBuilder":
        pair = f"{name}={_stringify(value)}"
        body = pair if self.body is None else f"{self.body}&{pair}"
        return replace(self, body=body)

    def entity(self, entity: Any, options: SerializerOptions = DOTNET_CAMELCASE) -> "HttpClientBuilder":
        """Serialize an entity as the JSON body."""
        return replace(self, body=self.codec.encode(entity, options))

    # Execution settings

    @require(
        lambda self, value: isinstance(value, timedelta) and value.total_seconds() > 0 or positive(value),
        "Timeout must be greater than zero.",
    )
    def timeout(self, value: Union[int, float, timedelta]) -> "HttpClientBuilder":
        """Set the per-attempt deadline: a ``timedelta`` or a number of milliseconds."""
        if isinstance(value, timedelta):
            seconds = value.total_seconds()
        else:
            seconds = value / 1000.0
        return replace(self, timeout_seconds=seconds)

    def register_interceptor(self, interceptor: Union[PayloadInterceptor, ResponseInterceptor]) -> "HttpClientBuilder":
        payload = isinstance(interceptor, PayloadInterceptor)
        response = isinstance(interceptor, ResponseInterceptor)
        if not payload and not response:
            raise ConfigurationError(
                f"{type(interceptor).__name__} is neither a payload nor a response interceptor"
            )
        builder = self
        if payload:
            builder = replace(builder, payload_interceptors=builder.payload_interceptors + (interceptor,))
        if response:
            builder = replace(builder, response_interceptors=builder.response_interceptors + (interceptor,))
        return builder

    def transport(self, transport: Transport) -> "HttpClientBuilder":
        """Use a host-owned transport; it is not closed by the client."""
        return replace(self, injected_transport=transport)

    # Method selection

    def async_get(self) -> "HttpRequest":
        return self._create_request(HttpMethod.GET)

    def async_post(self) -> "HttpRequest":
        return self._create_request(HttpMethod.POST)

    def async_put(self) -> "HttpRequest":
        return self._create_request(HttpMethod.PUT)

    def async_patch(self) -> "HttpRequest":
        return self._create_request(HttpMethod.PATCH)

    def async_delete(self) -> "HttpRequest":
        return self._create_request(HttpMethod.DELETE)

    def _create_request(self, method: HttpMethod) -> "HttpRequest":
        headers = dict(self.headers)
        if self.settings.user_agent and not any(k.lower() == "user-agent" for k in headers):
            headers["User-Agent"] = self.settings.user_agent

        timeout = self.timeout_seconds
        if timeout is None:
            timeout = self.settings.default_timeout_seconds

        spec = RequestSpec(
            method=method,
            url=url_with_query(self.base_url, format_query_params(dict(self.query_params))),
            content_type=self.content_type,
            body=self.body,
            headers=headers,
            timeout_seconds=timeout,
            payload_interceptors=self.payload_interceptors,
            response_interceptors=self.response_interceptors,
            log_payload=self.settings.log_payload,
            log_response=self.settings.log_response,
        )
        return HttpRequest(
            spec=spec,
            transport=self.injected_transport,
            codec=self.codec,
            retry_policy=RetryPolicy(max_retries=self.settings.default_retries),
        )


@dataclass(frozen=True)
class HttpRequest:
    """A request ready to run, plus the resilience policies to run it with."""
    spec: RequestSpec
    transport: Optional[Transport] = None
    codec: JsonCodec = default_codec
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    breaker: Optional[CircuitBreaker] = None
    fallback_action: Optional[FallbackAction] = None
    classifier: StatusClassifier = default_classifier

    # Status validation

    def accept_any_status_code(self) -> "HttpRequest":
        return replace(self, spec=replace(self.spec, accept_any_status=True))

    @require(
        lambda self, *codes: all(valid_status_code(code) for code in codes),
        "Status codes must be integers between 100 and 599",
    )
    def accept_status_codes(self, *codes: int) -> "HttpRequest":
        return replace(self, spec=replace(self.spec, accepted_status_codes=frozenset(codes)))

    def status_classifier(self, classifier: StatusClassifier) -> "HttpRequest":
        return replace(self, classifier=classifier)

    # Resilience

    @require(lambda self, count, *backoff: isinstance(count, int) and non_negative(count),
             "Retry count cannot be negative")
    def retry(
        self,
        count: int,
        base_delay: float = 0.0,
        strategy: RetryStrategy = RetryStrategy.FIXED_DELAY,
        max_delay: float = 60.0,
        jitter: bool = False,
    ) -> "HttpRequest":
        """Allow ``count`` extra attempts after the first one fails."""
        policy = replace(
            self.retry_policy,
            max_retries=count,
            base_delay=base_delay,
            strategy=strategy,
            max_delay=max_delay,
            jitter=jitter,
        )
        return replace(self, retry_policy=policy)

    def fallback(self, action: FallbackAction) -> "HttpRequest":
        """Substitute a value for the terminal error; may be a coroutine function."""
        return replace(self, fallback_action=action)

    def circuit_breaker(self, breaker: CircuitBreaker) -> "HttpRequest":
        """Gate every attempt on a breaker shared with other requests."""
        return replace(self, breaker=breaker)

    # Observability

    def log_payload(self) -> "HttpRequest":
        return replace(self, spec=replace(self.spec, log_payload=True))

    def log_response(self) -> "HttpRequest":
        return replace(self, spec=replace(self.spec, log_response=True))

    # Terminal operations

    async def get_response(self) -> str:
        """Run the request and return the raw body."""
        return unwrap(await self._execute(lambda body: body))

    async def get_entity(self, shape: Type[T]) -> T:
        """Run the request and decode the body into ``shape``."""
        return unwrap(await self._execute(functools.partial(self.codec.decode, shape=shape)))

    async def _execute(self, decode: Callable[[str], Any]) -> Outcome:
        if self.transport is not None:
            return await self._pipeline(self.transport).execute(self.spec, decode)

        async with HttpxTransport() as transport:
            return await self._pipeline(transport).execute(self.spec, decode)

    def _pipeline(self, transport: Transport) -> ResiliencePipeline:
        return ResiliencePipeline(
            executor=RequestExecutor(transport, self.classifier),
            retry_policy=self.retry_policy,
            circuit_breaker=self.breaker,
            fallback=self.fallback_action,
        )
