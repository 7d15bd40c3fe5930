"""
Immutable request description.

A ``RequestSpec`` is assembled by the builder and handed to the pipeline.
Once a call starts nothing in it changes.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional, Tuple

from restclient.core.interceptors import PayloadInterceptor, ResponseInterceptor
from restclient.shared.types import ContentType, HttpMethod, TimeoutSeconds, Url


def format_query_params(params: Optional[Mapping[str, object]]) -> str:
    """Join parameters as ``key=value`` pairs in insertion order."""
    if not params:
        return ""
    return "&".join(f"{key}={'' if value is None else value}" for key, value in params.items())


def url_with_query(url: str, query: str) -> str:
    """Append an already formatted query string to a URL."""
    if not query:
        return url
    if "?" in url:
        return f"{url}&{query}"
    return f"{url}?{query}"


@dataclass(frozen=True)
class RequestSpec:
    """Everything needed to perform one HTTP call."""
    method: HttpMethod
    url: Url
    content_type: ContentType = ContentType.APPLICATION_JSON
    body: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout_seconds: Optional[TimeoutSeconds] = None
    accepted_status_codes: FrozenSet[int] = frozenset()
    accept_any_status: bool = False
    payload_interceptors: Tuple[PayloadInterceptor, ...] = ()
    response_interceptors: Tuple[ResponseInterceptor, ...] = ()
    log_payload: bool = False
    log_response: bool = False

    @property
    def has_body_to_send(self) -> bool:
        return self.body is not None and self.method.sends_body

    def request_headers(self) -> dict:
        """Caller headers plus Accept and, when a body goes out, Content-Type."""
        headers = dict(self.headers)
        headers.setdefault("Accept", self.content_type.value)
        if self.has_body_to_send:
            headers.setdefault("Content-Type", f"{self.content_type.value}; charset=utf-8")
        return headers
