"""
Single-attempt request execution.

``RequestExecutor`` performs exactly one exchange for a ``RequestSpec`` and
turns whatever happened into an ``Outcome``. It never retries and never
raises for network or status failures.
"""

import asyncio
from typing import Optional

import structlog

from restclient.core.outcome import Failure, Outcome, Success
from restclient.core.request import RequestSpec
from restclient.core.status import StatusClassifier, default_classifier
from restclient.infrastructure.logging.sanitization import LogSanitizer
from restclient.infrastructure.transport.base import (
    Transport, TransportFailure, TransportResponse, TransportTimeoutError
)
from restclient.shared.exceptions import RestClientTimeoutError, TransportError

logger = structlog.get_logger(__name__)


class RequestExecutor:
    """Runs one HTTP attempt and classifies its result."""

    def __init__(self, transport: Transport, classifier: Optional[StatusClassifier] = None):
        self.transport = transport
        self.classifier = classifier or default_classifier

    async def execute(self, spec: RequestSpec) -> Outcome[str]:
        headers = spec.request_headers()
        body = spec.body if spec.has_body_to_send else None

        if body is not None:
            for interceptor in spec.payload_interceptors:
                interceptor.intercept_payload(body)
            if spec.log_payload:
                logger.info(
                    "Request payload",
                    method=spec.method.value,
                    url=spec.url,
                    headers=LogSanitizer.sanitize_headers(headers),
                    payload=LogSanitizer.sanitize_body(body),
                )

        logger.debug("Sending request", method=spec.method.value, url=spec.url, timeout=spec.timeout_seconds)

        try:
            response = await self._send(spec, headers, body)
        except (asyncio.TimeoutError, TransportTimeoutError):
            logger.warning("Request timed out", url=spec.url, timeout=spec.timeout_seconds)
            return Failure(RestClientTimeoutError(spec.url, timeout_seconds=spec.timeout_seconds))
        except (TransportFailure, OSError) as e:
            logger.warning("Transport failure", url=spec.url, error=str(e), exception=type(e).__name__)
            return Failure(TransportError(spec.url, cause=e))

        for interceptor in spec.response_interceptors:
            interceptor.intercept_response(response.status_code, response.body)

        if spec.log_response:
            logger.info(
                "Response received",
                method=spec.method.value,
                url=spec.url,
                status_code=response.status_code,
                body=LogSanitizer.sanitize_body(response.body),
            )

        classified = self.classifier.classify(
            response.status_code,
            spec.url,
            accept_any=spec.accept_any_status,
            accepted=spec.accepted_status_codes,
        )
        if isinstance(classified, Failure):
            return classified
        return Success(response.body)

    async def _send(self, spec: RequestSpec, headers: dict, body: Optional[str]) -> TransportResponse:
        exchange = self.transport.send(spec.method, spec.url, headers, body, spec.timeout_seconds)
        if spec.timeout_seconds is None:
            return await exchange
        # The deadline cancels the exchange; the transport releases its connection on unwind.
        return await asyncio.wait_for(exchange, timeout=spec.timeout_seconds)
