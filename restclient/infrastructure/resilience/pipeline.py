"""
Resilience pipeline.

Wraps a single-attempt executor with three optional policies evaluated in a
fixed order, innermost first: circuit breaker, retry, fallback. Decoding runs
once, on the final successful body, and is never retried.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Optional, TypeVar, Union

import structlog

from restclient.core.outcome import Failure, Outcome, Success
from restclient.core.request import RequestSpec
from restclient.infrastructure.resilience.circuit_breaker import CircuitBreaker
from restclient.infrastructure.resilience.retry import NO_RETRY, RetryPolicy
from restclient.infrastructure.transport.executor import RequestExecutor
from restclient.shared.exceptions import (
    CircuitBreakerOpenError, RestClientDecodeError, RestClientError
)

logger = structlog.get_logger(__name__)

V = TypeVar('V')

FallbackAction = Callable[[RestClientError], Union[V, Awaitable[V]]]
Decoder = Callable[[str], V]


class ResiliencePipeline:
    """Executes one logical call with breaker gating, retries and fallback."""

    def __init__(
        self,
        executor: RequestExecutor,
        retry_policy: Optional[RetryPolicy] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        fallback: Optional[FallbackAction] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            executor: Performs one attempt against the transport
            retry_policy: Extra attempts and backoff; no retries when omitted
            circuit_breaker: Shared breaker gating every attempt
            fallback: Substitute value factory for the terminal error
        """
        self.executor = executor
        self.retry_policy = retry_policy or NO_RETRY
        self.circuit_breaker = circuit_breaker
        self.fallback = fallback

    async def execute(self, spec: RequestSpec, decode: Decoder) -> Outcome:
        """
        Run the call to completion.

        Returns:
            ``Success`` with the decoded (or fallback) value, or ``Failure``
            with the single terminal error
        """
        outcome = await self._run_attempts(spec)

        if isinstance(outcome, Success):
            outcome = self._decode(outcome.value, decode, spec)

        if isinstance(outcome, Failure) and self.fallback is not None:
            return await self._apply_fallback(outcome.error, spec)

        return outcome

    async def _run_attempts(self, spec: RequestSpec) -> Outcome[str]:
        breaker = self.circuit_breaker
        max_attempts = self.retry_policy.max_attempts
        last_failure: Optional[Failure] = None

        for attempt in range(1, max_attempts + 1):
            permit = await breaker.acquire() if breaker is not None else None
            if breaker is not None and permit is None:
                logger.warning(
                    "Call rejected by open circuit breaker",
                    breaker=breaker.name,
                    url=spec.url,
                    attempt=attempt,
                )
                return Failure(CircuitBreakerOpenError(breaker.name, url=spec.url))

            try:
                outcome = await self.executor.execute(spec)
            except BaseException:
                if breaker is not None:
                    breaker.abandon_trial(permit)
                raise

            if isinstance(outcome, Success):
                if breaker is not None:
                    await breaker.record_success(permit)
                if attempt > 1:
                    logger.info("Request succeeded after retry", url=spec.url, attempt=attempt)
                return outcome

            if breaker is not None:
                await breaker.record_failure(permit, outcome.error)
            last_failure = outcome

            if not self.retry_policy.should_retry(outcome.error):
                logger.warning(
                    "Non-retryable failure",
                    url=spec.url,
                    attempt=attempt,
                    kind=outcome.error.kind.value,
                    error=outcome.error.message,
                )
                return outcome

            if attempt < max_attempts:
                delay = self.retry_policy.calculate_delay(attempt)
                logger.warning(
                    "Attempt failed, retrying",
                    url=spec.url,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    kind=outcome.error.kind.value,
                    error=outcome.error.message,
                    delay_seconds=delay,
                )
                if delay > 0:
                    await asyncio.sleep(delay)

        if max_attempts > 1:
            logger.error(
                "All retry attempts exhausted",
                url=spec.url,
                max_attempts=max_attempts,
                error=last_failure.error.message,
            )
        return last_failure

    @staticmethod
    def _decode(raw: str, decode: Decoder, spec: RequestSpec) -> Outcome:
        try:
            return Success(decode(raw))
        except RestClientDecodeError as e:
            e.url = e.url or spec.url
            logger.warning("Response could not be decoded", url=spec.url, error=e.message)
            return Failure(e)

    async def _apply_fallback(self, error: RestClientError, spec: RequestSpec) -> Outcome:
        logger.info(
            "Invoking fallback",
            url=spec.url,
            kind=error.kind.value,
            error=error.message,
        )
        try:
            value = self.fallback(error)
            if inspect.isawaitable(value):
                value = await value
        except RestClientError as e:
            logger.warning("Fallback failed", url=spec.url, error=e.message)
            return Failure(e)
        return Success(value)
