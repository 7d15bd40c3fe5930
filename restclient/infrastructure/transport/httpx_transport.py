"""
httpx-backed transport.

Maintains an ``httpx.AsyncClient`` for connection reuse. The transport either
owns its client (created on ``connect`` and closed on ``close``) or borrows
one supplied by the host application, in which case closing is left to the
host.
"""

from typing import Mapping, Optional

import httpx
import structlog

from restclient.infrastructure.transport.base import (
    TransportFailure, TransportResponse, TransportTimeoutError
)
from restclient.shared.types import HttpMethod

logger = structlog.get_logger(__name__)


class HttpxTransport:
    """Async transport over ``httpx.AsyncClient``.

    Example:
        ```python
        async with HttpxTransport() as transport:
            response = await transport.send(HttpMethod.GET, url, {}, None, 5.0)
        ```
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        max_connections: int = 10,
        max_keepalive_connections: int = 5,
    ):
        self._client = client
        self._owns_client = client is None
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        )

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Open the connection pool. Safe to call multiple times."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(limits=self._limits)
        self._owns_client = True
        logger.debug("Transport connected")

    async def close(self) -> None:
        """Close the connection pool if this transport owns it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.debug("Transport closed")

    async def __aenter__(self) -> "HttpxTransport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def send(
        self,
        method: HttpMethod,
        url: str,
        headers: Mapping[str, str],
        body: Optional[str],
        timeout: Optional[float],
    ) -> TransportResponse:
        if self._client is None:
            await self.connect()

        content = body.encode("utf-8") if body is not None else None

        try:
            # The connection goes back to the pool when this block exits,
            # cancellation included.
            async with self._client.stream(
                method.value,
                url,
                headers=dict(headers),
                content=content,
                timeout=httpx.Timeout(timeout),
            ) as response:
                await response.aread()
                return TransportResponse(
                    status_code=response.status_code,
                    body=response.text,
                    headers=dict(response.headers),
                )
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(str(e) or "timed out", url=url) from e
        except httpx.HTTPError as e:
            raise TransportFailure(str(e) or type(e).__name__, url=url) from e
        except (httpx.InvalidURL, httpx.StreamError) as e:
            # Neither derives from httpx.HTTPError
            raise TransportFailure(str(e) or type(e).__name__, url=url) from e
