"""HTTP transport shared by the provider clients.

Hides httpx details: default headers, status-code checks and mapping of
transport faults into the chat core's error taxonomy.
"""

import logging
from collections.abc import AsyncIterator, Mapping
from enum import Enum
from typing import Any

import httpx

from ..errors import HTTPStatusError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json"}


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class HTTPTransport:
    """Sends requests and line streams over a shared httpx client.

    Supports async context manager protocol:
        async with HTTPTransport() as transport:
            data = await transport.request(url, HTTPMethod.GET, headers)
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 60.0):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """The underlying httpx client, shared with SDK clients."""
        return self._client

    async def request(
        self,
        url: str,
        method: HTTPMethod,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None
    ) -> bytes:
        """Perform a request and return the response body.

        Raises:
            HTTPStatusError: If the response status is not 2xx
            NetworkError: If the request could not be completed
        """
        logger.debug("Request %s %s", method.value, url)
        try:
            response = await self._client.request(
                method.value,
                url,
                headers=self._headers(headers),
                content=body
            )
        except httpx.HTTPError as e:
            raise NetworkError(str(e)) from e

        logger.debug("Response %s for %s %s", response.status_code, method.value, url)
        _check_status(response)
        return response.content

    async def stream_lines(
        self,
        url: str,
        method: HTTPMethod,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None
    ) -> AsyncIterator[str]:
        """Perform a streaming request and yield the response line by line.

        The status code is checked before the first line is yielded.

        Raises:
            HTTPStatusError: If the response status is not 2xx
            NetworkError: If the connection fails before or during the stream
        """
        logger.debug("Stream %s %s", method.value, url)
        try:
            async with self._client.stream(
                method.value,
                url,
                headers=self._headers(headers),
                content=body
            ) as response:
                if response.is_error:
                    await response.aread()
                _check_status(response)
                async for line in response.aiter_lines():
                    yield line
        except httpx.HTTPError as e:
            raise NetworkError(str(e)) from e

    async def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HTTPTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @staticmethod
    def _headers(headers: Mapping[str, str] | None) -> dict[str, str]:
        return {**DEFAULT_HEADERS, **(headers or {})}


def _check_status(response: httpx.Response) -> None:
    if not response.is_success:
        raise HTTPStatusError(response.status_code)
