"""Shared HTTP client for the NVIDIA feeds."""
from __future__ import annotations

from typing import Optional

import httpx

from . import logger
from .headers import get_headers

log = logger.get("HTTP")

DEFAULT_TIMEOUT = 10.0


class UpstreamError(Exception):
    """A feed call failed: transport error, non-200 or a non-JSON body."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.message = message
        self.status_code = status_code
        super().__init__(f"{url}: {message}")


class HTTPClient:
    """
    Shared HTTP/2 client with pooled connections.

    Calls are single-shot. The poll loops own the retry policy: the next
    scheduled tick is the retry.
    """

    def __init__(
        self,
        locale: str = "fi-fi",
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.locale = locale
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = httpx.Timeout(timeout, connect=5.0)
        self._limits = httpx.Limits(
            max_keepalive_connections=10,
            max_connections=20,
            keepalive_expiry=30.0,
        )

    async def __aenter__(self) -> "HTTPClient":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def start(self) -> None:
        """Initialize the client."""
        if self._client is None:
            client_kwargs = {
                "timeout": self._timeout,
                "limits": self._limits,
                "follow_redirects": True,
                "headers": get_headers(self.locale),
            }
            if self._transport is not None:
                client_kwargs["transport"] = self._transport
            else:
                client_kwargs["http2"] = True

            self._client = httpx.AsyncClient(**client_kwargs)

    async def close(self) -> None:
        """Close the client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the underlying client."""
        if self._client is None:
            raise RuntimeError("Client not started. Call start() first.")
        return self._client

    async def get(self, url: str, params: Optional[dict] = None) -> httpx.Response:
        """GET request. Transport errors surface as UpstreamError."""
        try:
            return await self.client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise UpstreamError(url, f"timeout ({type(e).__name__})") from e
        except httpx.RequestError as e:
            raise UpstreamError(url, f"request error: {e}") from e

    async def get_json(self, url: str, params: Optional[dict] = None) -> dict:
        """
        GET and decode a JSON object.

        Raises:
            UpstreamError: On transport failure, non-200 status or bad JSON
        """
        response = await self.get(url, params=params)

        if response.status_code != 200:
            raise UpstreamError(
                url, f"HTTP {response.status_code}", status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(url, f"non-JSON response: {e}", status_code=200) from e

        if not isinstance(data, dict):
            raise UpstreamError(url, "response is not a JSON object", status_code=200)

        return data
