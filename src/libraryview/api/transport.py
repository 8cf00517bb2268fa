"""Transport abstraction for the library REST API.

Defines the interface every transport implements plus the httpx-backed
implementation used in production. A single transport is built once at
start-up and passed into each controller; tests inject a fake instead.
"""

import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any

import httpx

from libraryview.errors import TransportError
from libraryview.settings import Settings

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Abstract base class for request transports.

    Implementations issue one request and return the decoded response
    envelope as a dict. They raise :class:`TransportError` when no envelope
    can be obtained.
    """

    @abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded envelope.

        Args:
            method: HTTP method, e.g. ``"GET"``.
            path: Server-relative path such as ``/api/library``.
            params: Optional query-string parameters.
            json: Optional JSON body.

        Returns:
            The decoded ``{code, message, data?}`` envelope.

        Raises:
            TransportError: If the request fails or the body is not an envelope.
        """
        raise NotImplementedError


class HttpTransport(Transport):
    """Transport backed by a shared :class:`httpx.AsyncClient`."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Wrap an already configured client (base URL, timeout)."""
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "HttpTransport":
        """Build a transport and its client from connection settings."""
        settings = settings or Settings()
        client = httpx.AsyncClient(
            base_url=settings.server_url,
            timeout=settings.request_timeout,
            headers={"Accept": "application/json"},
        )
        return cls(client)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded envelope."""
        logger.debug("%s %s params=%s", method, path, params)
        try:
            resp = await self.client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise TransportError(
                f"{method} {path} returned an undecodable body "
                f"(HTTP {resp.status_code})",
                status_code=resp.status_code,
            ) from exc

        # Error responses still carry an envelope; its code decides failure.
        if not isinstance(body, dict) or "code" not in body:
            raise TransportError(
                f"{method} {path} returned a non-envelope body "
                f"(HTTP {resp.status_code})",
                status_code=resp.status_code,
            )
        return body

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
