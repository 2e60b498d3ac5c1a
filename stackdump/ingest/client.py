"""HTTP client for fetching dump archives.

This module provides a small async client over httpx with:
- HEAD requests for the announced content length
- Streaming GET responses for large archives
- Redirects followed, no timeout unless one is configured
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator

import httpx


# Statuses accepted for both HEAD and GET
OK_STATUSES = frozenset({200, 206})


class DownloadError(Exception):
    """Raised when an archive cannot be fetched."""


class UnexpectedStatusError(DownloadError):
    """Raised when the server answers with a status outside 200/206."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"unexpected HTTP status {status_code}")


class MissingContentLengthError(DownloadError):
    """Raised when the server does not announce a usable content length."""


@dataclass
class DumpClient:
    """Async HTTP client used by the download stage.

    Use as an async context manager; the underlying httpx client lives for
    the whole ingest run and is shared by all jobs.
    """

    user_agent: str
    timeout: float | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Build request headers."""
        return {"User-Agent": self.user_agent}

    async def __aenter__(self) -> "DumpClient":
        self._client = httpx.AsyncClient(
            headers=self.headers,
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with.")
        return self._client

    async def content_length(self, url: str) -> int:
        """Return the byte length the server announces for ``url``.

        Raises:
            UnexpectedStatusError: Status outside 200/206
            MissingContentLengthError: No (or a non-numeric) Content-Length
            DownloadError: Transport failure
        """
        client = self._require_client()
        try:
            response = await client.head(url)
        except httpx.TransportError as e:
            raise DownloadError(f"request failed: {e}") from e

        if response.status_code not in OK_STATUSES:
            raise UnexpectedStatusError(response.status_code, url)

        header = response.headers.get("content-length")
        if header is None:
            raise MissingContentLengthError("no content length announced")
        try:
            length = int(header)
        except ValueError:
            raise MissingContentLengthError(f"invalid content length {header!r}")
        if length < 0:
            raise MissingContentLengthError(f"invalid content length {header!r}")
        return length

    @asynccontextmanager
    async def stream(self, url: str) -> AsyncIterator[httpx.Response]:
        """Open a streaming GET for ``url``.

        Transport errors while the body is read are raised as DownloadError.
        """
        client = self._require_client()
        try:
            async with client.stream("GET", url) as response:
                if response.status_code not in OK_STATUSES:
                    raise UnexpectedStatusError(response.status_code, url)
                yield response
        except httpx.TransportError as e:
            raise DownloadError(f"transfer failed: {e}") from e
