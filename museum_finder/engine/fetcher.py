"""Asynchronous HTTP fetching of candidate pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

import httpx
import structlog

from ..config import HttpConfig

BINARY_CONTENT_TYPES = (
    "application/pdf",
    "application/zip",
    "application/octet-stream",
    "application/vnd.",
    "image/",
    "audio/",
    "video/",
    "font/",
)


class FetchError(RuntimeError):
    """A single candidate URL could not be turned into page text."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)


def is_binary_content_type(content_type: str) -> bool:
    ct = content_type.lower().split(";")[0].strip()
    return any(ct.startswith(prefix) for prefix in BINARY_CONTENT_TYPES)


class Fetcher:
    """Shared async client issuing single GET requests without retries.

    HTTP status codes are not treated as failures: any text body is handed
    to the keyword check. Transport errors, timeouts, malformed URLs and
    binary bodies raise :class:`FetchError`.
    """

    def __init__(
        self,
        http_config: HttpConfig | None = None,
        client: httpx.AsyncClient | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.http_config = http_config or HttpConfig()
        self.logger = logger or structlog.get_logger("museum_finder.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=self.http_config.follow_redirects,
            timeout=self.http_config.timeout,
            headers=(
                {"User-Agent": self.http_config.user_agent}
                if self.http_config.user_agent
                else None
            ),
        )

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, url: str) -> FetchResponse:
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            raise FetchError(url, "timeout") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc
        content_type = response.headers.get("content-type", "")
        if content_type and is_binary_content_type(content_type):
            raise FetchError(url, f"non-text body ({content_type})")
        try:
            text = response.text
        except (LookupError, UnicodeDecodeError) as exc:
            raise FetchError(url, f"undecodable body: {exc}") from exc
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            text=text,
            headers=dict(response.headers),
        )

    async def fetch_text(self, url: str) -> str:
        response = await self.fetch(url)
        self.logger.debug("fetch_completed", url=url, status=response.status_code)
        return response.text


__all__ = ["FetchError", "FetchResponse", "Fetcher", "is_binary_content_type"]
