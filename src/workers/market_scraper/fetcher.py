"""
HTTP transport for product pages.

Uses curl_cffi with a browser TLS fingerprint so the marketplace sees
a regular desktop Chrome. Responses are returned as-is (no
raise_for_status): block statuses are a signal the extractor inspects.
"""

from __future__ import annotations

import logging
from typing import Protocol

from curl_cffi.requests import AsyncSession as CurlSession

from core.config import settings
from workers.market_scraper.models import FetchedPage

logger = logging.getLogger(__name__)


def default_headers() -> dict[str, str]:
    """Browser-like header set. Caching is disabled so every fetch is live."""
    return {
        "User-Agent": settings.scraper_user_agent,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": settings.scraper_accept_language,
        "Cache-Control": "no-store",
        "Pragma": "no-cache",
    }


class PageFetcher(Protocol):
    """Anything that can turn a URL into a FetchedPage."""

    async def fetch(self, url: str) -> FetchedPage: ...


class CurlPageFetcher:
    """Default PageFetcher backed by a short-lived curl_cffi session per request."""

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        impersonate: str | None = None,
    ) -> None:
        self.headers = headers or default_headers()
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.impersonate = impersonate or settings.scraper_impersonate

    async def fetch(self, url: str) -> FetchedPage:
        async with CurlSession(
            headers=self.headers,
            timeout=self.timeout,
            impersonate=self.impersonate,
        ) as client:
            response = await client.get(url)
            logger.debug("GET %s -> %d", url, response.status_code)
            return FetchedPage(
                status_code=response.status_code,
                text=response.text,
                url=str(response.url),
            )
