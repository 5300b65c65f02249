"""
Product Page Extractor
======================
Turns one product URL into an ExtractionResult:

1. Fetch the page live (browser headers, no cache)
2. Short-circuit on bot blocks (503) and CAPTCHA walls
3. Run the selector fallback chains for title / price / image / rating
4. Score listing quality (images, bullets, description, rich content)
5. Pick the critical review among the first visible reviews
6. Recover the star histogram (table rows, then raw-markup regex)
7. Deep fetch: when the visible reviews are all favourable, read the
   "critical, most recent" reviews page once

Nothing here raises to the caller. Failures come back as data.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from core.config import settings
from workers.market_scraper.fetcher import CurlPageFetcher, PageFetcher
from workers.market_scraper.models import (
    ExtractionErrorKind,
    ExtractionResult,
    ProductSnapshot,
    ReviewExcerpt,
)
from workers.market_scraper.reviews import (
    REVIEW_BLOCK,
    extract_rating_distribution,
    extract_reviews,
    histogram_from_tables,
    parse_review_block,
    pick_critical_review,
)
from workers.market_scraper.selectors import (
    IMAGE_CHAIN,
    PRICE_CHAIN,
    RATING_CHAIN,
    TITLE_CHAIN,
    extract_quality_metrics,
    first_non_empty,
    has_captcha,
)

logger = logging.getLogger(__name__)

# Catalog identifier (ASIN) in "/dp/<ID>" and "/gp/product/<ID>" URLs
_ASIN_PATTERN = re.compile(r"/(?:dp|gp/product)/([A-Z0-9]{10})")

_CRITICAL_REVIEWS_PATH = (
    "/product-reviews/{asin}/ref=cm_cr_arp_d_viewopt_sr"
    "?ie=UTF8&filterByStar=critical&sortBy=recent"
)

# Reviews on the critical-filtered page are negative unless proven otherwise
_CRITICAL_PAGE_DEFAULT_STAR = 1.0


def extract_catalog_id(url: str) -> str | None:
    match = _ASIN_PATTERN.search(url)
    return match.group(1) if match else None


def build_critical_reviews_url(url: str, fallback_origin: str | None = None) -> str | None:
    """Critical-reviews, most-recent-first URL for the product behind ``url``."""
    asin = extract_catalog_id(url)
    if asin is None:
        return None
    parts = urlsplit(url)
    if parts.scheme and parts.netloc:
        origin = f"{parts.scheme}://{parts.netloc}"
    else:
        origin = (fallback_origin or settings.marketplace_base_url).rstrip("/")
    return origin + _CRITICAL_REVIEWS_PATH.format(asin=asin)


def needs_deep_fetch(review: ReviewExcerpt | None, threshold: float | None = None) -> bool:
    """True when no review was found or even the worst one is favourable."""
    if threshold is None:
        threshold = settings.deep_fetch_star_threshold
    return review is None or review.star_value >= threshold


class ProductPageExtractor:
    """
    Extracts product, review and histogram data from marketplace product pages.

    The fetcher is injected so tests (and alternative transports) can
    replace the curl_cffi default.
    """

    def __init__(
        self,
        fetcher: PageFetcher | None = None,
        *,
        review_scan_limit: int | None = None,
        star_tokens: Sequence[str] | None = None,
        block_status_codes: Sequence[int] | None = None,
    ) -> None:
        self.fetcher = fetcher or CurlPageFetcher()
        self.review_scan_limit = review_scan_limit or settings.review_scan_limit
        self.star_tokens = tuple(star_tokens or settings.histogram_star_tokens)
        self.block_status_codes = frozenset(block_status_codes or settings.bot_block_status_codes)

    # ── Public interface ───────────────────────────────────────────────

    async def extract(self, url: str) -> ExtractionResult:
        try:
            return await self._extract(url)
        except Exception as exc:
            logger.warning("Extraction failed for %s: %s", url, exc)
            return ExtractionResult.failure(
                ExtractionErrorKind.NETWORK_ERROR,
                str(exc) or exc.__class__.__name__,
            )

    async def extract_many(
        self,
        urls: Sequence[str],
        max_concurrency: int | None = None,
    ) -> list[ExtractionResult]:
        """Extract several pages concurrently, bounded; results keep input order."""
        semaphore = asyncio.Semaphore(max_concurrency or settings.max_concurrent_fetches)

        async def _bounded(url: str) -> ExtractionResult:
            async with semaphore:
                return await self.extract(url)

        return list(await asyncio.gather(*(_bounded(url) for url in urls)))

    # ── Pipeline ───────────────────────────────────────────────────────

    async def _extract(self, url: str) -> ExtractionResult:
        page = await self.fetcher.fetch(url)

        if page.status_code in self.block_status_codes:
            logger.warning("Bot block on %s (HTTP %d)", url, page.status_code)
            return ExtractionResult.failure(
                ExtractionErrorKind.BOT_DETECTED,
                f"Bot activity detected ({page.status_code} Service Unavailable). "
                "The marketplace is refusing automated requests.",
                status_code=page.status_code,
            )

        soup = BeautifulSoup(page.text, "html.parser")

        if has_captcha(soup):
            logger.warning("CAPTCHA wall on %s", url)
            return ExtractionResult.failure(
                ExtractionErrorKind.CAPTCHA_WALL,
                "Blocked by a CAPTCHA wall. The page requires a human challenge.",
                status_code=200,
            )

        title = first_non_empty(soup, TITLE_CHAIN)
        if not title:
            logger.warning("No product title on %s, layout not recognized", url)
            return ExtractionResult.failure(
                ExtractionErrorKind.UNRECOGNIZED_LAYOUT,
                "Loaded page but could not find the product title. "
                "Layout might be different or content is dynamic.",
                status_code=200,
            )

        critical = pick_critical_review(extract_reviews(soup, self.review_scan_limit))
        distribution = extract_rating_distribution(soup, self.star_tokens)

        if needs_deep_fetch(critical):
            critical, distribution = await self._deep_fetch(url, critical, distribution)

        snapshot = ProductSnapshot(
            title=title,
            price_text=first_non_empty(soup, PRICE_CHAIN),
            image_url=first_non_empty(soup, IMAGE_CHAIN),
            rating_text=first_non_empty(soup, RATING_CHAIN),
            metrics=extract_quality_metrics(soup),
            critical_review=critical,
            rating_distribution=distribution,
        )
        logger.info(
            "Extracted %s: price=%r, critical_review=%s, histogram=%d rows",
            url,
            snapshot.price_text,
            f"{critical.star_value:.1f}★" if critical else "none",
            len(distribution),
        )
        return ExtractionResult.ok(snapshot)

    async def _deep_fetch(
        self,
        url: str,
        critical: ReviewExcerpt | None,
        distribution: dict[str, str],
    ) -> tuple[ReviewExcerpt | None, dict[str, str]]:
        """
        One best-effort request to the critical-reviews page.

        Any failure keeps what the primary page already gave us.
        """
        critical_url = build_critical_reviews_url(url)
        if critical_url is None:
            logger.debug("No catalog id in %s, skipping deep fetch", url)
            return critical, distribution

        try:
            page = await self.fetcher.fetch(critical_url)
            if not page.ok:
                logger.info("Deep fetch for %s returned HTTP %d", url, page.status_code)
                return critical, distribution

            soup = BeautifulSoup(page.text, "html.parser")
            block = soup.select_one(REVIEW_BLOCK)
            deep_review = (
                parse_review_block(block, default_star=_CRITICAL_PAGE_DEFAULT_STAR)
                if block is not None
                else None
            )
            if deep_review is None:
                logger.debug("Deep fetch for %s found no usable review", url)
                return critical, distribution

            if not distribution:
                distribution = histogram_from_tables(soup, self.star_tokens)
            logger.info("Deep fetch for %s found a %.1f★ review", url, deep_review.star_value)
            return deep_review, distribution
        except Exception as exc:
            logger.warning("Deep fetch failed for %s: %s", url, exc)
            return critical, distribution


async def extract(url: str, fetcher: PageFetcher | None = None) -> ExtractionResult:
    """Module-level shortcut: ``await extract(url)``."""
    return await ProductPageExtractor(fetcher).extract(url)
