"""
Aggregation helpers: extraction results -> CollectionResult, stored
competitor state -> AggregateMarketStats.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from core.models import Sentiment
from workers.collector.models import (
    CollectedProduct,
    CollectedReviewSummary,
    CollectionResult,
    CompetitorSnapshot,
)
from workers.market_scraper.models import ExtractionResult, ReviewExcerpt
from workers.market_scraper.reviews import parse_star_value
from workers.opportunity.models import AggregateMarketStats

logger = logging.getLogger(__name__)

_PRICE_NUMBER = re.compile(r"\d[\d,]*(?:\.\d+)?")
_HAS_DIGIT = re.compile(r"\d")


def parse_price(price_text: str) -> float | None:
    """Parse "￥3,980" -> 3980.0, "$12.99" -> 12.99. ``None`` when there is no number."""
    match = _PRICE_NUMBER.search(price_text or "")
    if not match:
        return None
    return float(match.group(0).replace(",", ""))


def parse_rating(rating_text: str) -> float | None:
    """Average rating from a label; ``None`` instead of a default when absent."""
    if not _HAS_DIGIT.search(rating_text or ""):
        return None
    return parse_star_value(rating_text)


def classify_sentiment(average_rating: float) -> Sentiment:
    if average_rating >= 4.0:
        return Sentiment.POSITIVE
    if average_rating >= 3.0:
        return Sentiment.NEUTRAL
    return Sentiment.NEGATIVE


def _summary_line(worst: ReviewExcerpt | None, page_count: int) -> str:
    if worst is None:
        return f"Ratings collected from {page_count} product page(s); no critical review found."
    return (
        f"Ratings collected from {page_count} product page(s). "
        f"Most critical review ({worst.star_value:.1f}★): {worst.title}"
    )


def build_collection_result(
    competitor_id: int,
    extractions: Sequence[tuple[str, ExtractionResult]],
    currency: str = "JPY",
) -> CollectionResult:
    """
    Fold ``(url, ExtractionResult)`` pairs into a CollectionResult.

    Failed extractions and unparseable prices are left out of the
    product list; failed URLs are reported back.
    """
    result = CollectionResult(competitor_id=competitor_id)
    ratings: list[float] = []
    worst: ReviewExcerpt | None = None

    for url, extraction in extractions:
        if not extraction.success or extraction.data is None:
            result.failed_urls.append(url)
            continue

        data = extraction.data
        price = parse_price(data.price_text)
        if price is None:
            logger.debug("No parseable price on %s (%r)", url, data.price_text)
        else:
            result.products.append(
                CollectedProduct(name=data.title, url=url, price=price, currency=currency)
            )

        rating = parse_rating(data.rating_text)
        if rating is not None:
            ratings.append(rating)

        review = data.critical_review
        if review is not None and (worst is None or review.star_value < worst.star_value):
            worst = review

    if ratings:
        average = sum(ratings) / len(ratings)
        result.review_summary = CollectedReviewSummary(
            average_rating=round(average, 2),
            review_count=len(ratings),
            sentiment=classify_sentiment(average),
            summary=_summary_line(worst, len(ratings)),
        )
    return result


def build_market_stats(
    category_name: str,
    competitors: Sequence[CompetitorSnapshot],
    ranking_url_count: int = 0,
) -> AggregateMarketStats | None:
    """
    Average the current product prices and each competitor's latest
    rating. No competitors means no analysis is possible: ``None``.
    """
    if not competitors:
        return None

    prices = [p for c in competitors for p in c.product_prices if p]
    ratings = [c.latest_rating for c in competitors if c.latest_rating is not None]

    return AggregateMarketStats(
        category_name=category_name,
        avg_price=sum(prices) / len(prices) if prices else 0.0,
        avg_rating=sum(ratings) / len(ratings) if ratings else 0.0,
        ranking_url_count=ranking_url_count,
        competitor_count=len(competitors),
    )
