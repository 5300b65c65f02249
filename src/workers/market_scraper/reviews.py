"""
Review and rating-histogram extraction.

Marketplaces sort reviews by helpfulness, which in practice means the
visible ones are mostly positive. We sample the first few review
blocks, keep the lowest-rated one as the *critical review*, and
recover the star histogram through a structured tier (table rows)
with a raw-markup regex tier behind it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from bs4 import BeautifulSoup, Tag

from workers.market_scraper.models import ReviewExcerpt

logger = logging.getLogger(__name__)

REVIEW_BLOCK = 'div[data-hook="review"]'
REVIEW_TITLE = 'a[data-hook="review-title"]'
REVIEW_BODY = ('span[data-hook="review-body"]', ".review-text-content")
REVIEW_STARS = 'i[data-hook="review-star-rating"]'

HISTOGRAM_ROW_SELECTORS = (
    "#histogramTable tr",
    ".a-histogram-row",
    '[data-hook="histogram-row"]',
)

_NUMBER = re.compile(r"\d+(?:\.\d+)?")
# "5つ星のうち1.0": the leading 5 is the scale, the score follows のうち
_JA_SCORE = re.compile(r"つ星のうち\s*(\d+(?:\.\d+)?)")
_PERCENT = re.compile(r"\d+%")

DEFAULT_STAR = 5.0


def parse_star_value(rating_text: str, default: float = DEFAULT_STAR) -> float:
    """
    Read the star score out of a rating label.

    "1.0 out of 5 stars" -> 1.0, "5つ星のうち2.0" -> 2.0. Text without a
    number yields ``default`` (5.0), so a missing score never reads as
    a complaint.
    """
    ja = _JA_SCORE.search(rating_text)
    if ja:
        return float(ja.group(1))
    match = _NUMBER.search(rating_text)
    return float(match.group(0)) if match else default


def _text(node: Tag, selector: str) -> str:
    found = node.select_one(selector)
    return found.get_text().strip() if found else ""


def parse_review_block(block: Tag, default_star: float = DEFAULT_STAR) -> ReviewExcerpt | None:
    """Turn one review block into an excerpt; blocks without title or body are skipped."""
    title = _text(block, REVIEW_TITLE)
    body = ""
    for selector in REVIEW_BODY:
        body = _text(block, selector)
        if body:
            break
    if not (title and body):
        return None

    rating_text = _text(block, REVIEW_STARS)
    return ReviewExcerpt(
        title=title,
        body=body,
        rating_text=rating_text,
        star_value=parse_star_value(rating_text, default_star),
    )


def extract_reviews(soup: BeautifulSoup, limit: int = 6) -> list[ReviewExcerpt]:
    """Parse the first ``limit`` review blocks, in page order."""
    reviews: list[ReviewExcerpt] = []
    for block in soup.select(REVIEW_BLOCK)[:limit]:
        review = parse_review_block(block)
        if review is not None:
            reviews.append(review)
    return reviews


def pick_critical_review(reviews: Sequence[ReviewExcerpt]) -> ReviewExcerpt | None:
    """Lowest star value wins; the stable sort keeps the first one on ties."""
    if not reviews:
        return None
    return sorted(reviews, key=lambda r: r.star_value)[0]


# ── Histogram ──────────────────────────────────────────────────────────

def _star_key_pattern(tokens: Sequence[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(t) for t in tokens)
    return re.compile(rf"(\d)(?=\s*(?:{alternatives}))", re.IGNORECASE)


def _row_percentage(row: Tag) -> str:
    for selector in ("td:nth-child(3)", ".a-text-right a", ".a-text-right"):
        found = row.select_one(selector)
        if found:
            text = found.get_text().strip()
            if text:
                return text
    # div-based rows keep the percentage in an aria-label or plain text
    return row.get("aria-label", "") or row.get_text(" ", strip=True)


def histogram_from_rows(
    rows: Sequence[Tag],
    star_tokens: Sequence[str] = ("star", "つ星"),
) -> dict[str, str]:
    star_key = _star_key_pattern(star_tokens)
    distribution: dict[str, str] = {}
    for row in rows:
        percentage = _row_percentage(row)
        percent = _PERCENT.search(percentage)
        if not percent:
            continue
        key = star_key.search(row.get_text(" ", strip=True))
        if key and key.group(1) in "12345":
            distribution[key.group(1)] = percent.group(0)
    return distribution


def histogram_from_tables(
    soup: BeautifulSoup,
    star_tokens: Sequence[str] = ("star", "つ星"),
) -> dict[str, str]:
    """Structured tier: first row selector that yields any data wins."""
    for selector in HISTOGRAM_ROW_SELECTORS:
        rows = soup.select(selector)
        if not rows:
            continue
        distribution = histogram_from_rows(rows, star_tokens)
        if distribution:
            logger.debug("Histogram recovered from %s (%d rows)", selector, len(distribution))
            return distribution
    return {}


def histogram_from_markup(
    soup: BeautifulSoup,
    star_tokens: Sequence[str] = ("star", "つ星"),
) -> dict[str, str]:
    """
    Regex tier over raw markup. One pattern per star value; the filler
    between the star marker and the percentage is capped at 100
    non-``%`` characters so a row never borrows its neighbour's value.

    Review rating labels ("5.0 out of 5 stars", "5つ星のうち4.0") are not
    histogram markers: a token followed by a plural "s" or by "のうち"
    does not match, nor does a star digit that ends a decimal.
    """
    container = soup.select_one("#reviewsMedley") or soup.body or soup
    markup = str(container)
    alternatives = "|".join(rf"{re.escape(t)}(?!s|のうち)" for t in star_tokens)

    distribution: dict[str, str] = {}
    for star in "54321":
        pattern = re.compile(
            rf"(?<![\d.]){star}\s*(?:{alternatives})[^%]{{0,100}}?(\d+)%",
            re.IGNORECASE,
        )
        match = pattern.search(markup)
        if match:
            distribution[star] = f"{match.group(1)}%"
    return distribution


def extract_rating_distribution(
    soup: BeautifulSoup,
    star_tokens: Sequence[str] = ("star", "つ星"),
) -> dict[str, str]:
    return histogram_from_tables(soup, star_tokens) or histogram_from_markup(soup, star_tokens)
