"""
Selector fallback chains for product-page fields.

Every field is an ordered tuple of small strategy functions
``(soup) -> str``. ``first_non_empty`` evaluates them lazily and
stops at the first one that yields text, so each tier can be tested
on its own and new selectors slot in without touching the others.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from bs4 import BeautifulSoup

from workers.market_scraper.models import ListingQualityMetrics

Strategy = Callable[[BeautifulSoup], str]


def first_non_empty(soup: BeautifulSoup, strategies: Iterable[Strategy]) -> str:
    for strategy in strategies:
        value = strategy(soup)
        if value:
            return value
    return ""


def select_text(selector: str) -> Strategy:
    """Stripped text of the first element matching ``selector``."""

    def _strategy(soup: BeautifulSoup) -> str:
        node = soup.select_one(selector)
        return node.get_text().strip() if node else ""

    _strategy.__name__ = f"text({selector})"
    return _strategy


def select_attr(selector: str, attr: str) -> Strategy:
    """Stripped attribute value of the first element matching ``selector``."""

    def _strategy(soup: BeautifulSoup) -> str:
        node = soup.select_one(selector)
        if node is None:
            return ""
        value = node.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        return (value or "").strip()

    _strategy.__name__ = f"attr({selector}@{attr})"
    return _strategy


# ── Field chains (priority order) ──────────────────────────────────────

TITLE_CHAIN: tuple[Strategy, ...] = (
    select_text("#productTitle"),
)

PRICE_CHAIN: tuple[Strategy, ...] = (
    select_text(".a-price .a-offscreen"),
    select_text("#price_inside_buybox"),
    select_text(".a-price .a-text-price"),
)

IMAGE_CHAIN: tuple[Strategy, ...] = (
    select_attr("#landingImage", "src"),
)

RATING_CHAIN: tuple[Strategy, ...] = (
    select_attr("#acrPopover", "title"),
    select_text(".a-icon-alt"),
)

DESCRIPTION_CHAIN: tuple[Strategy, ...] = (
    select_text("#productDescription"),
    select_text("#aplus"),
)

CAPTCHA_FORM = "form[action*='validateCaptcha']"


def has_captcha(soup: BeautifulSoup) -> bool:
    return soup.select_one(CAPTCHA_FORM) is not None


# ── Listing quality ────────────────────────────────────────────────────

def extract_quality_metrics(soup: BeautifulSoup) -> ListingQualityMetrics:
    # The main image is always there even when no thumbnail strip is rendered
    image_count = len(soup.select("#altImages ul li")) or 1

    bullets = [
        span.get_text().strip()
        for span in soup.select("#feature-bullets ul li span.a-list-item")
    ]
    description = first_non_empty(soup, DESCRIPTION_CHAIN)

    return ListingQualityMetrics(
        image_count=image_count,
        bullet_count=sum(1 for text in bullets if text),
        description_length=len(description),
        has_rich_content=soup.select_one("#aplus") is not None,
    )
