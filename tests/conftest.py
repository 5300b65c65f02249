"""
Shared test fixtures: product-page HTML builders and a stub fetcher.

Nothing here touches the network; the extractor gets a StubFetcher
that serves canned pages per URL and records every request.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import Base, build_engine, build_session_factory, init_models
from workers.market_scraper.models import FetchedPage

PRODUCT_URL = "https://www.amazon.co.jp/dp/B0ABCDEFGH"
CRITICAL_URL = (
    "https://www.amazon.co.jp/product-reviews/B0ABCDEFGH/ref=cm_cr_arp_d_viewopt_sr"
    "?ie=UTF8&filterByStar=critical&sortBy=recent"
)


class StubFetcher:
    """Serves canned responses; a value that is an Exception gets raised."""

    def __init__(self, pages: dict[str, FetchedPage | Exception]) -> None:
        self.pages = pages
        self.calls: list[str] = []

    async def fetch(self, url: str) -> FetchedPage:
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            return FetchedPage(status_code=404, text="", url=url)
        if isinstance(page, Exception):
            raise page
        return page


def review_html(title: str, body: str, rating: str) -> str:
    return f"""
    <div data-hook="review">
      <a data-hook="review-title" href="#"><span>{title}</span></a>
      <i data-hook="review-star-rating"><span class="a-icon-alt">{rating}</span></i>
      <span data-hook="review-body"><span>{body}</span></span>
    </div>
    """


def histogram_table_html(rows: dict[str, str], token: str = "star") -> str:
    cells = "".join(
        f'<tr><td><a href="#">{star} {token}</a></td>'
        f'<td><div class="a-meter"></div></td>'
        f'<td class="a-text-right"><a href="#">{pct}</a></td></tr>'
        for star, pct in rows.items()
    )
    return f'<table id="histogramTable">{cells}</table>'


def product_page(
    *,
    title: str = "Wireless Earbuds X1",
    price: str = "￥3,980",
    image: str = "https://m.media-amazon.com/images/I/main.jpg",
    rating: str = "5つ星のうち4.2",
    thumbnails: int = 0,
    bullets: tuple[str, ...] = (),
    description: str | None = None,
    aplus: str | None = None,
    reviews: list[tuple[str, str, str]] | None = None,
    histogram: str = "",
) -> str:
    parts = ["<html><body>"]
    if title:
        parts.append(f'<span id="productTitle">  {title}  </span>')
    if price:
        parts.append(f'<span class="a-price"><span class="a-offscreen">{price}</span></span>')
    if image:
        parts.append(f'<img id="landingImage" src="{image}"/>')
    if rating:
        parts.append(f'<span id="acrPopover" title="{rating}"></span>')
    if thumbnails:
        items = "".join("<li><img/></li>" for _ in range(thumbnails))
        parts.append(f'<div id="altImages"><ul>{items}</ul></div>')
    if bullets:
        items = "".join(f'<li><span class="a-list-item">{b}</span></li>' for b in bullets)
        parts.append(f'<div id="feature-bullets"><ul>{items}</ul></div>')
    if description is not None:
        parts.append(f'<div id="productDescription">{description}</div>')
    if aplus is not None:
        parts.append(f'<div id="aplus">{aplus}</div>')
    parts.append('<div id="reviewsMedley">')
    parts.append(histogram)
    for review in reviews or []:
        parts.append(review_html(*review))
    parts.append("</div></body></html>")
    return "".join(parts)


def page(html: str, status_code: int = 200, url: str = PRODUCT_URL) -> FetchedPage:
    return FetchedPage(status_code=status_code, text=html, url=url)


@pytest_asyncio.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Fresh in-memory SQLite database per test."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_models(engine)
    async with build_session_factory(engine)() as session:
        yield session
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
