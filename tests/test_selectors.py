"""Tests for the selector fallback chains and listing-quality metrics."""

from bs4 import BeautifulSoup

from conftest import product_page
from workers.market_scraper.selectors import (
    PRICE_CHAIN,
    RATING_CHAIN,
    extract_quality_metrics,
    first_non_empty,
    has_captcha,
    select_attr,
    select_text,
)


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_first_non_empty_stops_at_first_hit():
    calls = []

    def tier(value):
        def _strategy(soup):
            calls.append(value)
            return value
        return _strategy

    result = first_non_empty(soup_of("<p></p>"), (tier(""), tier("second"), tier("third")))
    assert result == "second"
    assert calls == ["", "second"]


def test_first_non_empty_all_empty_returns_empty_string():
    assert first_non_empty(soup_of("<p></p>"), (select_text("#missing"),)) == ""


def test_price_chain_falls_back_to_buybox():
    html = '<span id="price_inside_buybox">  ￥1,200 </span>'
    assert first_non_empty(soup_of(html), PRICE_CHAIN) == "￥1,200"


def test_price_chain_prefers_offscreen_price():
    html = (
        '<span id="price_inside_buybox">￥9,999</span>'
        '<span class="a-price"><span class="a-offscreen">￥3,980</span></span>'
    )
    assert first_non_empty(soup_of(html), PRICE_CHAIN) == "￥3,980"


def test_rating_chain_uses_icon_alt_without_popover():
    html = '<i><span class="a-icon-alt">4.3 out of 5 stars</span></i>'
    assert first_non_empty(soup_of(html), RATING_CHAIN) == "4.3 out of 5 stars"


def test_select_attr_missing_attribute_is_empty():
    assert select_attr("#landingImage", "src")(soup_of('<img id="landingImage"/>')) == ""


def test_captcha_detection():
    html = '<form method="get" action="/errors/validateCaptcha"><input name="field-keywords"/></form>'
    assert has_captcha(soup_of(html))
    assert not has_captcha(soup_of(product_page()))


class TestQualityMetrics:
    def test_defaults_when_listing_is_bare(self):
        metrics = extract_quality_metrics(soup_of("<html><body></body></html>"))
        assert metrics.image_count == 1
        assert metrics.bullet_count == 0
        assert metrics.description_length == 0
        assert metrics.has_rich_content is False

    def test_counts_images_and_non_empty_bullets(self):
        html = product_page(thumbnails=3, bullets=("Long battery", "  ", "Noise cancelling"))
        metrics = extract_quality_metrics(soup_of(html))
        assert metrics.image_count == 3
        assert metrics.bullet_count == 2

    def test_description_prefers_product_description(self):
        html = product_page(description="  Hello world  ", aplus="Rich brand story")
        metrics = extract_quality_metrics(soup_of(html))
        assert metrics.description_length == len("Hello world")
        assert metrics.has_rich_content is True

    def test_description_falls_back_to_aplus(self):
        metrics = extract_quality_metrics(soup_of(product_page(aplus="Brand story")))
        assert metrics.description_length == len("Brand story")
        assert metrics.has_rich_content is True
