"""Tests for review sampling, star parsing and histogram recovery."""

import pytest
from bs4 import BeautifulSoup

from conftest import histogram_table_html, product_page, review_html
from workers.market_scraper.models import ReviewExcerpt
from workers.market_scraper.reviews import (
    extract_rating_distribution,
    extract_reviews,
    histogram_from_markup,
    histogram_from_tables,
    parse_review_block,
    parse_star_value,
    pick_critical_review,
)


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1.0 out of 5 stars", 1.0),
        ("4.5 out of 5 stars", 4.5),
        ("5つ星のうち2.0", 2.0),
        ("5つ星のうち 3", 3.0),
        ("no score here", 5.0),
        ("", 5.0),
    ],
)
def test_parse_star_value(text, expected):
    assert parse_star_value(text) == expected


def test_parse_star_value_custom_default():
    assert parse_star_value("", default=1.0) == 1.0


def test_review_block_requires_title_and_body():
    block = soup_of(review_html("", "Body only", "3.0 out of 5 stars")).select_one("div")
    assert parse_review_block(block) is None


def test_review_block_without_stars_defaults_to_five():
    block = soup_of(review_html("Nice", "Works", "")).select_one("div")
    review = parse_review_block(block)
    assert review is not None
    assert review.star_value == 5.0
    assert review.rating_text == ""


def test_extract_reviews_respects_limit():
    html = "".join(review_html(f"T{i}", f"B{i}", f"{i % 5 + 1}.0 out of 5 stars") for i in range(8))
    reviews = extract_reviews(soup_of(html), limit=6)
    assert [r.title for r in reviews] == [f"T{i}" for i in range(6)]


def _review(title: str, star: float) -> ReviewExcerpt:
    return ReviewExcerpt(title=title, body="b", rating_text=f"{star} out of 5 stars", star_value=star)


def test_pick_critical_review_minimum_wins():
    reviews = [_review("a", 5.0), _review("b", 2.0), _review("c", 3.0)]
    assert pick_critical_review(reviews).title == "b"


def test_pick_critical_review_tie_keeps_first():
    reviews = [_review("a", 4.0), _review("b", 1.0), _review("c", 1.0)]
    assert pick_critical_review(reviews).title == "b"


def test_pick_critical_review_empty():
    assert pick_critical_review([]) is None


class TestHistogram:
    def test_table_rows(self):
        html = histogram_table_html({"5": "70%", "4": "20%", "3": "5%", "2": "3%", "1": "2%"})
        assert histogram_from_tables(soup_of(html)) == {
            "5": "70%", "4": "20%", "3": "5%", "2": "3%", "1": "2%",
        }

    def test_japanese_star_token(self):
        html = histogram_table_html({"5": "61%", "1": "9%"}, token="つ星")
        assert histogram_from_tables(soup_of(html)) == {"5": "61%", "1": "9%"}

    def test_div_rows_when_table_is_absent(self):
        html = (
            '<div class="a-histogram-row"><span>4 star</span>'
            '<div class="a-text-right"><a>20%</a></div></div>'
            '<div class="a-histogram-row"><span>5 star</span>'
            '<div class="a-text-right"><a>75%</a></div></div>'
        )
        assert histogram_from_tables(soup_of(html)) == {"4": "20%", "5": "75%"}

    def test_markup_regex_fallback(self):
        html = product_page(
            histogram=(
                "<div><span>5 star</span><span>70%</span></div>"
                "<div><span>4 star</span><span>18%</span></div>"
                "<div><span>1 star</span><span>12%</span></div>"
            )
        )
        soup = soup_of(html)
        assert histogram_from_tables(soup) == {}
        assert extract_rating_distribution(soup) == {"5": "70%", "4": "18%", "1": "12%"}

    def test_markup_regex_window_is_bounded(self):
        filler = "x" * 150
        html = f'<div id="reviewsMedley"><span>5 star</span>{filler}<span>70%</span></div>'
        assert histogram_from_markup(soup_of(html)) == {}

    def test_review_rating_labels_are_not_histogram_rows(self):
        html = product_page(reviews=[("Battery", "Drops to 20% after an hour", "5.0 out of 5 stars")])
        assert extract_rating_distribution(soup_of(html)) == {}

    def test_japanese_review_rating_labels_are_not_histogram_rows(self):
        html = product_page(reviews=[("電池", "1時間で20%まで減る", "5つ星のうち5.0")])
        assert extract_rating_distribution(soup_of(html)) == {}

    def test_markup_rows_survive_alongside_review_labels(self):
        html = product_page(
            histogram="<div><span>5 star</span><span>64%</span></div>",
            reviews=[("Battery", "Drops to 20% after an hour", "4.0 out of 5 stars")],
        )
        assert extract_rating_distribution(soup_of(html)) == {"5": "64%"}

    def test_keys_are_star_values_only(self):
        html = product_page(histogram=histogram_table_html({"5": "80%", "4": "20%"}))
        distribution = extract_rating_distribution(soup_of(html))
        assert set(distribution) <= {"1", "2", "3", "4", "5"}
        assert all(value.endswith("%") for value in distribution.values())

    def test_empty_when_nothing_found(self):
        assert extract_rating_distribution(soup_of(product_page())) == {}
