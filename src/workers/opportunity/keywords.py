"""Keyword ranking and niche detection over externally supplied ranking signals."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from workers.opportunity.models import KeywordCandidate, ScoredKeyword, TopListing

LOW_RATING_THRESHOLD = 3.8
HIGH_VOLUME_REVIEWS = 100


def rank_keywords(candidates: Iterable[KeywordCandidate], top_n: int = 3) -> list[ScoredKeyword]:
    """
    Score = volume / difficulty, best first. ``sorted`` is stable, so ties
    keep input order. Candidates with non-positive difficulty are skipped.
    """
    scored = [
        ScoredKeyword(word=c.word, score=c.volume / c.difficulty)
        for c in candidates
        if c.difficulty > 0
    ]
    return sorted(scored, key=lambda k: k.score, reverse=True)[:top_n]


def is_niche(listings: Sequence[TopListing], major_brands: Iterable[str]) -> bool:
    """Niche (blue ocean) when major brands hold fewer than half of the sampled listings."""
    if not listings:
        return False
    brands = {b.lower() for b in major_brands}
    major_count = sum(1 for item in listings if item.brand.lower() in brands)
    return major_count * 2 < len(listings)


def unsatisfied_listings(listings: Iterable[TopListing]) -> list[TopListing]:
    """High-volume items (many reviews) with low ratings: buyers who are not happy."""
    return [
        item
        for item in listings
        if item.rating < LOW_RATING_THRESHOLD and item.review_count > HIGH_VOLUME_REVIEWS
    ]
