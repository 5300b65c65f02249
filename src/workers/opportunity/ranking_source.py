"""
Ranking signal sources.

No real keyword/ranking API is wired in yet. ``SimulatedRankingSource``
is an explicit stub that fabricates a plausible top-10 sample and the
fixed keyword templates, so the enrichment path can run end to end.
"""

from __future__ import annotations

import logging
import random
from typing import Protocol

from core.config import settings
from workers.opportunity.models import (
    AggregateMarketStats,
    KeywordCandidate,
    RankingSignals,
    TopListing,
)

logger = logging.getLogger(__name__)

# (suffix, monthly volume, difficulty 0-100)
_KEYWORD_TEMPLATES: tuple[tuple[str, int, int], ...] = (
    ("small", 5000, 30),
    ("mute", 3000, 20),
    ("design", 8000, 80),
    ("professional", 1500, 10),
    ("cheap", 20000, 95),
)

_UNBRANDED = "Unknown Brand"


class RankingSource(Protocol):
    def signals_for(self, stats: AggregateMarketStats) -> RankingSignals: ...


def keyword_candidates_for(category_name: str) -> tuple[KeywordCandidate, ...]:
    return tuple(
        KeywordCandidate(word=f"{category_name} {suffix}", volume=volume, difficulty=difficulty)
        for suffix, volume, difficulty in _KEYWORD_TEMPLATES
    )


class SimulatedRankingSource:
    """Random top-10 sample around the category's average price. Stub only."""

    def __init__(
        self,
        seed: int | None = None,
        major_brands: list[str] | None = None,
        sample_size: int = 10,
    ) -> None:
        self._rng = random.Random(seed if seed is not None else settings.ranking_simulation_seed)
        self.major_brands = tuple(major_brands or settings.major_brands)
        self.sample_size = sample_size

    def signals_for(self, stats: AggregateMarketStats) -> RankingSignals:
        if stats.ranking_url_count <= 0:
            return RankingSignals(ranking_url_count=0, major_brands=frozenset(self.major_brands))

        listings = tuple(self._listing(stats.avg_price) for _ in range(self.sample_size))
        logger.debug(
            "Simulated %d ranking listings for %s", len(listings), stats.category_name
        )
        return RankingSignals(
            ranking_url_count=stats.ranking_url_count,
            keyword_candidates=keyword_candidates_for(stats.category_name),
            top_listings=listings,
            major_brands=frozenset(self.major_brands),
        )

    def _listing(self, avg_price: float) -> TopListing:
        rng = self._rng
        brand = rng.choice(self.major_brands) if rng.random() > 0.6 else _UNBRANDED
        return TopListing(
            brand=brand,
            price=avg_price * (0.8 + rng.random() * 0.4),
            rating=3.0 + rng.random() * 2.0,
            review_count=rng.randrange(500),
        )
