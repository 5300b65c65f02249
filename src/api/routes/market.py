"""Market API — on-demand product extraction and category analysis."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from workers.market_scraper.extractor import ProductPageExtractor
from workers.opportunity.engine import OpportunityEngine
from workers.opportunity.models import (
    AggregateMarketStats,
    KeywordCandidate,
    RankingSignals,
    TopListing,
)

router = APIRouter(prefix="/api", tags=["market"])


# ── Request schemas ───────────────────────────────────────────────────

class ExtractRequest(BaseModel):
    url: str = Field(min_length=1)


class StatsIn(BaseModel):
    category_name: str
    avg_price: float = Field(default=0.0, ge=0)
    avg_rating: float = Field(default=0.0, ge=0, le=5)
    ranking_url_count: int = Field(default=0, ge=0)


class KeywordIn(BaseModel):
    word: str
    volume: float
    difficulty: float


class ListingIn(BaseModel):
    brand: str
    price: float = 0.0
    rating: float
    review_count: int = 0


class RankingSignalsIn(BaseModel):
    ranking_url_count: int = Field(default=0, ge=0)
    keyword_candidates: list[KeywordIn] = []
    top_listings: list[ListingIn] = []
    major_brands: list[str] = []

    def to_signals(self) -> RankingSignals:
        return RankingSignals(
            ranking_url_count=self.ranking_url_count,
            keyword_candidates=tuple(KeywordCandidate(**k.model_dump()) for k in self.keyword_candidates),
            top_listings=tuple(TopListing(**item.model_dump()) for item in self.top_listings),
            major_brands=frozenset(self.major_brands),
        )


class AnalyzeRequest(BaseModel):
    stats: StatsIn | None = None
    ranking_signals: RankingSignalsIn | None = None


# ── Dependencies ──────────────────────────────────────────────────────

def get_extractor() -> ProductPageExtractor:
    return ProductPageExtractor()


def get_engine() -> OpportunityEngine:
    return OpportunityEngine()


# ── Endpoints ─────────────────────────────────────────────────────────

@router.post("/extract")
async def extract_product(
    req: ExtractRequest,
    extractor: ProductPageExtractor = Depends(get_extractor),
) -> dict:
    """Scrape one product page. Failures come back with success=false, not as HTTP errors."""
    result = await extractor.extract(req.url)
    return asdict(result)


@router.post("/opportunities/analyze")
async def analyze_opportunity(
    req: AnalyzeRequest,
    engine: OpportunityEngine = Depends(get_engine),
) -> dict:
    """
    Classify a category from its aggregate stats.

    Omitting ``stats`` (no competitors) returns ``{"proposal": null}``.
    """
    stats = AggregateMarketStats(**req.stats.model_dump()) if req.stats else None
    signals = req.ranking_signals.to_signals() if req.ranking_signals else None
    proposal = engine.analyze_category(stats, signals)
    return {"proposal": asdict(proposal) if proposal else None}
