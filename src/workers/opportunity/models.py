"""Data models for the opportunity engine (market stats in, proposals out)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Archetype(StrEnum):
    """Market-gap classification driving the proposal template."""

    QUALITY_GAP = "QUALITY_GAP"   # expensive and badly rated
    VALUE_GAP = "VALUE_GAP"       # expensive and well rated
    BALANCED = "BALANCED"         # no strong signal


class OutcomeStatus(StrEnum):
    SUCCESS = "SUCCESS"
    SKIPPED = "SKIPPED"           # no competitors, nothing to analyze
    FAILED = "FAILED"


@dataclass(frozen=True, slots=True)
class AggregateMarketStats:
    """Category-level averages produced by the collector."""

    category_name: str
    avg_price: float = 0.0
    avg_rating: float = 0.0
    ranking_url_count: int = 0
    competitor_count: int = 0


@dataclass(frozen=True, slots=True)
class KeywordCandidate:
    word: str
    volume: float
    difficulty: float


@dataclass(frozen=True, slots=True)
class ScoredKeyword:
    word: str
    score: float                  # volume / difficulty


@dataclass(frozen=True, slots=True)
class TopListing:
    """One item of a sampled top-10 ranking."""

    brand: str
    price: float
    rating: float
    review_count: int


@dataclass(frozen=True, slots=True)
class RankingSignals:
    """Keyword and ranking data for a category, supplied from outside the engine."""

    ranking_url_count: int = 0
    keyword_candidates: tuple[KeywordCandidate, ...] = ()
    top_listings: tuple[TopListing, ...] = ()
    major_brands: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Proposal:
    """An immutable product-opportunity proposal. Always created as DRAFT."""

    category_name: str
    product_name: str
    target_price: float
    features: str
    keywords: str = ""
    reasoning: str = ""
    archetype: Archetype = Archetype.BALANCED
    status: str = field(default="DRAFT", init=False)


@dataclass(frozen=True, slots=True)
class CategoryInput:
    """One unit of work for the batch analysis."""

    category_name: str
    stats: AggregateMarketStats | None
    ranking_signals: RankingSignals | None = None
    category_id: int | None = None


@dataclass(frozen=True, slots=True)
class AnalysisOutcome:
    category_name: str
    status: OutcomeStatus
    proposal: Proposal | None = None
    error: str | None = None
    category_id: int | None = None
