"""Data models exchanged between the collector and the persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, field

from core.models import Sentiment


@dataclass(frozen=True, slots=True)
class CollectedProduct:
    name: str
    url: str
    price: float
    currency: str = "JPY"


@dataclass(frozen=True, slots=True)
class CollectedReviewSummary:
    average_rating: float
    review_count: int
    sentiment: Sentiment
    summary: str = ""


@dataclass(slots=True)
class CollectionResult:
    """Everything gathered for one competitor in one collection pass."""

    competitor_id: int
    products: list[CollectedProduct] = field(default_factory=list)
    review_summary: CollectedReviewSummary | None = None
    failed_urls: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CompetitorSnapshot:
    """Stored state of one competitor, as needed for category averages."""

    product_prices: tuple[float, ...] = ()
    latest_rating: float | None = None


@dataclass(frozen=True, slots=True)
class CollectionOutcome:
    competitor_id: int
    competitor_name: str
    status: str                       # "success" | "failed"
    alerts_created: int = 0
    error: str | None = None
