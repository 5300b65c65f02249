"""Data models for the product-page extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class ExtractionErrorKind(StrEnum):
    """Why an extraction failed. Carried as data, never raised."""

    BOT_DETECTED = "BOT_DETECTED"                  # transport-level block (503)
    CAPTCHA_WALL = "CAPTCHA_WALL"                  # challenge form in the page
    UNRECOGNIZED_LAYOUT = "UNRECOGNIZED_LAYOUT"    # fetched, but no title found
    NETWORK_ERROR = "NETWORK_ERROR"                # any other transport/parse error


@dataclass(frozen=True, slots=True)
class FetchedPage:
    """Raw HTTP response as seen by the extractor."""

    status_code: int
    text: str
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True, slots=True)
class ListingQualityMetrics:
    """How complete a listing is: images, bullets, description, rich content."""

    image_count: int = 1
    bullet_count: int = 0
    description_length: int = 0
    has_rich_content: bool = False


@dataclass(frozen=True, slots=True)
class ReviewExcerpt:
    """A single customer review as found on the page."""

    title: str
    body: str
    rating_text: str                   # ej: "1.0 out of 5 stars"
    star_value: float


@dataclass(frozen=True, slots=True)
class ProductSnapshot:
    """Structured data recovered from one product page."""

    title: str
    price_text: str = ""               # raw, ej: "￥3,980"
    image_url: str = ""
    rating_text: str = ""              # ej: "5つ星のうち4.2"
    metrics: ListingQualityMetrics = field(default_factory=ListingQualityMetrics)
    critical_review: ReviewExcerpt | None = None
    rating_distribution: dict[str, str] = field(default_factory=dict)   # "5" -> "70%"


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Outcome of one `extract(url)` call. `data` only on success."""

    success: bool
    data: ProductSnapshot | None = None
    status_code: int | None = None
    error: str | None = None
    error_kind: ExtractionErrorKind | None = None

    @classmethod
    def ok(cls, data: ProductSnapshot) -> ExtractionResult:
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        kind: ExtractionErrorKind,
        error: str,
        status_code: int | None = None,
    ) -> ExtractionResult:
        return cls(success=False, status_code=status_code, error=error, error_kind=kind)
