"""Market scraper package: product-page extraction with fallback chains."""

from workers.market_scraper.extractor import ProductPageExtractor, extract
from workers.market_scraper.fetcher import CurlPageFetcher, PageFetcher
from workers.market_scraper.models import (
    ExtractionErrorKind,
    ExtractionResult,
    FetchedPage,
    ListingQualityMetrics,
    ProductSnapshot,
    ReviewExcerpt,
)

__all__ = [
    "CurlPageFetcher",
    "ExtractionErrorKind",
    "ExtractionResult",
    "FetchedPage",
    "ListingQualityMetrics",
    "PageFetcher",
    "ProductPageExtractor",
    "ProductSnapshot",
    "ReviewExcerpt",
    "extract",
]
