"""Smoke test: Extract one live product page and print what came back."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from workers.market_scraper.extractor import ProductPageExtractor

DEFAULT_URL = "https://www.amazon.co.jp/dp/B0C6KKQ7ND"


async def main(url: str) -> None:
    print(f"🚀 Starting Smoke Test: Product Page Extractor\n  URL: {url}")

    result = await ProductPageExtractor().extract(url)

    if not result.success:
        print(f"\n❌ {result.error_kind} (HTTP {result.status_code}): {result.error}")
        return

    data = result.data
    print(f"\n  ✅ Title:   {data.title}")
    print(f"  💴 Price:   {data.price_text or '-'}")
    print(f"  ⭐ Rating:  {data.rating_text or '-'}")
    print(f"  🖼️  Images:  {data.metrics.image_count}, bullets: {data.metrics.bullet_count}, "
          f"description: {data.metrics.description_length} chars, A+: {data.metrics.has_rich_content}")
    if data.critical_review:
        review = data.critical_review
        print(f"  📉 Critical review ({review.star_value:.1f}★): {review.title}")
        print(f"     {review.body[:200]}")
    print(f"  📊 Histogram: {data.rating_distribution or 'not found'}")

    print("\n🏁 Finished")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_URL))
