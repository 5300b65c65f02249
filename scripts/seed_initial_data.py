"""
Seed script — Populates a first market to run collection and proposals against.
Inserts: one market, its categories with ranking URLs, one competitor with a product page.

Run:  PYTHONPATH=src python scripts/seed_initial_data.py
"""

from __future__ import annotations

import asyncio

from sqlalchemy import select

from core.config import settings
from core.database import build_engine, build_session_factory, init_models
from core.models import Category, Competitor, Market, Product, RankingUrl

MARKET_NAME = "Amazon JP - Audio"

CATEGORIES = [
    {
        "name": "Wireless Earbuds",
        "ranking_urls": [f"{settings.marketplace_base_url}/gp/bestsellers/electronics/3477981"],
    },
    {
        "name": "Portable Speakers",
        "ranking_urls": [],
    },
]

COMPETITORS = [
    {
        "name": "Anker",
        "url": f"{settings.marketplace_base_url}/stores/Anker",
        "products": [
            {"name": "Soundcore Liberty 4 NC", "url": f"{settings.marketplace_base_url}/dp/B0C6KKQ7ND"},
        ],
    },
]


async def seed() -> None:
    engine = build_engine()
    await init_models(engine)
    sf = build_session_factory(engine)

    async with sf() as session:
        # ── Market ─────────────────────────────────────────────────────
        market = await session.scalar(select(Market).where(Market.name == MARKET_NAME))
        if market:
            print(f"  ⚠️  Market '{MARKET_NAME}' already exists — skipping.")
            await engine.dispose()
            return

        market = Market(name=MARKET_NAME)
        session.add(market)
        await session.flush()
        print(f"  ✅ Market '{MARKET_NAME}' created.")

        # ── Categories ─────────────────────────────────────────────────
        for c in CATEGORIES:
            category = Category(market_id=market.id, name=c["name"])
            session.add(category)
            await session.flush()
            for url in c["ranking_urls"]:
                session.add(RankingUrl(category_id=category.id, url=url))
            print(f"  ✅ Category: {c['name']} ({len(c['ranking_urls'])} ranking URL(s))")

        # ── Competitors ────────────────────────────────────────────────
        for comp in COMPETITORS:
            competitor = Competitor(market_id=market.id, name=comp["name"], url=comp["url"])
            session.add(competitor)
            await session.flush()
            for p in comp["products"]:
                session.add(Product(competitor_id=competitor.id, name=p["name"], url=p["url"]))
            print(f"  ✅ Competitor '{comp['name']}' with {len(comp['products'])} product page(s).")

        await session.commit()
        print("\n🎉 Seed completed. Trigger POST /api/collection/run to collect.")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
