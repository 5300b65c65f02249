"""
Collector Orchestrator
======================
1. Reads competitors and their product URLs from the DB
2. Extracts every product page (bounded concurrency)
3. Folds the results into a CollectionResult
4. Saves products, price points and the review summary
5. Raises alerts through the diff engine and pushes them to Slack

One failing competitor never stops the run.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.config import settings
from core.models import Alert, Competitor, PricePoint, Product, ReviewSummary
from core.notifications.slack import build_alert_blocks, send_slack_alert
from workers.collector.aggregator import build_collection_result
from workers.collector.models import CollectionOutcome, CollectionResult
from workers.diff_engine.analyzer import AlertDraft, product_alert, sentiment_alert
from workers.market_scraper.extractor import ProductPageExtractor

logger = logging.getLogger(__name__)


async def collect_for_competitor(
    competitor_id: int,
    competitor_name: str,
    urls: list[str],
    extractor: ProductPageExtractor,
) -> CollectionResult:
    """Extract every known product page of a competitor."""
    logger.info("Collecting %d product page(s) for %s", len(urls), competitor_name)
    results = await extractor.extract_many(urls)
    collection = build_collection_result(competitor_id, list(zip(urls, results)))
    if collection.failed_urls:
        logger.warning(
            "  %d/%d page(s) failed for %s", len(collection.failed_urls), len(urls), competitor_name
        )
    return collection


async def save_collection_result(
    session: AsyncSession,
    result: CollectionResult,
    competitor_label: str | None = None,
) -> list[AlertDraft]:
    """
    Persist one CollectionResult and the alerts it triggers.

    Returns the alert drafts that were stored (already added to session).
    """
    label = competitor_label or f"competitor #{result.competitor_id}"

    rows = await session.execute(
        select(Product).where(Product.competitor_id == result.competitor_id)
    )
    known = {p.name: p for p in rows.scalars().all()}
    known_prices = {name: p.current_price for name, p in known.items()}

    drafts: list[AlertDraft] = []

    for item in result.products:
        draft = product_alert(item.name, item.price, known_prices, settings.currency_symbol)
        if draft is not None:
            drafts.append(draft)

        product = known.get(item.name)
        if product is None:
            product = Product(
                competitor_id=result.competitor_id,
                name=item.name,
                url=item.url,
                current_price=item.price,
                currency=item.currency,
            )
            session.add(product)
            await session.flush()  # get product.id
            known[item.name] = product
            known_prices[item.name] = item.price
        else:
            product.current_price = item.price
            product.url = item.url or product.url

        session.add(PricePoint(product_id=product.id, price=item.price, currency=item.currency))

    if result.review_summary is not None:
        prev = await session.execute(
            select(ReviewSummary)
            .where(ReviewSummary.competitor_id == result.competitor_id)
            .order_by(*ReviewSummary.latest_first())
            .limit(1)
        )
        previous = prev.scalar_one_or_none()
        draft = sentiment_alert(
            label,
            previous.average_rating if previous else None,
            result.review_summary.average_rating,
        )
        if draft is not None:
            drafts.append(draft)

        summary = result.review_summary
        session.add(ReviewSummary(
            competitor_id=result.competitor_id,
            average_rating=summary.average_rating,
            review_count=summary.review_count,
            sentiment=summary.sentiment,
            summary=summary.summary,
        ))

    for draft in drafts:
        session.add(Alert(type=draft.type, title=draft.title, message=draft.message))

    await session.flush()
    if drafts:
        logger.info("  🔔 %d alert(s) for %s", len(drafts), label)
    return drafts


async def run_collection(
    session: AsyncSession,
    extractor: ProductPageExtractor | None = None,
) -> list[CollectionOutcome]:
    """Collect every competitor; each one commits or rolls back on its own."""
    extractor = extractor or ProductPageExtractor()

    result = await session.execute(
        select(Competitor).options(selectinload(Competitor.products)).order_by(Competitor.id)
    )
    # Plain values only: a rollback expires ORM instances
    targets = [
        (c.id, c.name, [p.url for p in c.products if p.url])
        for c in result.scalars().all()
    ]
    logger.info("🕷️  Collection started for %d competitor(s)", len(targets))

    outcomes: list[CollectionOutcome] = []
    all_drafts: list[AlertDraft] = []
    for competitor_id, name, urls in targets:
        try:
            collection = await collect_for_competitor(competitor_id, name, urls, extractor)
            drafts = await save_collection_result(session, collection, name)
            await session.commit()
        except Exception as exc:
            await session.rollback()
            logger.exception("Collection failed for %s", name)
            outcomes.append(CollectionOutcome(
                competitor_id=competitor_id,
                competitor_name=name,
                status="failed",
                error=str(exc),
            ))
            continue

        all_drafts.extend(drafts)
        outcomes.append(CollectionOutcome(
            competitor_id=competitor_id,
            competitor_name=name,
            status="success",
            alerts_created=len(drafts),
        ))

    if all_drafts:
        await send_slack_alert(
            f"{len(all_drafts)} new market alert(s)",
            blocks=build_alert_blocks([(d.type, d.title, d.message) for d in all_drafts]),
        )

    failures = sum(1 for o in outcomes if o.status == "failed")
    logger.info(
        "🏁 Collection finished — %d success, %d failures",
        len(outcomes) - failures, failures,
    )
    return outcomes
