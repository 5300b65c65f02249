"""
Proposal Generator — batch opportunity analysis over stored categories.

Loads every category with its market's competitors, builds the
aggregate stats, runs the opportunity engine per category and stores
the successful proposals as DRAFT rows.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.models import Category, Competitor, Market, Proposal, ProposalStatus
from workers.collector.aggregator import build_market_stats
from workers.collector.models import CompetitorSnapshot
from workers.opportunity.engine import OpportunityEngine
from workers.opportunity.models import AnalysisOutcome, CategoryInput, OutcomeStatus
from workers.opportunity.ranking_source import RankingSource, SimulatedRankingSource

logger = logging.getLogger(__name__)


def _competitor_snapshot(competitor: Competitor) -> CompetitorSnapshot:
    # Competitor.reviews follows ReviewSummary.latest_first()
    latest = competitor.reviews[0].average_rating if competitor.reviews else None
    return CompetitorSnapshot(
        product_prices=tuple(p.current_price for p in competitor.products if p.current_price),
        latest_rating=latest,
    )


async def load_category_inputs(session: AsyncSession) -> list[CategoryInput]:
    result = await session.execute(
        select(Category)
        .options(
            selectinload(Category.ranking_urls),
            selectinload(Category.market)
            .selectinload(Market.competitors)
            .selectinload(Competitor.products),
            selectinload(Category.market)
            .selectinload(Market.competitors)
            .selectinload(Competitor.reviews),
        )
        .order_by(Category.id)
    )
    inputs: list[CategoryInput] = []
    for category in result.scalars().all():
        # Market-level competitors stand in for category-level ones
        snapshots = [_competitor_snapshot(c) for c in category.market.competitors]
        stats = build_market_stats(category.name, snapshots, len(category.ranking_urls))
        inputs.append(CategoryInput(
            category_name=category.name,
            stats=stats,
            category_id=category.id,
        ))
    return inputs


async def generate_proposals(
    session: AsyncSession,
    ranking_source: RankingSource | None = None,
    engine: OpportunityEngine | None = None,
) -> list[AnalysisOutcome]:
    """Run the global analysis and persist every successful proposal."""
    engine = engine or OpportunityEngine()
    ranking_source = ranking_source or SimulatedRankingSource()

    inputs = await load_category_inputs(session)
    logger.info("📊 Generating proposals for %d categories", len(inputs))
    outcomes = engine.run_global_analysis(inputs, ranking_source=ranking_source)

    saved = 0
    for outcome in outcomes:
        if outcome.status != OutcomeStatus.SUCCESS or outcome.proposal is None:
            continue
        proposal = outcome.proposal
        session.add(Proposal(
            category_id=outcome.category_id,
            product_name=proposal.product_name,
            target_price=proposal.target_price,
            features=proposal.features,
            keywords=proposal.keywords,
            reasoning=proposal.reasoning,
            status=ProposalStatus.DRAFT,
        ))
        saved += 1

    await session.commit()
    logger.info("Saved %d proposal(s)", saved)
    return outcomes
