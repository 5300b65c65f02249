"""Batch job endpoints — proposal generation and competitor collection."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.routes.market import get_extractor
from core.database import get_db as get_session
from workers.collector.orchestrator import run_collection
from workers.market_scraper.extractor import ProductPageExtractor
from workers.opportunity.ranking_source import RankingSource, SimulatedRankingSource
from workers.proposals.generator import generate_proposals

router = APIRouter(prefix="/api", tags=["jobs"])


def get_ranking_source() -> RankingSource:
    return SimulatedRankingSource()


@router.post("/proposals/generate")
async def trigger_proposals(
    session: AsyncSession = Depends(get_session),
    ranking_source: RankingSource = Depends(get_ranking_source),
) -> list[dict]:
    """Analyze every category; one outcome per category (SUCCESS / SKIPPED / FAILED)."""
    outcomes = await generate_proposals(session, ranking_source=ranking_source)
    return [
        {
            "category_id": o.category_id,
            "category": o.category_name,
            "status": o.status.value,
            "product_name": o.proposal.product_name if o.proposal else None,
            "error": o.error,
        }
        for o in outcomes
    ]


@router.post("/collection/run")
async def trigger_collection(
    session: AsyncSession = Depends(get_session),
    extractor: ProductPageExtractor = Depends(get_extractor),
) -> list[dict]:
    """Collect every competitor; one outcome per competitor."""
    outcomes = await run_collection(session, extractor)
    return [asdict(o) for o in outcomes]
