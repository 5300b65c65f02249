"""Proposal API — list stored proposals and record the review decision."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.database import get_db as get_session
from core.models import Proposal, ProposalStatus

router = APIRouter(prefix="/api/proposals", tags=["proposals"])


# ── Schemas ───────────────────────────────────────────────────────────

class ProposalResponse(BaseModel):
    id: int
    category_id: int
    category: str
    product_name: str
    target_price: float
    features: str
    keywords: str
    reasoning: str
    status: ProposalStatus


class ReviewRequest(BaseModel):
    status: ProposalStatus


def _to_response(proposal: Proposal) -> ProposalResponse:
    return ProposalResponse(
        id=proposal.id,
        category_id=proposal.category_id,
        category=proposal.category.name,
        product_name=proposal.product_name,
        target_price=proposal.target_price,
        features=proposal.features or "",
        keywords=proposal.keywords or "",
        reasoning=proposal.reasoning or "",
        status=proposal.status,
    )


async def _get_or_404(session: AsyncSession, proposal_id: int) -> Proposal:
    result = await session.execute(
        select(Proposal)
        .where(Proposal.id == proposal_id)
        .options(selectinload(Proposal.category))
    )
    proposal = result.scalar_one_or_none()
    if not proposal:
        raise HTTPException(status_code=404, detail=f"Proposal {proposal_id} not found")
    return proposal


# ── Endpoints ─────────────────────────────────────────────────────────

@router.get("", response_model=list[ProposalResponse])
async def list_proposals(
    status: ProposalStatus | None = None,
    session: AsyncSession = Depends(get_session),
):
    """List proposals, newest first. Filter with ``?status=DRAFT``."""
    query = select(Proposal).options(selectinload(Proposal.category)).order_by(Proposal.id.desc())
    if status is not None:
        query = query.where(Proposal.status == status)
    result = await session.execute(query)
    return [_to_response(p) for p in result.scalars().all()]


@router.get("/{proposal_id}", response_model=ProposalResponse)
async def get_proposal(proposal_id: int, session: AsyncSession = Depends(get_session)):
    return _to_response(await _get_or_404(session, proposal_id))


@router.patch("/{proposal_id}", response_model=ProposalResponse)
async def review_proposal(
    proposal_id: int,
    req: ReviewRequest,
    session: AsyncSession = Depends(get_session),
):
    """Approve or reject a DRAFT proposal. Reviewed proposals are final."""
    proposal = await _get_or_404(session, proposal_id)
    if req.status == ProposalStatus.DRAFT:
        raise HTTPException(status_code=422, detail="A proposal can only be approved or rejected")
    if proposal.status != ProposalStatus.DRAFT:
        raise HTTPException(
            status_code=409,
            detail=f"Proposal {proposal_id} already {proposal.status.value}",
        )
    proposal.status = req.status
    await session.flush()
    return _to_response(proposal)
