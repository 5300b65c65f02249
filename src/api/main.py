"""
FastAPI application entry point.

Endpoints for health check, on-demand extraction / analysis and
manual batch triggering. Persistence and scheduling belong to the
callers of this service.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.routes.jobs import router as jobs_router
from api.routes.market import router as market_router
from api.routes.proposals import router as proposals_router
from core.database import engine, init_models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: create tables on startup, dispose the pool on shutdown."""
    await init_models()
    logger.info("Database ready")
    yield
    await engine.dispose()


app = FastAPI(
    title="Market Signal Engine",
    description="Competitor product-page extraction and product-opportunity proposals",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Routes ────────────────────────────────────────────────────────────
app.include_router(market_router)
app.include_router(jobs_router)
app.include_router(proposals_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "service": "market-signal-engine"}
