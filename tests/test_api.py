"""API tests through FastAPI's TestClient with dependency overrides."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes.jobs import get_ranking_source
from api.routes.market import get_extractor
from conftest import PRODUCT_URL, StubFetcher, page, product_page
from core.database import build_engine, build_session_factory, get_db, init_models
from core.models import Category, Market, Proposal, ProposalStatus
from workers.market_scraper.extractor import ProductPageExtractor
from workers.opportunity.ranking_source import SimulatedRankingSource


@pytest.fixture
def client():
    fetcher = StubFetcher({
        PRODUCT_URL: page(product_page(reviews=[("Bad", "Broke", "1.0 out of 5 stars")])),
    })
    app.dependency_overrides[get_extractor] = lambda: ProductPageExtractor(fetcher)
    app.dependency_overrides[get_ranking_source] = lambda: SimulatedRankingSource(seed=1)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def database_url(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"

    async def _setup():
        engine = build_engine(url)
        await init_models(engine)
        async with build_session_factory(engine)() as session:
            market = Market(name="Amazon JP - Cables")
            session.add(market)
            await session.flush()
            category = Category(market_id=market.id, name="USB Cables")
            session.add(category)
            await session.flush()
            session.add(Proposal(
                category_id=category.id,
                product_name="NextGen USB Cables",
                target_price=1200.0,
                features="Braided",
                status=ProposalStatus.DRAFT,
            ))
            await session.commit()
        await engine.dispose()

    asyncio.run(_setup())

    async def _session():
        engine = build_engine(url)
        async with build_session_factory(engine)() as session:
            yield session
            await session.commit()
        await engine.dispose()

    app.dependency_overrides[get_db] = _session
    return url


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "market-signal-engine"}


def test_extract_success(client):
    response = client.post("/api/extract", json={"url": PRODUCT_URL})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["title"] == "Wireless Earbuds X1"
    assert body["data"]["critical_review"]["star_value"] == 1.0
    assert body["data"]["metrics"]["image_count"] == 1


def test_extract_failure_is_data_not_http_error(client):
    response = client.post("/api/extract", json={"url": "https://www.amazon.co.jp/dp/B0MISSING0"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error_kind"] == "UNRECOGNIZED_LAYOUT"


def test_extract_rejects_empty_url(client):
    assert client.post("/api/extract", json={"url": ""}).status_code == 422


def test_analyze_quality_gap(client):
    response = client.post(
        "/api/opportunities/analyze",
        json={"stats": {"category_name": "Earbuds", "avg_price": 6000, "avg_rating": 3.0}},
    )
    proposal = response.json()["proposal"]
    assert proposal["product_name"] == "Premium Earbuds Solver"
    assert proposal["target_price"] == pytest.approx(5400.0)
    assert proposal["archetype"] == "QUALITY_GAP"
    assert proposal["status"] == "DRAFT"


def test_analyze_with_ranking_signals(client):
    response = client.post(
        "/api/opportunities/analyze",
        json={
            "stats": {"category_name": "Earbuds", "avg_price": 3000, "avg_rating": 4.0},
            "ranking_signals": {
                "ranking_url_count": 1,
                "keyword_candidates": [{"word": "earbuds mute", "volume": 3000, "difficulty": 20}],
                "top_listings": [{"brand": "Sony", "rating": 3.2, "review_count": 400}],
                "major_brands": ["Sony"],
            },
        },
    )
    proposal = response.json()["proposal"]
    assert proposal["keywords"] == "earbuds mute"
    assert "Red Ocean" in proposal["reasoning"]


def test_analyze_without_stats(client):
    response = client.post("/api/opportunities/analyze", json={})
    assert response.json() == {"proposal": None}


def test_generate_proposals_skips_empty_category(client, database_url):
    response = client.post("/api/proposals/generate")
    assert response.status_code == 200
    assert response.json() == [
        {
            "category_id": 1,
            "category": "USB Cables",
            "status": "SKIPPED",
            "product_name": None,
            "error": None,
        }
    ]


def test_collection_run_without_competitors(client, database_url):
    response = client.post("/api/collection/run")
    assert response.status_code == 200
    assert response.json() == []


def test_list_and_get_proposal(client, database_url):
    listed = client.get("/api/proposals", params={"status": "DRAFT"}).json()
    assert [p["product_name"] for p in listed] == ["NextGen USB Cables"]
    assert listed[0]["category"] == "USB Cables"

    response = client.get(f"/api/proposals/{listed[0]['id']}")
    assert response.status_code == 200
    assert response.json()["status"] == "DRAFT"


def test_unknown_proposal_is_404(client, database_url):
    assert client.get("/api/proposals/999").status_code == 404
    assert client.patch("/api/proposals/999", json={"status": "APPROVED"}).status_code == 404


def test_review_proposal(client, database_url):
    response = client.patch("/api/proposals/1", json={"status": "APPROVED"})
    assert response.status_code == 200
    assert response.json()["status"] == "APPROVED"

    assert client.get("/api/proposals", params={"status": "DRAFT"}).json() == []
    again = client.patch("/api/proposals/1", json={"status": "REJECTED"})
    assert again.status_code == 409


def test_review_cannot_return_to_draft(client, database_url):
    assert client.patch("/api/proposals/1", json={"status": "DRAFT"}).status_code == 422
