"""Slack notification tests. Delivery goes through httpx.MockTransport."""

import httpx
import pytest

from core.models import AlertType
from core.notifications.slack import build_alert_blocks, send_slack_alert

WEBHOOK = "https://hooks.slack.com/services/T000/B000/XXXX"


def mock_client(status_code: int = 200):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, text="ok")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests


def test_build_alert_blocks():
    blocks = build_alert_blocks([
        (AlertType.NEW_PRODUCT, "New Product Found", "New product discovered: X1"),
        (AlertType.SENTIMENT_DROP, "Sentiment Drop Detected", "Acme dropped"),
    ])
    assert len(blocks) == 2
    assert blocks[0]["type"] == "section"
    assert blocks[0]["text"]["text"] == "🆕 *New Product Found*\nNew product discovered: X1"
    assert blocks[1]["text"]["text"].startswith("📉")


@pytest.mark.asyncio
async def test_send_skipped_without_webhook():
    client, requests = mock_client()
    async with client:
        assert await send_slack_alert("hello", webhook_url="", client=client) is False
    assert requests == []


@pytest.mark.asyncio
async def test_send_posts_payload():
    client, requests = mock_client()
    blocks = build_alert_blocks([(AlertType.PRICE_CHANGE, "Price Change Detected", "X1")])

    async with client:
        sent = await send_slack_alert("1 alert", blocks=blocks, webhook_url=WEBHOOK, client=client)

    assert sent is True
    assert len(requests) == 1
    assert str(requests[0].url) == WEBHOOK
    assert b"Price Change Detected" in requests[0].content


@pytest.mark.asyncio
async def test_send_http_error_returns_false():
    client, _ = mock_client(status_code=500)
    async with client:
        assert await send_slack_alert("boom", webhook_url=WEBHOOK, client=client) is False
