"""
Slack webhook notification sender.

Pushes market alerts (new listings, price shifts, sentiment drops)
to a Slack channel via incoming webhooks.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from core.config import settings
from core.models import AlertType

logger = logging.getLogger(__name__)

SLACK_TIMEOUT = 10.0

_ALERT_EMOJI = {
    AlertType.NEW_PRODUCT: "🆕",
    AlertType.PRICE_CHANGE: "💴",
    AlertType.SENTIMENT_DROP: "📉",
}


def build_alert_blocks(alerts: Sequence[tuple[AlertType, str, str]]) -> list[dict]:
    """Render (type, title, message) triples as Slack Block Kit sections."""
    blocks: list[dict] = []
    for alert_type, title, message in alerts:
        emoji = _ALERT_EMOJI.get(alert_type, "⚪")
        blocks.append({
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"{emoji} *{title}*\n{message}"},
        })
    return blocks


async def send_slack_alert(
    text: str,
    *,
    blocks: list[dict] | None = None,
    webhook_url: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """
    Post ``text`` (plus optional Block Kit ``blocks``) to the Slack webhook.

    ``webhook_url`` overrides ``settings.slack_webhook_url``; ``client``
    reuses a caller-owned httpx client instead of opening one.
    Returns False when no webhook is configured or delivery fails.
    """
    url = webhook_url if webhook_url is not None else settings.slack_webhook_url
    if not url:
        logger.debug("SLACK_WEBHOOK_URL not configured. Alert skipped.")
        return False

    payload: dict = {"text": text}
    if blocks:
        payload["blocks"] = blocks

    try:
        if client is not None:
            response = await client.post(url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=SLACK_TIMEOUT) as own_client:
                response = await own_client.post(url, json=payload)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.error("Failed to send Slack alert: %s", exc)
        return False

    logger.info("Slack alert sent (%d block(s))", len(blocks or ()))
    return True
