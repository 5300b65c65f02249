"""
Diff Engine — Detects market changes between collections.

Compares a fresh CollectionResult against what is already stored for
the competitor and emits alert drafts:

  - NEW_PRODUCT     product name not seen before
  - PRICE_CHANGE    relative price move above 5%
  - SENTIMENT_DROP  average rating more than 0.5 below the last summary

The rules are pure; persistence happens in the collector.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from core.models import AlertType

logger = logging.getLogger(__name__)

PRICE_CHANGE_THRESHOLD = 0.05
SENTIMENT_DROP_THRESHOLD = 0.5


@dataclass(frozen=True, slots=True)
class AlertDraft:
    type: AlertType
    title: str
    message: str


def price_changed(old_price: float | None, new_price: float) -> bool:
    if not old_price:
        return False
    return abs((new_price - old_price) / old_price) > PRICE_CHANGE_THRESHOLD


def sentiment_dropped(previous_rating: float | None, new_rating: float) -> bool:
    if previous_rating is None:
        return False
    return new_rating < previous_rating - SENTIMENT_DROP_THRESHOLD


def product_alert(
    name: str,
    new_price: float,
    known_prices: Mapping[str, float | None],
    currency_symbol: str = "¥",
) -> AlertDraft | None:
    """Alert for one collected product given the stored ``name -> current_price`` map."""
    if name not in known_prices:
        return AlertDraft(
            type=AlertType.NEW_PRODUCT,
            title="New Product Found",
            message=f"New product discovered: {name}",
        )

    old_price = known_prices[name]
    if price_changed(old_price, new_price):
        return AlertDraft(
            type=AlertType.PRICE_CHANGE,
            title="Price Change Detected",
            message=(
                f"{name} price changed from {currency_symbol}{old_price:,.0f} "
                f"to {currency_symbol}{new_price:,.0f}"
            ),
        )
    return None


def sentiment_alert(
    competitor_label: str,
    previous_rating: float | None,
    new_rating: float,
) -> AlertDraft | None:
    if not sentiment_dropped(previous_rating, new_rating):
        return None
    logger.info(
        "Sentiment drop for %s: %.1f -> %.1f", competitor_label, previous_rating, new_rating
    )
    return AlertDraft(
        type=AlertType.SENTIMENT_DROP,
        title="Sentiment Drop Detected",
        message=(
            f"Sentiment for {competitor_label} dropped from "
            f"{previous_rating:.1f} to {new_rating:.1f}"
        ),
    )
