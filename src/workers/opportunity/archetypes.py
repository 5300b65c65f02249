"""
Archetype decision table.

Ordered ``(predicate, builder)`` rules over ``(avg_rating, avg_price)``.
First match wins; the last rule always matches, so classification is
total. New archetypes go in as new rows.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from core.config import settings
from workers.opportunity.models import AggregateMarketStats, Archetype


@dataclass(frozen=True, slots=True)
class ArchetypePlan:
    archetype: Archetype
    product_name: str
    target_price: float
    features: str
    reasoning: str


Predicate = Callable[[AggregateMarketStats], bool]
Builder = Callable[[AggregateMarketStats], ArchetypePlan]


def _half_up(value: float, places: int) -> str:
    """Fixed-point text with halves rounded away from zero (6000.5 -> "6001")."""
    return str(Decimal(str(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _fmt_price(stats: AggregateMarketStats) -> str:
    return f"{settings.currency_symbol}{_half_up(stats.avg_price, 0)}"


def _fmt_rating(stats: AggregateMarketStats) -> str:
    return _half_up(stats.avg_rating, 1)


def _is_quality_gap(stats: AggregateMarketStats) -> bool:
    return stats.avg_rating < 3.5 and stats.avg_price > 5000


def _quality_gap(stats: AggregateMarketStats) -> ArchetypePlan:
    name = stats.category_name
    return ArchetypePlan(
        archetype=Archetype.QUALITY_GAP,
        product_name=f"Premium {name} Solver",
        target_price=stats.avg_price * 0.9,
        features="High durability materials, Extended warranty, Premium unboxing experience",
        reasoning=(
            f"Competitors in {name} are charging high prices (avg {_fmt_price(stats)}) "
            f"but delivering poor quality (avg {_fmt_rating(stats)} stars). There is a "
            "massive opportunity for a quality product at a similar or slightly lower price point."
        ),
    )


def _is_value_gap(stats: AggregateMarketStats) -> bool:
    return stats.avg_rating > 4.5 and stats.avg_price > 10000


def _value_gap(stats: AggregateMarketStats) -> ArchetypePlan:
    name = stats.category_name
    return ArchetypePlan(
        archetype=Archetype.VALUE_GAP,
        product_name=f"Essential {name}",
        target_price=stats.avg_price * 0.6,
        features="Core functionality focus, Simplified design, Cost-effective packaging",
        reasoning=(
            f"The market for {name} is dominated by high-end expensive products "
            f"(avg {_fmt_price(stats)}, {_fmt_rating(stats)} stars). A \"Good Enough\" "
            "value option could capture significant market share."
        ),
    )


def _balanced(stats: AggregateMarketStats) -> ArchetypePlan:
    name = stats.category_name
    return ArchetypePlan(
        archetype=Archetype.BALANCED,
        product_name=f"NextGen {name}",
        target_price=stats.avg_price if stats.avg_price > 0 else settings.fallback_target_price,
        features="Modern aesthetic, User-centric ergonomics, Eco-friendly materials",
        reasoning=(
            f"Analysis of {name} (avg {_fmt_price(stats)}, {_fmt_rating(stats)} stars) "
            "suggests a balanced market. A differentiated product focusing on specific "
            "user pain points in reviews is recommended."
        ),
    )


def _always(stats: AggregateMarketStats) -> bool:
    return True


ARCHETYPE_RULES: tuple[tuple[Predicate, Builder], ...] = (
    (_is_quality_gap, _quality_gap),
    (_is_value_gap, _value_gap),
    (_always, _balanced),
)


def classify(
    stats: AggregateMarketStats,
    rules: tuple[tuple[Predicate, Builder], ...] = ARCHETYPE_RULES,
) -> ArchetypePlan:
    for predicate, builder in rules:
        if predicate(stats):
            return builder(stats)
    # Only reachable with a custom rule table lacking a catch-all
    return _balanced(stats)
