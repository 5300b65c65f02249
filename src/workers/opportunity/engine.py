"""
Opportunity Engine — from category averages to a product proposal.

1. Classify the market through the archetype decision table
2. Optionally enrich with keyword / niche analysis from ranking signals
3. Return an immutable DRAFT Proposal (the caller persists it)

Purely computational: no I/O, safe to run per category in parallel.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from workers.opportunity.archetypes import classify
from workers.opportunity.keywords import is_niche, rank_keywords, unsatisfied_listings
from workers.opportunity.models import (
    AggregateMarketStats,
    AnalysisOutcome,
    CategoryInput,
    OutcomeStatus,
    Proposal,
    RankingSignals,
)
from workers.opportunity.ranking_source import RankingSource

logger = logging.getLogger(__name__)

COMPLAINT_FIX_FEATURE = (
    "Fixes common complaints (e.g. noise, durability) found in top selling items"
)


def build_enrichment(signals: RankingSignals) -> tuple[str, str, bool]:
    """
    Render the advanced-analysis block.

    Returns ``(reasoning_block, keywords_csv, has_unsatisfied_buyers)``.
    """
    top_keywords = rank_keywords(signals.keyword_candidates)
    niche = is_niche(signals.top_listings, signals.major_brands)
    unsatisfied = unsatisfied_listings(signals.top_listings)

    verdict = (
        "✅ Blue Ocean (Big Brands < 50%)" if niche
        else "⚠️ Red Ocean (Dominated by Big Brands)"
    )
    keyword_list = ", ".join(f'"{k.word}" (Score: {k.score:.0f})' for k in top_keywords)

    lines = [
        "",
        "",
        "[Advanced Analysis]:",
        f"- **Niche Status**: {verdict}.",
        f"- **Target Keywords**: {keyword_list or 'n/a'}.",
    ]
    if unsatisfied:
        lines.append(
            f"- **Opportunity**: Found {len(unsatisfied)} high-volume items with low "
            "ratings (<3.8). Users are buying but unsatisfied."
        )
    block = "\n".join(lines) + "\n"
    return block, ", ".join(k.word for k in top_keywords), bool(unsatisfied)


class OpportunityEngine:
    """Turns aggregate market statistics into ranked product proposals."""

    def analyze_category(
        self,
        stats: AggregateMarketStats | None,
        ranking_signals: RankingSignals | None = None,
    ) -> Proposal | None:
        """
        Build a proposal for one category.

        ``None`` stats means there were no competitors to aggregate, and
        the result is ``None`` ("no analysis possible").
        """
        if stats is None:
            return None

        plan = classify(stats)
        features = plan.features
        reasoning = plan.reasoning
        keywords = ""

        if ranking_signals is not None and ranking_signals.ranking_url_count > 0:
            block, keywords, unsatisfied = build_enrichment(ranking_signals)
            reasoning += block
            if unsatisfied:
                features += f", {COMPLAINT_FIX_FEATURE}"

        logger.debug(
            "Category %s classified as %s (target %.0f)",
            stats.category_name, plan.archetype, plan.target_price,
        )
        return Proposal(
            category_name=stats.category_name,
            product_name=plan.product_name,
            target_price=plan.target_price,
            features=features,
            keywords=keywords,
            reasoning=reasoning,
            archetype=plan.archetype,
        )

    def run_global_analysis(
        self,
        categories: Iterable[CategoryInput],
        ranking_source: RankingSource | None = None,
    ) -> list[AnalysisOutcome]:
        """
        Analyze every category independently. A failing category is
        logged and reported as FAILED; the others still complete.

        When a category carries no ranking signals, ``ranking_source``
        (if given) is asked for them inside the same isolation boundary.
        """
        outcomes: list[AnalysisOutcome] = []
        for item in categories:
            try:
                signals = item.ranking_signals
                if signals is None and ranking_source is not None and item.stats is not None:
                    signals = ranking_source.signals_for(item.stats)
                proposal = self.analyze_category(item.stats, signals)
            except Exception as exc:
                logger.exception("Analysis failed for category %s", item.category_name)
                outcomes.append(AnalysisOutcome(
                    category_name=item.category_name,
                    status=OutcomeStatus.FAILED,
                    error=str(exc),
                    category_id=item.category_id,
                ))
                continue

            if proposal is None:
                logger.info("  ⏭️  %s: no competitors, skipped", item.category_name)
                outcomes.append(AnalysisOutcome(
                    category_name=item.category_name,
                    status=OutcomeStatus.SKIPPED,
                    category_id=item.category_id,
                ))
            else:
                logger.info("  💡 %s: %s", item.category_name, proposal.product_name)
                outcomes.append(AnalysisOutcome(
                    category_name=item.category_name,
                    status=OutcomeStatus.SUCCESS,
                    proposal=proposal,
                    category_id=item.category_id,
                ))

        succeeded = sum(1 for o in outcomes if o.status == OutcomeStatus.SUCCESS)
        logger.info("🏁 Global analysis finished — %d/%d categories", succeeded, len(outcomes))
        return outcomes
