"""Opportunity engine package: archetype classification and keyword enrichment."""

from workers.opportunity.engine import OpportunityEngine
from workers.opportunity.models import (
    AggregateMarketStats,
    AnalysisOutcome,
    Archetype,
    CategoryInput,
    KeywordCandidate,
    OutcomeStatus,
    Proposal,
    RankingSignals,
    TopListing,
)
from workers.opportunity.ranking_source import RankingSource, SimulatedRankingSource

__all__ = [
    "AggregateMarketStats",
    "AnalysisOutcome",
    "Archetype",
    "CategoryInput",
    "KeywordCandidate",
    "OpportunityEngine",
    "OutcomeStatus",
    "Proposal",
    "RankingSignals",
    "RankingSource",
    "SimulatedRankingSource",
    "TopListing",
]
