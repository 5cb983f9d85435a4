"""Weighted bid/no-bid decision engine."""

from .engine import DecisionEngine, categorize, score_facts, weighted_percent
from .facts import DecisionFacts, socio_economic_categories
from .rules import CRITERIA
from .weights import DEFAULT_WEIGHTS, ScoringWeights

__all__ = [
    "DecisionEngine",
    "categorize",
    "score_facts",
    "weighted_percent",
    "DecisionFacts",
    "socio_economic_categories",
    "CRITERIA",
    "DEFAULT_WEIGHTS",
    "ScoringWeights",
]
