"""Multi-criteria bid/no-bid decision engine.

Turns historical award statistics into a deterministic, explainable
recommendation. Each statistic is one adaptive query; the queries are
issued sequentially and do not share a transaction, so one decision may
observe the dataset at slightly different points in time.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from ..fetchers import AwardFetcher, HistoryFetcher
from ..lifecycle import classify_award, today_utc
from ..models import Award, Criterion, Decision, SetAsideSignal
from .facts import DecisionFacts
from .rules import CRITERIA
from .weights import DEFAULT_WEIGHTS, ScoringWeights

logger = logging.getLogger(__name__)

BID_THRESHOLD = 80.0
CONDITIONAL_THRESHOLD = 65.0


def score_facts(
    facts: DecisionFacts,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> Decision:
    """Apply the rule tables and weights to a set of facts.

    Args:
        facts: Statistics gathered for one award and one bidder.
        weights: Criterion weights, summing to 100.

    Returns:
        Decision with ordered criteria, weighted percent and category.
    """
    weight_by_key = weights.as_dict()
    criteria = []
    for table in CRITERIA:
        score, rationale = table.evaluate(facts)
        criteria.append(
            Criterion(
                name=table.name,
                weight=weight_by_key[table.key],
                score=score,
                rationale=rationale,
            )
        )

    percent = weighted_percent(criteria)
    return Decision(
        scope=facts.scope,
        naics=facts.naics or "",
        criteria=criteria,
        weighted_percent=percent,
        category=categorize(percent),
    )


def weighted_percent(criteria: list[Criterion]) -> float:
    """Sum of weight * score / 5, rounded to one decimal."""
    # Integer numerator keeps the sum exact before the single division
    return round(sum(c.weight * c.score for c in criteria) / 5, 1)


def categorize(percent: float) -> str:
    """Category thresholds.

    - bid: 80 and above
    - conditional: 65 to 79.9
    - no_bid: below 65
    """
    if percent >= BID_THRESHOLD:
        return "bid"
    elif percent >= CONDITIONAL_THRESHOLD:
        return "conditional"
    else:
        return "no_bid"


class DecisionEngine:
    """Gathers decision facts through the aggregate fetchers and scores them."""

    def __init__(
        self,
        awards: AwardFetcher,
        history: HistoryFetcher,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        today: Callable[[], date] = today_utc,
    ) -> None:
        self._awards = awards
        self._history = history
        self._weights = weights
        self._today = today

    def score(self, piid: str, bidder_uei: str, lookback_years: int = 5) -> Decision:
        """Score a bid on ``piid`` by ``bidder_uei``.

        Raises:
            NotFound: When the PIID has no award.
            QueryExecutionFailure: When a statistic cannot be queried from either source.
        """
        target = self._awards.get_award(piid)
        facts = self.gather_facts(target, bidder_uei, lookback_years)
        decision = score_facts(facts, self._weights)
        logger.info(
            "decision_complete piid=%s bidder=%s weighted_percent=%.1f category=%s",
            piid, bidder_uei, decision.weighted_percent, decision.category,
        )
        return decision

    def gather_facts(self, target: Award, bidder_uei: str, lookback_years: int) -> DecisionFacts:
        scope = target.scope
        lifecycle = classify_award(target, today=self._today())
        profile = self._history.recipient_profile(bidder_uei, lookback_years)

        if scope is None:
            logger.warning("decision_scope piid=%s result=missing", target.piid)
            bidder = incumbent = None
        else:
            bidder = self._history.recipient_stats(lookback_years, uei=bidder_uei, scope=scope)
            incumbent = self._history.recipient_stats(
                lookback_years,
                uei=target.recipient_uei,
                name=target.recipient_name,
                scope=scope,
                exclude_piid=target.piid,
            )

        benchmark = None
        set_aside = SetAsideSignal()
        if scope is not None and target.naics:
            benchmark = self._history.benchmark(target.naics, scope, lookback_years)
            set_aside = self._history.set_aside_mix(target.naics, scope, lookback_years)

        return DecisionFacts(
            scope=scope.name if scope else "",
            naics=target.naics,
            award_size=target.obligated,
            bidder_naics=frozenset(profile.naics_codes),
            bidder_set_asides=frozenset(profile.set_asides),
            bidder_award_count=bidder.award_count if bidder else 0,
            bidder_obligated=bidder.total_obligated if bidder else 0.0,
            incumbent_name=target.recipient_name or "the incumbent",
            incumbent_award_count=incumbent.award_count if incumbent else 0,
            incumbent_obligated=incumbent.total_obligated if incumbent else 0.0,
            benchmark=benchmark,
            set_aside=set_aside,
            days_remaining=lifecycle.days_remaining,
            burn_percent=lifecycle.burn_percent,
            lookback_years=lookback_years,
        )
