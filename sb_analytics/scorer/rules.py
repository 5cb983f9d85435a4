"""Ordered rule tables for the eight decision criteria.

Each criterion is a list of (condition, score, rationale template) rules;
the first rule whose condition holds decides the score. The last rule of
every table always holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .facts import DecisionFacts

PAST_PERFORMANCE_DOLLARS = 2_000_000


def _always(facts: DecisionFacts) -> bool:
    return True


@dataclass(frozen=True)
class Rule:
    score: int
    rationale: str
    when: Callable[[DecisionFacts], bool] = _always


@dataclass(frozen=True)
class CriterionRules:
    key: str
    name: str
    rules: tuple[Rule, ...]

    def evaluate(self, facts: DecisionFacts) -> tuple[int, str]:
        """Score and rendered rationale from the first matching rule."""
        for rule in self.rules:
            if rule.when(facts):
                return rule.score, rule.rationale.format(**facts.template_values())
        raise LookupError(f"No rule matched for {self.key}")


def _has_benchmark(f: DecisionFacts) -> bool:
    return f.benchmark is not None


def _schedule_known(f: DecisionFacts) -> bool:
    return f.days_remaining is not None and f.burn_percent is not None


TECHNICAL_FIT = CriterionRules("technical_fit", "Technical Fit", (
    Rule(5, "Bidder has prior awards in NAICS {naics}.",
         lambda f: f.naics_match == "exact"),
    Rule(4, "Bidder has prior awards in the {naics_family} NAICS family but not {naics}.",
         lambda f: f.naics_match == "family"),
    Rule(2, "None of the bidder's {bidder_naics_count} NAICS codes match {naics} or its family."),
))

PAST_PERFORMANCE = CriterionRules("past_performance", "Past Performance", (
    Rule(5, "Bidder has {bidder_award_count} awards totaling {bidder_obligated} at {scope} in {lookback_years} years.",
         lambda f: f.bidder_award_count >= 3 or f.bidder_obligated >= PAST_PERFORMANCE_DOLLARS),
    Rule(3, "Bidder has {bidder_award_count} award(s) totaling {bidder_obligated} at {scope} in {lookback_years} years.",
         lambda f: f.bidder_award_count >= 1),
    Rule(1, "Bidder has no awards at {scope} in {lookback_years} years."),
))

STAFFING = CriterionRules("staffing", "Staffing", (
    Rule(3, "No obligation benchmark for NAICS {naics} at {scope}.",
         lambda f: not _has_benchmark(f)),
    Rule(5, "Award size {award_size} is at or below the median {p50} of {benchmark_size} comparable awards.",
         lambda f: f.award_size <= f.benchmark.p50),
    Rule(4, "Award size {award_size} is at or below the 75th percentile {p75} of {benchmark_size} comparable awards.",
         lambda f: f.award_size <= f.benchmark.p75),
    Rule(2, "Award size {award_size} exceeds the 75th percentile {p75} of {benchmark_size} comparable awards."),
))

SCHEDULE_RISK = CriterionRules("schedule_risk", "Schedule Risk", (
    Rule(3, "Remaining days or burn rate unknown.",
         lambda f: not _schedule_known(f)),
    Rule(5, "{days_remaining} days remain and {burn_percent}% of ceiling is obligated.",
         lambda f: f.days_remaining > 180 and f.burn_percent < 70),
    Rule(2, "Only {days_remaining} days remain or {burn_percent}% of ceiling is already obligated.",
         lambda f: f.days_remaining < 60 or f.burn_percent > 90),
    Rule(3, "{days_remaining} days remain with {burn_percent}% of ceiling obligated."),
))

COMPLIANCE = CriterionRules("compliance", "Compliance", (
    Rule(3, "No historical set-aside signal for NAICS {naics} at {scope}.",
         lambda f: f.set_aside.dominant is None),
    Rule(5, "Dominant set-aside {set_aside} ({set_aside_share} of awards) matches bidder categories: {bidder_categories}.",
         lambda f: f.set_aside_match),
    Rule(2, "Dominant set-aside {set_aside} ({set_aside_share} of awards) does not match bidder categories: {bidder_categories}."),
))

PRICE_COMPETITIVENESS = CriterionRules("price_competitiveness", "Price Competitiveness", (
    Rule(3, "No obligation benchmark for NAICS {naics} at {scope}.",
         lambda f: not _has_benchmark(f)),
    Rule(4, "Award size {award_size} is at or below the 25th percentile {p25}.",
         lambda f: f.award_size <= f.benchmark.p25),
    Rule(5, "Award size {award_size} is between the 25th percentile {p25} and the median {p50}.",
         lambda f: f.award_size <= f.benchmark.p50),
    Rule(3, "Award size {award_size} is between the median {p50} and the 75th percentile {p75}.",
         lambda f: f.award_size <= f.benchmark.p75),
    Rule(2, "Award size {award_size} is above the 75th percentile {p75}."),
))

CUSTOMER_INTIMACY = CriterionRules("customer_intimacy", "Customer Intimacy", (
    Rule(5, "Bidder holds {bidder_award_count} prior awards at {scope}.",
         lambda f: f.bidder_award_count >= 3),
    Rule(4, "Bidder holds 2 prior awards at {scope}.",
         lambda f: f.bidder_award_count == 2),
    Rule(3, "Bidder holds 1 prior award at {scope}.",
         lambda f: f.bidder_award_count == 1),
    Rule(1, "Bidder has no prior awards at {scope}."),
))

COMPETITIVE_INTELLIGENCE = CriterionRules("competitive_intelligence", "Competitive Intelligence", (
    Rule(5, "Incumbent {incumbent_name} has no other awards at {scope} in {lookback_years} years.",
         lambda f: f.incumbent_award_count == 0),
    Rule(4, "Incumbent {incumbent_name} has {incumbent_award_count} other award(s) totaling {incumbent_obligated} at {scope}.",
         lambda f: f.incumbent_award_count <= 2),
    Rule(3, "Incumbent {incumbent_name} has {incumbent_award_count} other awards totaling {incumbent_obligated} at {scope}.",
         lambda f: f.incumbent_award_count <= 5),
    Rule(2, "Incumbent {incumbent_name} is entrenched with {incumbent_award_count} other awards totaling {incumbent_obligated} at {scope}."),
))

CRITERIA: tuple[CriterionRules, ...] = (
    TECHNICAL_FIT,
    PAST_PERFORMANCE,
    STAFFING,
    SCHEDULE_RISK,
    COMPLIANCE,
    PRICE_COMPETITIVENESS,
    CUSTOMER_INTIMACY,
    COMPETITIVE_INTELLIGENCE,
)
