"""Unit tests for the weighted decision engine."""

from datetime import date, timedelta
from unittest.mock import Mock

import pytest

from sb_analytics.errors import NotFound
from sb_analytics.fetchers import AwardFetcher, HistoryFetcher
from sb_analytics.models import (
    Award,
    Benchmark,
    Criterion,
    RecipientProfile,
    RecipientStats,
    Scope,
    SetAsideSignal,
)
from sb_analytics.scorer import (
    CRITERIA,
    DEFAULT_WEIGHTS,
    DecisionEngine,
    DecisionFacts,
    ScoringWeights,
    categorize,
    score_facts,
    socio_economic_categories,
    weighted_percent,
)
from sb_analytics.scorer.rules import (
    COMPETITIVE_INTELLIGENCE,
    COMPLIANCE,
    CUSTOMER_INTIMACY,
    PAST_PERFORMANCE,
    PRICE_COMPETITIVENESS,
    SCHEDULE_RISK,
    STAFFING,
    TECHNICAL_FIT,
)

TODAY = date(2026, 1, 1)
BENCHMARK = Benchmark(p25=200_000, p50=500_000, p75=900_000, sample_size=40)


def _facts(**overrides) -> DecisionFacts:
    defaults = dict(
        scope="Example Agency",
        naics="541512",
        award_size=400_000,
        bidder_naics=frozenset({"541512"}),
        bidder_award_count=3,
        bidder_obligated=2_000_000,
        incumbent_name="Incumbent LLC",
        incumbent_award_count=0,
        benchmark=BENCHMARK,
        days_remaining=200,
        burn_percent=40,
    )
    defaults.update(overrides)
    return DecisionFacts(**defaults)


def _score(table, **overrides) -> int:
    return table.evaluate(_facts(**overrides))[0]


# --- Weights ---

class TestWeights:
    def test_default_weights_sum_to_100(self):
        assert sum(DEFAULT_WEIGHTS.as_dict().values()) == 100

    def test_default_weight_values(self):
        assert DEFAULT_WEIGHTS.as_dict() == {
            "technical_fit": 24,
            "past_performance": 20,
            "staffing": 12,
            "schedule_risk": 8,
            "compliance": 8,
            "price_competitiveness": 8,
            "customer_intimacy": 10,
            "competitive_intelligence": 10,
        }

    def test_weights_not_summing_to_100_rejected(self):
        with pytest.raises(ValueError):
            ScoringWeights(technical_fit=30)

    def test_zero_weight_rejected(self):
        with pytest.raises(ValueError):
            ScoringWeights(technical_fit=0, past_performance=44)

    def test_every_criterion_has_a_weight(self):
        assert [t.key for t in CRITERIA] == list(DEFAULT_WEIGHTS.as_dict())


# --- Category thresholds ---

class TestCategorize:
    @pytest.mark.parametrize(
        "percent,expected",
        [
            (100.0, "bid"),
            (80.0, "bid"),
            (79.9, "conditional"),
            (65.0, "conditional"),
            (64.9, "no_bid"),
            (20.0, "no_bid"),
        ],
    )
    def test_boundaries(self, percent, expected):
        assert categorize(percent) == expected


class TestWeightedPercent:
    def test_all_fives_is_100(self):
        criteria = [Criterion(name=t.name, weight=w, score=5, rationale="r")
                    for t, w in zip(CRITERIA, DEFAULT_WEIGHTS.as_dict().values())]
        assert weighted_percent(criteria) == 100.0

    def test_all_ones_is_20(self):
        criteria = [Criterion(name=t.name, weight=w, score=1, rationale="r")
                    for t, w in zip(CRITERIA, DEFAULT_WEIGHTS.as_dict().values())]
        assert weighted_percent(criteria) == 20.0

    def test_matches_formula(self):
        decision = score_facts(_facts(bidder_award_count=1, bidder_obligated=50_000))
        expected = round(sum(c.weight * c.score / 5 for c in decision.criteria), 1)
        assert decision.weighted_percent == expected
        assert decision.category == categorize(decision.weighted_percent)


# --- Rule tables ---

class TestTechnicalFit:
    def test_exact_match(self):
        assert _score(TECHNICAL_FIT) == 5

    def test_family_match(self):
        assert _score(TECHNICAL_FIT, bidder_naics=frozenset({"541519"})) == 4

    def test_no_match(self):
        assert _score(TECHNICAL_FIT, bidder_naics=frozenset({"236220"})) == 2

    def test_empty_portfolio(self):
        assert _score(TECHNICAL_FIT, bidder_naics=frozenset()) == 2

    def test_target_without_naics(self):
        assert _score(TECHNICAL_FIT, naics=None) == 2


class TestPastPerformance:
    def test_three_awards(self):
        assert _score(PAST_PERFORMANCE, bidder_award_count=3, bidder_obligated=10) == 5

    def test_two_million_dollars(self):
        assert _score(PAST_PERFORMANCE, bidder_award_count=1, bidder_obligated=2_000_000) == 5

    def test_one_award(self):
        assert _score(PAST_PERFORMANCE, bidder_award_count=1, bidder_obligated=1_999_999) == 3

    def test_none(self):
        assert _score(PAST_PERFORMANCE, bidder_award_count=0, bidder_obligated=0) == 1


class TestStaffingAndPrice:
    @pytest.mark.parametrize(
        "size,staffing,price",
        [
            (100_000, 5, 4),
            (200_000, 5, 4),
            (400_000, 5, 5),
            (500_000, 5, 5),
            (700_000, 4, 3),
            (900_000, 4, 3),
            (900_001, 2, 2),
        ],
    )
    def test_against_benchmark(self, size, staffing, price):
        assert _score(STAFFING, award_size=size) == staffing
        assert _score(PRICE_COMPETITIVENESS, award_size=size) == price

    def test_no_benchmark_defaults_to_3(self):
        assert _score(STAFFING, benchmark=None) == 3
        assert _score(PRICE_COMPETITIVENESS, benchmark=None) == 3


class TestScheduleRisk:
    @pytest.mark.parametrize(
        "days,burn,expected",
        [
            (200, 40, 5),
            (181, 69, 5),
            (180, 40, 3),
            (200, 70, 3),
            (59, 10, 2),
            (300, 91, 2),
            (60, 90, 3),
            (-10, 100, 2),
        ],
    )
    def test_rules(self, days, burn, expected):
        assert _score(SCHEDULE_RISK, days_remaining=days, burn_percent=burn) == expected

    def test_unknown_dates_or_burn(self):
        assert _score(SCHEDULE_RISK, days_remaining=None) == 3
        assert _score(SCHEDULE_RISK, burn_percent=None) == 3


class TestCompliance:
    def test_no_signal(self):
        assert _score(COMPLIANCE, set_aside=SetAsideSignal()) == 3

    def test_matching_category(self):
        signal = SetAsideSignal(dominant="SERVICE DISABLED VETERAN OWNED SMALL BUSINESS SET-ASIDE",
                                prevalence=0.6, sample_size=10)
        bidder = frozenset({"SDVOSB Set-Aside"})
        assert _score(COMPLIANCE, set_aside=signal, bidder_set_asides=bidder) == 5

    def test_mismatched_category(self):
        signal = SetAsideSignal(dominant="8(A) SOLE SOURCE", prevalence=0.5, sample_size=10)
        bidder = frozenset({"HUBZONE SET-ASIDE"})
        assert _score(COMPLIANCE, set_aside=signal, bidder_set_asides=bidder) == 2

    def test_signal_without_bidder_categories(self):
        signal = SetAsideSignal(dominant="WOMEN OWNED SMALL BUSINESS", prevalence=0.5, sample_size=4)
        assert _score(COMPLIANCE, set_aside=signal) == 2

    def test_category_matching_is_case_insensitive(self):
        assert socio_economic_categories("HubZone set-aside") == {"HUBZone"}
        assert socio_economic_categories("8(A) Competed") == {"8(a)"}
        assert socio_economic_categories("Small Business Set-Aside") == set()


class TestCustomerIntimacy:
    @pytest.mark.parametrize("count,expected", [(0, 1), (1, 3), (2, 4), (3, 5), (12, 5)])
    def test_rules(self, count, expected):
        assert _score(CUSTOMER_INTIMACY, bidder_award_count=count) == expected


class TestCompetitiveIntelligence:
    @pytest.mark.parametrize("count,expected", [(0, 5), (1, 4), (2, 4), (3, 3), (5, 3), (6, 2)])
    def test_rules(self, count, expected):
        assert _score(COMPETITIVE_INTELLIGENCE, incumbent_award_count=count) == expected


class TestRationale:
    def test_rationale_uses_computed_numbers(self):
        decision = score_facts(_facts())
        by_name = {c.name: c for c in decision.criteria}
        assert "$2,000,000" in by_name["Past Performance"].rationale
        assert "$500,000" in by_name["Staffing"].rationale
        assert "200 days" in by_name["Schedule Risk"].rationale
        assert "Incumbent LLC" in by_name["Competitive Intelligence"].rationale

    def test_criteria_order_and_ranges(self):
        decision = score_facts(_facts(benchmark=None, days_remaining=None))
        assert [c.name for c in decision.criteria] == [t.name for t in CRITERIA]
        assert sum(c.weight for c in decision.criteria) == 100
        assert all(1 <= c.score <= 5 for c in decision.criteria)


# --- Engine orchestration ---

def _engine(award: Award, bidder: RecipientStats, incumbent: RecipientStats,
            profile: RecipientProfile, benchmark, set_aside: SetAsideSignal):
    awards = Mock(spec=AwardFetcher)
    awards.get_award.return_value = award
    history = Mock(spec=HistoryFetcher)
    history.recipient_profile.return_value = profile
    history.benchmark.return_value = benchmark
    history.set_aside_mix.return_value = set_aside

    def _stats(years, uei=None, name=None, scope=None, exclude_piid=None):
        return bidder if uei == "BIDDER000001" else incumbent

    history.recipient_stats.side_effect = _stats
    return DecisionEngine(awards, history, today=lambda: TODAY), awards, history


class TestDecisionEngine:
    def _award(self, award_row, **overrides) -> Award:
        row = award_row(
            pop_start=TODAY - timedelta(days=100),
            pop_current_end=TODAY + timedelta(days=100),
            pop_potential_end=TODAY + timedelta(days=200),
        )
        row.update(overrides)
        return Award.from_row(row)

    def test_end_to_end_example(self, award_row):
        engine, _, history = _engine(
            self._award(award_row),
            bidder=RecipientStats(award_count=3, total_obligated=2_000_000),
            incumbent=RecipientStats(award_count=0, total_obligated=0),
            profile=RecipientProfile(naics_codes={"541512"}),
            benchmark=BENCHMARK,
            set_aside=SetAsideSignal(),
        )

        decision = engine.score("HC102825F0042", "BIDDER000001", 5)

        scores = {c.name: c.score for c in decision.criteria}
        assert scores == {
            "Technical Fit": 5,
            "Past Performance": 5,
            "Staffing": 5,
            "Schedule Risk": 5,
            "Compliance": 3,
            "Price Competitiveness": 5,
            "Customer Intimacy": 5,
            "Competitive Intelligence": 5,
        }
        # Compliance 3 costs 8 * 2/5 = 3.2 points
        assert decision.weighted_percent == 96.8
        assert decision.category == "bid"
        assert decision.scope == "Example Agency"
        assert decision.naics == "541512"

        scope = Scope(level="agency", name="Example Agency")
        history.benchmark.assert_called_once_with("541512", scope, 5)
        history.set_aside_mix.assert_called_once_with("541512", scope, 5)

    def test_incumbent_matched_by_uei(self, award_row):
        engine, _, history = _engine(
            self._award(award_row),
            bidder=RecipientStats(),
            incumbent=RecipientStats(award_count=7, total_obligated=9_000_000),
            profile=RecipientProfile(),
            benchmark=None,
            set_aside=SetAsideSignal(),
        )
        decision = engine.score("HC102825F0042", "BIDDER000001", 3)

        scores = {c.name: c.score for c in decision.criteria}
        assert scores["Competitive Intelligence"] == 2
        assert scores["Past Performance"] == 1
        assert decision.category == "no_bid"
        history.recipient_stats.assert_any_call(
            3, uei="INCUMBENT001", name="Incumbent LLC",
            scope=Scope(level="agency", name="Example Agency"),
            exclude_piid="HC102825F0042",
        )

    def test_incumbent_stats_exclude_the_award_being_scored(self, award_row):
        engine, _, history = _engine(
            self._award(award_row),
            bidder=RecipientStats(award_count=3, total_obligated=2_000_000),
            incumbent=RecipientStats(),
            profile=RecipientProfile(naics_codes={"541512"}),
            benchmark=BENCHMARK,
            set_aside=SetAsideSignal(),
        )
        decision = engine.score("HC102825F0042", "BIDDER000001", 5)

        ci = next(c for c in decision.criteria if c.name == "Competitive Intelligence")
        assert ci.score == 5
        assert "no other awards" in ci.rationale
        incumbent_call = next(
            call for call in history.recipient_stats.call_args_list
            if call.kwargs.get("uei") == "INCUMBENT001"
        )
        assert incumbent_call.kwargs["exclude_piid"] == "HC102825F0042"

    def test_sub_agency_scope_preferred(self, award_row):
        engine, _, _ = _engine(
            self._award(award_row, sub_agency="Example Command", office="Example Office"),
            bidder=RecipientStats(), incumbent=RecipientStats(),
            profile=RecipientProfile(), benchmark=None, set_aside=SetAsideSignal(),
        )
        decision = engine.score("HC102825F0042", "BIDDER000001")
        assert decision.scope == "Example Command"

    def test_missing_scope_skips_scope_queries(self, award_row):
        engine, _, history = _engine(
            self._award(award_row, agency=None),
            bidder=RecipientStats(), incumbent=RecipientStats(),
            profile=RecipientProfile(), benchmark=None, set_aside=SetAsideSignal(),
        )
        decision = engine.score("HC102825F0042", "BIDDER000001")
        assert decision.scope == ""
        history.recipient_stats.assert_not_called()
        history.benchmark.assert_not_called()

    def test_not_found_propagates(self):
        awards = Mock(spec=AwardFetcher)
        awards.get_award.side_effect = NotFound("No award found for that PIID.")
        engine = DecisionEngine(awards, Mock(spec=HistoryFetcher), today=lambda: TODAY)
        with pytest.raises(NotFound):
            engine.score("NOPE", "BIDDER000001")
