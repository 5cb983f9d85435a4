"""Numbers a decision is scored from.

Every rationale string is rendered from these values and nothing else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..models import Benchmark, SetAsideSignal

# Category -> lowercase substrings that identify it in a set-aside designation
SOCIO_ECONOMIC_CATEGORIES = {
    "SDVOSB": ("sdvosb", "service disabled veteran", "service-disabled veteran"),
    "WOSB": ("wosb", "women owned", "women-owned"),
    "HUBZone": ("hubzone",),
    "8(a)": ("8(a)", "8a"),
}


def socio_economic_categories(text: Optional[str]) -> set[str]:
    """Categories named in a set-aside designation, matched case-insensitively."""
    if not text:
        return set()
    lowered = text.lower()
    return {
        category
        for category, needles in SOCIO_ECONOMIC_CATEGORIES.items()
        if any(needle in lowered for needle in needles)
    }


def _money(value: Optional[float]) -> str:
    return "n/a" if value is None else f"${value:,.0f}"


@dataclass(frozen=True)
class DecisionFacts:
    """Inputs to the rule table for one target award and one bidder."""

    scope: str
    naics: Optional[str]
    award_size: float
    bidder_naics: frozenset[str] = frozenset()
    bidder_set_asides: frozenset[str] = frozenset()
    bidder_award_count: int = 0
    bidder_obligated: float = 0.0
    incumbent_name: str = "the incumbent"
    incumbent_award_count: int = 0
    incumbent_obligated: float = 0.0
    benchmark: Optional[Benchmark] = None
    set_aside: SetAsideSignal = field(default_factory=SetAsideSignal)
    days_remaining: Optional[int] = None
    burn_percent: Optional[int] = None
    lookback_years: int = 5

    @property
    def naics_family(self) -> Optional[str]:
        return self.naics[:3] if self.naics and len(self.naics) >= 3 else None

    @property
    def naics_match(self) -> str:
        """'exact', 'family' or 'none'."""
        if self.naics and self.naics in self.bidder_naics:
            return "exact"
        family = self.naics_family
        if family and any(code.startswith(family) for code in self.bidder_naics):
            return "family"
        return "none"

    @property
    def bidder_categories(self) -> set[str]:
        categories: set[str] = set()
        for value in self.bidder_set_asides:
            categories |= socio_economic_categories(value)
        return categories

    @property
    def set_aside_categories(self) -> set[str]:
        return socio_economic_categories(self.set_aside.dominant)

    @property
    def set_aside_match(self) -> bool:
        return bool(self.set_aside_categories & self.bidder_categories)

    def template_values(self) -> dict:
        """Values available to rationale templates."""
        benchmark = self.benchmark
        return {
            "scope": self.scope,
            "naics": self.naics or "n/a",
            "naics_family": self.naics_family or "n/a",
            "bidder_naics_count": len(self.bidder_naics),
            "bidder_award_count": self.bidder_award_count,
            "bidder_obligated": _money(self.bidder_obligated),
            "incumbent_name": self.incumbent_name,
            "incumbent_award_count": self.incumbent_award_count,
            "incumbent_obligated": _money(self.incumbent_obligated),
            "award_size": _money(self.award_size),
            "p25": _money(benchmark.p25 if benchmark else None),
            "p50": _money(benchmark.p50 if benchmark else None),
            "p75": _money(benchmark.p75 if benchmark else None),
            "benchmark_size": benchmark.sample_size if benchmark else 0,
            "days_remaining": self.days_remaining,
            "burn_percent": self.burn_percent,
            "set_aside": self.set_aside.dominant or "none",
            "set_aside_share": f"{self.set_aside.prevalence * 100:.0f}%",
            "bidder_categories": ", ".join(sorted(self.bidder_categories)) or "none on record",
            "lookback_years": self.lookback_years,
        }
