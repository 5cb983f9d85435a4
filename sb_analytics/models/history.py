"""Aggregates over award history used by the decision engine and list endpoints."""

from typing import Literal, Optional
from pydantic import BaseModel, Field


ScopeLevel = Literal["sub_agency", "office", "agency"]


class Scope(BaseModel, frozen=True):
    """Organizational level used to bound historical comparisons."""

    level: ScopeLevel
    name: str


class RecipientStats(BaseModel):
    """Award count and obligated dollars for one recipient over a window."""

    award_count: int = 0
    total_obligated: float = 0.0


class RecipientProfile(BaseModel):
    """NAICS codes and set-aside designations seen on a recipient's own awards."""

    naics_codes: set[str] = Field(default_factory=set)
    set_asides: set[str] = Field(default_factory=set)


class Benchmark(BaseModel):
    """Quartiles of obligated dollars for a NAICS/scope slice."""

    p25: float
    p50: float
    p75: float
    sample_size: int


class SetAsideSignal(BaseModel):
    """Dominant historical set-aside in a NAICS/scope slice."""

    dominant: Optional[str] = None
    prevalence: float = 0.0
    sample_size: int = 0


class TeamingCandidate(BaseModel):
    name: str
    uei: Optional[str] = None
    award_count: int = 0
    total_obligated: float = 0.0
    naics_codes: list[str] = Field(default_factory=list)


class SubcontractRecipient(BaseModel):
    name: str
    uei: Optional[str] = None
    amount: float = 0.0


class SubcontractFootprint(BaseModel):
    """Reported subawards under one prime award."""

    count: int = 0
    distinct_recipients: int = 0
    total_amount: float = 0.0
    top: list[SubcontractRecipient] = Field(default_factory=list)


class AgencyShare(BaseModel):
    """Small-business share of one agency's obligations in a fiscal year."""

    agency: str
    sb_share_pct: float = Field(0.0, description="Percent of dollars awarded to small businesses")
    dollars_total: float = Field(0.0, description="Total obligated dollars")
