"""Typed value objects shared by the query layer, the scorer and the endpoints."""

from .award import Award
from .lifecycle import Lifecycle
from .decision import Criterion, Decision
from .history import (
    AgencyShare,
    Benchmark,
    RecipientProfile,
    RecipientStats,
    Scope,
    SetAsideSignal,
    SubcontractFootprint,
    SubcontractRecipient,
    TeamingCandidate,
)
from .requests import (
    AgencyRosterRequest,
    AgencyShareRequest,
    AwardRequest,
    DecisionRequest,
    ExpiringContractsRequest,
    TeamingRequest,
    VendorHistoryRequest,
    parse_request,
)

__all__ = [
    "Award",
    "Lifecycle",
    "Criterion",
    "Decision",
    "AgencyShare",
    "Benchmark",
    "RecipientProfile",
    "RecipientStats",
    "Scope",
    "SetAsideSignal",
    "SubcontractFootprint",
    "SubcontractRecipient",
    "TeamingCandidate",
    "AgencyRosterRequest",
    "AgencyShareRequest",
    "AwardRequest",
    "DecisionRequest",
    "ExpiringContractsRequest",
    "TeamingRequest",
    "VendorHistoryRequest",
    "parse_request",
]
