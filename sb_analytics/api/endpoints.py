"""Endpoint handlers and their cache categories."""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..cache import DETAIL, LIST, NO_STORE, ROLLUP
from ..database import HealthProber, SourceDescriptor
from ..fetchers import (
    DISCLAIMER,
    AwardFetcher,
    HistoryFetcher,
    RollupFetcher,
    SubawardFetcher,
)
from ..lifecycle import classify_award
from ..models import (
    AgencyRosterRequest,
    AgencyShareRequest,
    Award,
    AwardRequest,
    DecisionRequest,
    ExpiringContractsRequest,
    TeamingRequest,
    VendorHistoryRequest,
    parse_request,
)
from ..scorer import DecisionEngine
from .service import ApiRequest, Endpoint

logger = logging.getLogger(__name__)


def _award_row(award: Award) -> Dict[str, Any]:
    return award.model_dump(mode="json")


class Handlers:
    """Blocking handlers; each validates its request before touching the database."""

    def __init__(
        self,
        awards: AwardFetcher,
        history: HistoryFetcher,
        subawards: SubawardFetcher,
        rollups: RollupFetcher,
        engine: DecisionEngine,
        prober: HealthProber,
        fast_source: SourceDescriptor,
    ) -> None:
        self.awards = awards
        self.history = history
        self.subawards = subawards
        self.rollups = rollups
        self.engine = engine
        self.prober = prober
        self.fast_source = fast_source

    def health(self, request: ApiRequest) -> Dict[str, Any]:
        return {"ok": True, "db": self.prober.probe(self.fast_source)}

    def agencies(self, request: ApiRequest) -> Dict[str, Any]:
        params = parse_request(AgencyRosterRequest, request.params())
        names = self.awards.agency_roster(params.limit)
        return {"ok": True, "rows": [{"name": name} for name in names]}

    def agency_share(self, request: ApiRequest) -> Dict[str, Any]:
        params = parse_request(AgencyShareRequest, request.params())
        shares = self.rollups.agency_share(params)
        return {
            "ok": True,
            "fiscal_year": params.fy,
            "rows": [s.model_dump(mode="json") for s in shares],
        }

    def expiring_contracts(self, request: ApiRequest) -> Dict[str, Any]:
        params = parse_request(ExpiringContractsRequest, request.params())
        awards = self.awards.expiring(params)
        rows = [
            {
                "piid": a.piid,
                "award_key": a.award_key,
                "agency": a.agency,
                "sub_agency": a.sub_agency,
                "naics": a.naics,
                "recipient_name": a.recipient_name,
                "end_date": a.pop_current_end.isoformat() if a.pop_current_end else None,
                "value": a.ceiling,
            }
            for a in awards
        ]
        return {"ok": True, "rows": rows}

    def award(self, request: ApiRequest) -> Dict[str, Any]:
        params = parse_request(AwardRequest, request.params())
        award = self.awards.get_award(params.piid)
        lifecycle = classify_award(award)
        subs = self.subawards.footprint(award.piid, award.award_key)
        return {
            "ok": True,
            "award": _award_row(award),
            "snapshot": {
                "obligated": award.obligated,
                "current_value": award.current_value,
                "ceiling": award.ceiling,
                "pop_start": award.pop_start.isoformat() if award.pop_start else None,
                "pop_current_end": award.pop_current_end.isoformat() if award.pop_current_end else None,
                "pop_potential_end": award.pop_potential_end.isoformat() if award.pop_potential_end else None,
            },
            "lifecycle": lifecycle.model_dump(mode="json"),
            "subs": subs.model_dump(mode="json"),
            "disclaimer": DISCLAIMER,
        }

    def vendor_history(self, request: ApiRequest) -> Dict[str, Any]:
        params = parse_request(VendorHistoryRequest, request.params())
        awards = self.history.vendor_awards(params.uei, params.years, params.limit)
        totals = self.history.recipient_stats(params.years, uei=params.uei)
        return {
            "ok": True,
            "uei": params.uei,
            "years": params.years,
            "award_count": totals.award_count,
            "total_obligated": totals.total_obligated,
            "rows": [_award_row(a) for a in awards],
        }

    def teaming_candidates(self, request: ApiRequest) -> Dict[str, Any]:
        params = parse_request(TeamingRequest, request.params())
        candidates = self.history.teaming_candidates(params)
        return {
            "ok": True,
            "naics": params.naics,
            "agency": params.agency,
            "years": params.years,
            "rows": [c.model_dump(mode="json") for c in candidates],
        }

    def decision(self, request: ApiRequest) -> Dict[str, Any]:
        params = parse_request(DecisionRequest, request.params())
        decision = self.engine.score(params.piid, params.bidder_uei, params.lookback_years)
        return {
            "ok": True,
            "piid": params.piid,
            "bidder_uei": params.bidder_uei,
            "lookback_years": params.lookback_years,
            "decision": decision.model_dump(mode="json"),
        }


def _fields(model) -> tuple:
    """Every input a request model reads; all of them identify the request."""
    return tuple(model.model_fields)


def build_endpoints(handlers: Handlers) -> Dict[str, Endpoint]:
    """Endpoint name -> Endpoint, with each endpoint's cache category.

    Handlers read body fields as well as the query string, so every field of
    an endpoint's request model is part of its cache key.
    """
    endpoints = [
        Endpoint("health", NO_STORE, handlers.health),
        Endpoint("agencies", ROLLUP, handlers.agencies, _fields(AgencyRosterRequest)),
        Endpoint("agency_share", ROLLUP, handlers.agency_share, _fields(AgencyShareRequest)),
        Endpoint(
            "expiring_contracts",
            LIST,
            handlers.expiring_contracts,
            _fields(ExpiringContractsRequest),
        ),
        Endpoint("award", DETAIL, handlers.award, _fields(AwardRequest)),
        Endpoint("vendor_history", DETAIL, handlers.vendor_history, _fields(VendorHistoryRequest)),
        Endpoint("teaming_candidates", LIST, handlers.teaming_candidates, _fields(TeamingRequest)),
        Endpoint("decision", DETAIL, handlers.decision, _fields(DecisionRequest)),
    ]
    return {endpoint.name: endpoint for endpoint in endpoints}
