"""Historical aggregates: vendor history, scope statistics, benchmarks, set-asides, teaming.

Every method is one adaptive query. Calls are independent and are not
wrapped in a shared transaction.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..database import AdaptiveQueryExecutor
from ..models import (
    Award,
    Benchmark,
    RecipientProfile,
    RecipientStats,
    Scope,
    SetAsideSignal,
    TeamingCandidate,
    TeamingRequest,
)
from ..models.coercion import clean_text, coerce_int, coerce_number
from . import columns as c

logger = logging.getLogger(__name__)

NO_SET_ASIDE_VALUES = {"", "none", "no set aside used", "not applicable", "n/a"}


def is_set_aside(value: Optional[str]) -> bool:
    """False for null, blank and the dataset's "no set-aside" markers."""
    if value is None:
        return False
    return value.strip().strip(".").lower() not in NO_SET_ASIDE_VALUES


def _recipient_clause(uei: Optional[str]) -> str:
    column = c.RECIPIENT_UEI if uei else c.RECIPIENT_NAME
    return f"{column} = %(recipient)s"


def _scope_clause(scope: Optional[Scope]) -> str:
    if scope is None:
        return "TRUE"
    return f"{c.SCOPE_COLUMNS[scope.level]} = %(scope)s"


def vendor_awards_sql(relation: str) -> str:
    return f"""
        SELECT {c.AWARD_SELECT}
        FROM {relation}
        WHERE {c.RECIPIENT_UEI} = %(uei)s AND {c.LOOKBACK_CLAUSE}
        ORDER BY {c.START_DATE} DESC NULLS LAST
        LIMIT %(limit)s
    """


def recipient_profile_sql(relation: str) -> str:
    return f"""
        SELECT DISTINCT {c.NAICS} AS naics, {c.SET_ASIDE} AS set_aside
        FROM {relation}
        WHERE {c.RECIPIENT_UEI} = %(uei)s AND {c.LOOKBACK_CLAUSE}
    """


def benchmark_sql(scope: Scope):
    def template(relation: str) -> str:
        return f"""
            SELECT
                COUNT(*) AS sample_size,
                percentile_cont(0.25) WITHIN GROUP (ORDER BY {c.OBLIGATED}) AS p25,
                percentile_cont(0.50) WITHIN GROUP (ORDER BY {c.OBLIGATED}) AS p50,
                percentile_cont(0.75) WITHIN GROUP (ORDER BY {c.OBLIGATED}) AS p75
            FROM {relation}
            WHERE {c.NAICS} = %(naics)s
              AND {_scope_clause(scope)}
              AND {c.OBLIGATED} IS NOT NULL
              AND {c.LOOKBACK_CLAUSE}
        """
    return template


def set_aside_mix_sql(scope: Scope):
    def template(relation: str) -> str:
        return f"""
            SELECT {c.SET_ASIDE} AS set_aside, COUNT(*) AS award_count
            FROM {relation}
            WHERE {c.NAICS} = %(naics)s
              AND {_scope_clause(scope)}
              AND {c.LOOKBACK_CLAUSE}
            GROUP BY {c.SET_ASIDE}
        """
    return template


def recipient_stats_sql(uei: Optional[str], scope: Optional[Scope]):
    """Count and obligated sum for one recipient, optionally leaving out one PIID."""
    def template(relation: str) -> str:
        return f"""
            SELECT
                COUNT(*) AS award_count,
                COALESCE(SUM({c.OBLIGATED}), 0) AS total_obligated
            FROM {relation}
            WHERE {_recipient_clause(uei)}
              AND {_scope_clause(scope)}
              AND (%(exclude_piid)s::text IS NULL OR {c.PIID} IS DISTINCT FROM %(exclude_piid)s)
              AND {c.LOOKBACK_CLAUSE}
        """
    return template


def teaming_sql(relation: str) -> str:
    return f"""
        SELECT
            MAX({c.RECIPIENT_NAME}) AS name,
            {c.RECIPIENT_UEI} AS uei,
            COUNT(*) AS award_count,
            COALESCE(SUM({c.OBLIGATED}), 0) AS total_obligated,
            ARRAY_AGG(DISTINCT {c.NAICS}) AS naics_codes
        FROM {relation}
        WHERE {c.NAICS} = ANY(%(naics)s)
          AND {c.RECIPIENT_UEI} IS NOT NULL
          AND (%(exclude_uei)s::text IS NULL OR {c.RECIPIENT_UEI} <> %(exclude_uei)s)
          AND (
              %(agency)s::text IS NULL
              OR {c.AGENCY} ILIKE '%%' || %(agency)s || '%%'
              OR {c.SUB_AGENCY} ILIKE '%%' || %(agency)s || '%%'
          )
          AND {c.LOOKBACK_CLAUSE}
        GROUP BY {c.RECIPIENT_UEI}
        ORDER BY total_obligated DESC
        LIMIT %(limit)s
    """


def dominant_set_aside(rows: list[dict[str, Any]]) -> SetAsideSignal:
    """Pick the most frequent real set-aside and its share of the whole slice.

    Ties resolve alphabetically so the result is deterministic.
    """
    total = sum(coerce_int(row.get("award_count")) for row in rows)
    counts: dict[str, int] = {}
    for row in rows:
        value = clean_text(row.get("set_aside"))
        if is_set_aside(value):
            counts[value] = counts.get(value, 0) + coerce_int(row.get("award_count"))
    if not counts or total <= 0:
        return SetAsideSignal(sample_size=total)
    dominant = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0]
    return SetAsideSignal(
        dominant=dominant[0],
        prevalence=dominant[1] / total,
        sample_size=total,
    )


class HistoryFetcher:
    """Aggregate queries over historical awards."""

    def __init__(self, executor: AdaptiveQueryExecutor) -> None:
        self._executor = executor

    def vendor_awards(self, uei: str, years: int, limit: int) -> list[Award]:
        rows = self._executor.execute(
            vendor_awards_sql, {"uei": uei, "years": years, "limit": limit}
        )
        return [Award.from_row(row) for row in rows]

    def recipient_stats(
        self,
        years: int,
        uei: Optional[str] = None,
        name: Optional[str] = None,
        scope: Optional[Scope] = None,
        exclude_piid: Optional[str] = None,
    ) -> RecipientStats:
        """Award count and obligated total for a recipient, matched by UEI else by name.

        ``exclude_piid`` leaves one award out of the totals, e.g. the award
        being bid on when measuring its incumbent.
        """
        recipient = uei or name
        if not recipient:
            return RecipientStats()
        rows = self._executor.execute(
            recipient_stats_sql(uei, scope),
            {
                "recipient": recipient,
                "scope": scope.name if scope else None,
                "exclude_piid": exclude_piid,
                "years": years,
            },
        )
        if not rows:
            return RecipientStats()
        return RecipientStats(
            award_count=coerce_int(rows[0].get("award_count")),
            total_obligated=coerce_number(rows[0].get("total_obligated"), 0.0),
        )

    def recipient_profile(self, uei: str, years: int) -> RecipientProfile:
        rows = self._executor.execute(recipient_profile_sql, {"uei": uei, "years": years})
        profile = RecipientProfile()
        for row in rows:
            naics = clean_text(row.get("naics"))
            if naics:
                profile.naics_codes.add(naics)
            set_aside = clean_text(row.get("set_aside"))
            if is_set_aside(set_aside):
                profile.set_asides.add(set_aside)
        return profile

    def benchmark(self, naics: str, scope: Scope, years: int) -> Optional[Benchmark]:
        """Obligated-dollar quartiles for the slice, or None when it is empty."""
        rows = self._executor.execute(
            benchmark_sql(scope), {"naics": naics, "scope": scope.name, "years": years}
        )
        if not rows:
            return None
        row = rows[0]
        sample_size = coerce_int(row.get("sample_size"))
        quartiles = [coerce_number(row.get(k), None) for k in ("p25", "p50", "p75")]
        if sample_size == 0 or any(q is None for q in quartiles):
            return None
        p25, p50, p75 = quartiles
        return Benchmark(p25=p25, p50=p50, p75=p75, sample_size=sample_size)

    def set_aside_mix(self, naics: str, scope: Scope, years: int) -> SetAsideSignal:
        rows = self._executor.execute(
            set_aside_mix_sql(scope), {"naics": naics, "scope": scope.name, "years": years}
        )
        return dominant_set_aside(rows)

    def teaming_candidates(self, request: TeamingRequest) -> list[TeamingCandidate]:
        params = {
            "naics": request.naics,
            "exclude_uei": request.exclude_uei,
            "agency": request.agency,
            "years": request.years,
            "limit": request.limit,
        }
        rows = self._executor.execute(teaming_sql, params)
        return [
            TeamingCandidate(
                name=clean_text(row.get("name")) or "Unknown",
                uei=clean_text(row.get("uei")),
                award_count=coerce_int(row.get("award_count")),
                total_obligated=coerce_number(row.get("total_obligated"), 0.0),
                naics_codes=sorted(code for code in (row.get("naics_codes") or []) if code),
            )
            for row in rows
        ]
