"""Award lookups and award lists over the adaptive executor."""

from __future__ import annotations

import logging
from typing import Optional

from ..database import AdaptiveQueryExecutor
from ..errors import NotFound
from ..models import Award, ExpiringContractsRequest
from . import columns as c

logger = logging.getLogger(__name__)


def award_by_piid_sql(relation: str) -> str:
    """Most recent award row for a PIID (duplicates resolve by current end date)."""
    return f"""
        SELECT {c.AWARD_SELECT}
        FROM {relation}
        WHERE {c.PIID} = %(piid)s
        ORDER BY {c.END_DATE} DESC NULLS LAST
        LIMIT 1
    """


def expiring_sql(relation: str) -> str:
    return f"""
        SELECT {c.AWARD_SELECT}
        FROM {relation}
        WHERE
            {c.END_DATE} >= CURRENT_DATE
            AND {c.END_DATE} < CURRENT_DATE + %(window_days)s::int
            AND (
                %(agency)s::text IS NULL
                OR {c.AGENCY} ILIKE '%%' || %(agency)s || '%%'
                OR {c.SUB_AGENCY} ILIKE '%%' || %(agency)s || '%%'
            )
            AND (
                %(naics)s::text[] IS NULL
                OR {c.NAICS} = ANY(%(naics)s)
            )
        ORDER BY {c.END_DATE} ASC
        LIMIT %(limit)s
    """


def agency_roster_sql(relation: str) -> str:
    """Distinct names across the agency, sub-agency and office levels."""
    return f"""
        SELECT DISTINCT name
        FROM (
            SELECT {c.AGENCY} AS name FROM {relation} WHERE {c.AGENCY} IS NOT NULL
            UNION
            SELECT {c.SUB_AGENCY} AS name FROM {relation} WHERE {c.SUB_AGENCY} IS NOT NULL
            UNION
            SELECT {c.OFFICE} AS name FROM {relation} WHERE {c.OFFICE} IS NOT NULL
        ) AS names
        ORDER BY name
        LIMIT %(limit)s
    """


class AwardFetcher:
    """Award detail, expiring-contract and agency-roster queries."""

    def __init__(self, executor: AdaptiveQueryExecutor) -> None:
        self._executor = executor

    def find_award(self, piid: str) -> Optional[Award]:
        rows = self._executor.execute(award_by_piid_sql, {"piid": piid})
        return Award.from_row(rows[0]) if rows else None

    def get_award(self, piid: str) -> Award:
        """Resolve an award by PIID.

        Raises:
            NotFound: When no row carries that PIID.
        """
        award = self.find_award(piid)
        if award is None:
            logger.info("award_lookup piid=%s result=not_found", piid)
            raise NotFound("No award found for that PIID.")
        return award

    def expiring(self, request: ExpiringContractsRequest) -> list[Award]:
        params = {
            "window_days": request.window_days,
            "agency": request.agency,
            "naics": request.naics or None,
            "limit": request.limit,
        }
        rows = self._executor.execute(expiring_sql, params)
        return [Award.from_row(row) for row in rows]

    def agency_roster(self, limit: int = 400) -> list[str]:
        rows = self._executor.execute(agency_roster_sql, {"limit": limit})
        return [row["name"] for row in rows if row.get("name")]
