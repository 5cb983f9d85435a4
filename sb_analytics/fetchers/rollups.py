"""Precomputed agency rollups."""

from __future__ import annotations

import logging

from ..database import AdaptiveQueryExecutor
from ..models import AgencyShare, AgencyShareRequest
from ..models.coercion import clean_text, coerce_number

logger = logging.getLogger(__name__)


def agency_share_sql(relation: str) -> str:
    """Agencies for one fiscal year, largest obligated total first."""
    return f"""
        SELECT agency, sb_share_pct, dollars_total
        FROM {relation}
        WHERE fiscal_year = %(fy)s
        ORDER BY dollars_total DESC NULLS LAST
        LIMIT %(limit)s
    """


class RollupFetcher:
    """Agency-level rollups over the share relation pair."""

    def __init__(self, executor: AdaptiveQueryExecutor) -> None:
        self._executor = executor

    def agency_share(self, request: AgencyShareRequest) -> list[AgencyShare]:
        rows = self._executor.execute(agency_share_sql, {"fy": request.fy, "limit": request.limit})
        shares = [
            AgencyShare(
                agency=clean_text(row.get("agency")) or "Unknown",
                sb_share_pct=coerce_number(row.get("sb_share_pct"), 0.0),
                dollars_total=coerce_number(row.get("dollars_total"), 0.0),
            )
            for row in rows
        ]
        logger.debug("agency_share fy=%s rows=%d", request.fy, len(shares))
        return shares
