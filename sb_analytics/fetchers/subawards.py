"""Subcontract footprint under a prime award.

Secondary data: failures degrade to an empty footprint instead of failing
the primary response.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..database import AdaptiveQueryExecutor
from ..errors import AnalyticsError
from ..models import SubcontractFootprint, SubcontractRecipient
from ..models.coercion import clean_text, coerce_int, coerce_number
from . import columns as c

logger = logging.getLogger(__name__)

TOP_RECIPIENTS = 10

DISCLAIMER = (
    "Subcontractor data is sourced from USAspending. Primes are not required to "
    "report every subcontract, so this list may be incomplete."
)


def subawards_sql(relation: str) -> str:
    return f"""
        SELECT
            COALESCE({c.SUB_NAME}, '') AS name,
            COALESCE({c.SUB_UEI}, '') AS uei,
            SUM({c.SUB_AMOUNT}) AS total_amount,
            COUNT(*) AS action_count
        FROM {relation}
        WHERE
            ({c.SUB_PRIME_PIID} = %(piid)s OR {c.SUB_PRIME_KEY} = %(award_key)s)
            AND {c.SUB_AMOUNT} IS NOT NULL
        GROUP BY COALESCE({c.SUB_NAME}, ''), COALESCE({c.SUB_UEI}, '')
    """


def summarize(rows: list[dict]) -> SubcontractFootprint:
    """Fold per-recipient rows into totals and the top recipients by amount."""
    total_amount = 0.0
    total_actions = 0
    recipients: set[str] = set()
    top: list[SubcontractRecipient] = []

    for row in rows:
        name = clean_text(row.get("name")) or "Unknown"
        uei = clean_text(row.get("uei"))
        amount = coerce_number(row.get("total_amount"), 0.0)
        total_amount += amount
        total_actions += coerce_int(row.get("action_count"))
        recipients.add(uei or name)
        top.append(SubcontractRecipient(name=name, uei=uei, amount=amount))

    top.sort(key=lambda r: r.amount, reverse=True)
    return SubcontractFootprint(
        count=total_actions,
        distinct_recipients=len(recipients),
        total_amount=total_amount,
        top=top[:TOP_RECIPIENTS],
    )


class SubawardFetcher:
    def __init__(self, executor: AdaptiveQueryExecutor) -> None:
        self._executor = executor

    def footprint(self, piid: str, award_key: Optional[str]) -> SubcontractFootprint:
        try:
            rows = self._executor.execute(subawards_sql, {"piid": piid, "award_key": award_key})
        except AnalyticsError as exc:
            logger.warning("subaward_lookup piid=%s result=degraded error=%s", piid, exc)
            return SubcontractFootprint()
        return summarize(rows)
