"""Latency-bounded health probe for the Fast source.

The probe runs fresh for every adaptive query. There is no breaker state
shared between calls. One probe costs at most one connection attempt
(libpq floors connect_timeout at 2 seconds) plus a single statement bounded
by ``timeout``.
"""

import logging
import time

from ..errors import ProbeFailure
from .client import Database
from .sources import SourceDescriptor

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SECONDS = 1.5


def probe_sql(relation: str) -> str:
    """Catalog lookup and a one-row read of ``relation`` in one round trip."""
    return f"""
        SELECT m.ispopulated AS populated,
               (SELECT 1 FROM {relation} LIMIT 1) AS sample
        FROM pg_catalog.pg_matviews m
        WHERE m.schemaname = %s AND m.matviewname = %s
    """


class HealthProber:
    """Checks that a materialized view exists, is populated and answers quickly."""

    def __init__(self, database: Database, timeout: float = PROBE_TIMEOUT_SECONDS) -> None:
        self._database = database
        self.timeout = timeout

    def probe(self, source: SourceDescriptor) -> bool:
        """Return True when ``source`` is usable. Never raises."""
        start = time.monotonic()
        try:
            self._check(source)
        except Exception as exc:
            logger.warning(
                "probe_complete source=%s relation=%s healthy=false error=%r duration_ms=%.0f",
                source.name,
                source.relation,
                exc,
                (time.monotonic() - start) * 1000,
            )
            return False
        logger.debug(
            "probe_complete source=%s relation=%s healthy=true duration_ms=%.0f",
            source.name,
            source.relation,
            (time.monotonic() - start) * 1000,
        )
        return True

    def _check(self, source: SourceDescriptor) -> None:
        schema, name = source.schema_and_name
        with self._database.connect(
            statement_timeout=self.timeout, connect_timeout=self.timeout
        ) as conn:
            with conn.cursor() as cur:
                cur.execute(probe_sql(source.relation), (schema, name))
                row = cur.fetchone()
        if not row or not row["populated"]:
            raise ProbeFailure(f"{source.relation} missing or not populated")
