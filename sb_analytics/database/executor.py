"""Adaptive query executor over a Fast/Canonical source pair.

Each call probes the Fast source, runs the template against the chosen
source and, when a Fast attempt fails, retries exactly once against
Canonical. A Canonical failure is final. Separate calls made for one
request may observe the dataset at different points in time; no
transaction spans them.
"""

import logging
import time
from typing import Any, Dict, List

from tenacity import Retrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from ..errors import QueryExecutionFailure
from .client import Database, Params
from .prober import HealthProber
from .sources import SourceDescriptor, SourcePair, TemplateFactory

logger = logging.getLogger(__name__)


def _log_fallback(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning("source_fallback from=fast to=canonical error=%s", exc)


class AdaptiveQueryExecutor:
    """Runs source-agnostic query templates against the healthiest source."""

    def __init__(self, database: Database, sources: SourcePair, prober: HealthProber) -> None:
        self._database = database
        self.sources = sources
        self._prober = prober

    def plan(self) -> List[SourceDescriptor]:
        """Sources to try, in order, for one call."""
        if self._prober.probe(self.sources.fast):
            return [self.sources.fast, self.sources.canonical]
        return [self.sources.canonical]

    def execute(self, template: TemplateFactory, params: Params = None) -> List[Dict[str, Any]]:
        """Run ``template`` with ``params`` and return the result rows.

        Raises:
            QueryExecutionFailure: When the last source attempted fails.
        """
        plan = self.plan()
        retryer = Retrying(
            stop=stop_after_attempt(len(plan)),
            retry=retry_if_exception_type(QueryExecutionFailure),
            before_sleep=_log_fallback,
            reraise=True,
        )
        for attempt in retryer:
            with attempt:
                source = plan[attempt.retry_state.attempt_number - 1]
                return self._run(source, template, params)
        raise QueryExecutionFailure("canonical")  # unreachable with reraise=True

    def _run(self, source: SourceDescriptor, template: TemplateFactory, params: Params) -> List[Dict[str, Any]]:
        start = time.monotonic()
        try:
            rows = self._database.fetch_all(source.render(template), params, source=source.name)
        except QueryExecutionFailure as exc:
            self._log(source, "failure", start, error=exc.cause)
            raise
        except Exception as exc:
            self._log(source, "failure", start, error=exc)
            raise QueryExecutionFailure(source.name, exc) from exc
        self._log(source, "success", start, rows=len(rows))
        return rows

    @staticmethod
    def _log(source: SourceDescriptor, result: str, start: float, rows: int = 0, error: Any = None) -> None:
        duration_ms = (time.monotonic() - start) * 1000
        if error is None:
            logger.info(
                "query_complete source=%s result=%s rows=%d duration_ms=%.0f",
                source.name, result, rows, duration_ms,
            )
        else:
            logger.error(
                "query_complete source=%s result=%s error=%r duration_ms=%.0f",
                source.name, result, error, duration_ms,
            )
