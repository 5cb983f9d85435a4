"""Service wiring and one-shot command line.

Usage:
    python -m sb_analytics.main health
    python -m sb_analytics.main agency-share [fiscal_year]
    python -m sb_analytics.main award <piid>
    python -m sb_analytics.main decision <piid> <bidder_uei> [lookback_years]
"""

import asyncio
import json
import logging
import sys

from .api import AnalyticsService, ApiRequest, Handlers, build_endpoints
from .cache import ResponseCache
from .config import Config, load_config
from .database import AdaptiveQueryExecutor, Database, HealthProber, SourcePair
from .fetchers import AwardFetcher, HistoryFetcher, RollupFetcher, SubawardFetcher
from .scorer import DecisionEngine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def build_service(config: Config) -> AnalyticsService:
    """Assemble the query layer, fetchers, decision engine and endpoints."""
    database = Database(
        config.database_url,
        connect_timeout=config.connect_timeout_seconds,
        statement_timeout=config.statement_timeout_seconds,
    )
    prober = HealthProber(database, timeout=config.probe_timeout_seconds)

    award_sources = SourcePair.of(config.fast_awards_relation, config.canonical_awards_relation)
    subaward_sources = SourcePair.of(config.fast_subawards_relation, config.canonical_subawards_relation)
    share_sources = SourcePair.of(config.fast_agency_share_relation, config.canonical_agency_share_relation)
    award_executor = AdaptiveQueryExecutor(database, award_sources, prober)
    subaward_executor = AdaptiveQueryExecutor(database, subaward_sources, prober)
    share_executor = AdaptiveQueryExecutor(database, share_sources, prober)

    awards = AwardFetcher(award_executor)
    history = HistoryFetcher(award_executor)
    handlers = Handlers(
        awards=awards,
        history=history,
        subawards=SubawardFetcher(subaward_executor),
        rollups=RollupFetcher(share_executor),
        engine=DecisionEngine(awards, history),
        prober=prober,
        fast_source=award_sources.fast,
    )
    return AnalyticsService(build_endpoints(handlers), ResponseCache())


def request_from_argv(argv: list) -> tuple:
    """Map CLI arguments to an endpoint name and request."""
    command = argv[0] if argv else "health"
    if command == "award" and len(argv) >= 2:
        return "award", ApiRequest("POST", "/sb/contracts/insights", body={"piid": argv[1]})
    if command == "decision" and len(argv) >= 3:
        body = {"piid": argv[1], "bidder_uei": argv[2]}
        if len(argv) >= 4:
            body["lookback_years"] = argv[3]
        return "decision", ApiRequest("POST", "/sb/decision", body=body)
    if command == "agency-share":
        query = {"fy": argv[1]} if len(argv) >= 2 else {}
        return "agency_share", ApiRequest("GET", "/sb/agency-share", query=query)
    if command == "health":
        return "health", ApiRequest("GET", "/sb/health")
    raise SystemExit(__doc__)


async def run_once(argv: list) -> int:
    config = load_config()
    logging.getLogger().setLevel(config.log_level)

    service = build_service(config)
    endpoint, request = request_from_argv(argv)
    response = await service.serve(endpoint, request)
    await service.cache.drain()
    print(json.dumps(response.body, indent=2, default=str))
    return 0 if response.status == 200 else 1


def main() -> None:
    sys.exit(asyncio.run(run_once(sys.argv[1:])))


if __name__ == "__main__":
    main()
