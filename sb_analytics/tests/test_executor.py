"""Unit tests for the Fast/Canonical query layer."""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from sb_analytics.database import AdaptiveQueryExecutor, Database, HealthProber
from sb_analytics.errors import QueryExecutionFailure

from .conftest import FakeDatabase, FakeProber


def _template(relation: str) -> str:
    return f"SELECT count(*) AS value FROM {relation} WHERE naics_code = %(naics)s"


# --- Source selection and fallback ---

class TestAdaptiveQueryExecutor:
    def test_healthy_fast_source_is_used(self, sources):
        db = FakeDatabase(rows=[{"value": 7}])
        executor = AdaptiveQueryExecutor(db, sources, FakeProber(healthy=True))

        rows = executor.execute(_template, {"naics": "541512"})

        assert rows == [{"value": 7}]
        assert db.sources_tried == ["fast"]
        sql, params, _ = db.calls[0]
        assert "public.awards_fast" in sql
        assert params == {"naics": "541512"}

    def test_unhealthy_fast_goes_straight_to_canonical(self, sources):
        db = FakeDatabase()
        executor = AdaptiveQueryExecutor(db, sources, FakeProber(healthy=False))

        executor.execute(_template, {"naics": "541512"})

        assert db.sources_tried == ["canonical"]
        assert "FROM public.awards WHERE" in db.calls[0][0]

    def test_fast_failure_retries_once_on_canonical(self, sources):
        db = FakeDatabase(rows=[{"value": 3}], failing=("fast",))
        executor = AdaptiveQueryExecutor(db, sources, FakeProber(healthy=True))

        rows = executor.execute(_template, {"naics": "541512"})

        assert rows == [{"value": 3}]
        assert db.sources_tried == ["fast", "canonical"]
        # Same parameters on both attempts
        assert db.calls[0][1] == db.calls[1][1]

    def test_canonical_failure_is_final(self, sources):
        db = FakeDatabase(failing=("canonical",))
        executor = AdaptiveQueryExecutor(db, sources, FakeProber(healthy=False))

        with pytest.raises(QueryExecutionFailure) as exc_info:
            executor.execute(_template)

        assert db.sources_tried == ["canonical"]
        assert exc_info.value.source == "canonical"

    def test_both_sources_failing_raises_canonical_error(self, sources):
        db = FakeDatabase(failing=("fast", "canonical"))
        executor = AdaptiveQueryExecutor(db, sources, FakeProber(healthy=True))

        with pytest.raises(QueryExecutionFailure) as exc_info:
            executor.execute(_template)

        assert db.sources_tried == ["fast", "canonical"]
        assert exc_info.value.source == "canonical"

    def test_probe_runs_for_every_call(self, sources):
        prober = FakeProber(healthy=True)
        executor = AdaptiveQueryExecutor(FakeDatabase(), sources, prober)

        executor.execute(_template)
        executor.execute(_template)

        assert prober.calls == 2

    def test_unexpected_error_wrapped(self, sources):
        db = MagicMock()
        db.fetch_all.side_effect = RuntimeError("boom")
        executor = AdaptiveQueryExecutor(db, sources, FakeProber(healthy=False))

        with pytest.raises(QueryExecutionFailure) as exc_info:
            executor.execute(_template)

        assert isinstance(exc_info.value.cause, RuntimeError)
        assert exc_info.value.public_message == "query failed"


# --- Health probe ---

def _mock_database(fetchone=None, execute_error=None):
    """Database whose connect() yields a connection with a scripted cursor."""
    cursor = MagicMock()
    cursor.fetchone.return_value = fetchone
    if execute_error is not None:
        cursor.execute.side_effect = execute_error
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    database = MagicMock()
    database.connect.return_value.__enter__.return_value = conn
    return database, cursor


class TestHealthProber:
    def test_populated_view_is_healthy(self, sources):
        database, cursor = _mock_database(fetchone={"populated": True, "sample": 1})
        prober = HealthProber(database, timeout=1.5)

        assert prober.probe(sources.fast) is True
        database.connect.assert_called_once_with(statement_timeout=1.5, connect_timeout=1.5)
        sql, args = cursor.execute.call_args.args
        assert args == ("public", "awards_fast")
        assert "SELECT 1 FROM public.awards_fast LIMIT 1" in sql

    def test_catalog_check_and_sample_read_share_one_statement(self, sources):
        database, cursor = _mock_database(fetchone={"populated": True, "sample": None})

        assert HealthProber(database).probe(sources.fast) is True
        assert cursor.execute.call_count == 1
        assert database.connect.call_count == 1

    def test_unpopulated_view_is_unhealthy(self, sources):
        database, cursor = _mock_database(fetchone={"populated": False, "sample": None})

        assert HealthProber(database).probe(sources.fast) is False
        assert cursor.execute.call_count == 1

    def test_missing_view_is_unhealthy(self, sources):
        database, _ = _mock_database(fetchone=None)
        assert HealthProber(database).probe(sources.fast) is False

    def test_driver_error_is_unhealthy(self, sources):
        database, _ = _mock_database(execute_error=psycopg2.OperationalError("timeout"))
        assert HealthProber(database).probe(sources.fast) is False

    def test_connect_error_is_unhealthy(self, sources):
        database = MagicMock()
        database.connect.side_effect = psycopg2.OperationalError("refused")
        assert HealthProber(database).probe(sources.fast) is False


# --- Database client ---

class TestDatabase:
    @patch("sb_analytics.database.client.psycopg2.connect")
    def test_fetch_all_applies_timeouts_and_closes(self, mock_connect):
        conn = mock_connect.return_value
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.description = [("value",)]
        cursor.fetchall.return_value = [{"value": 1}]

        db = Database("postgresql://example/db", connect_timeout=15, statement_timeout=20)
        rows = db.fetch_all("SELECT 1 AS value", source="canonical")

        assert rows == [{"value": 1}]
        kwargs = mock_connect.call_args.kwargs
        assert kwargs["connect_timeout"] == 15
        assert kwargs["options"] == "-c statement_timeout=20000"
        conn.set_session.assert_called_once_with(readonly=True, autocommit=True)
        conn.close.assert_called_once()

    @patch("sb_analytics.database.client.psycopg2.connect")
    def test_short_connect_timeout_floored(self, mock_connect):
        db = Database("postgresql://example/db")
        with db.connect(statement_timeout=1.5, connect_timeout=1.5):
            pass

        kwargs = mock_connect.call_args.kwargs
        assert kwargs["connect_timeout"] == 2
        assert kwargs["options"] == "-c statement_timeout=1500"

    @patch("sb_analytics.database.client.psycopg2.connect")
    def test_driver_error_wrapped(self, mock_connect):
        conn = mock_connect.return_value
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.execute.side_effect = psycopg2.OperationalError("canceling statement due to statement timeout")

        db = Database("postgresql://example/db")
        with pytest.raises(QueryExecutionFailure) as exc_info:
            db.fetch_all("SELECT pg_sleep(60)", source="fast")

        assert exc_info.value.source == "fast"
        assert exc_info.value.public_message == "query failed"
        conn.close.assert_called_once()

    @patch("sb_analytics.database.client.psycopg2.connect")
    def test_connect_failure_wrapped(self, mock_connect):
        mock_connect.side_effect = psycopg2.OperationalError("could not connect")

        with pytest.raises(QueryExecutionFailure):
            Database("postgresql://example/db").fetch_all("SELECT 1", source="canonical")
