"""Unpooled PostgreSQL access for the award dataset.

A connection is opened per sub-operation with a connect timeout and a
per-connection statement timeout, and closed before the call returns.
"""

import logging
import math
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

import psycopg2
from psycopg2.extras import RealDictCursor

from ..errors import QueryExecutionFailure

logger = logging.getLogger(__name__)

Params = Optional[Union[Mapping[str, Any], Sequence[Any]]]

# libpq rounds connect_timeout values below 2 seconds up to 2
MIN_CONNECT_TIMEOUT = 2


class Database:
    """Opens short-lived connections to the analytics database."""

    def __init__(
        self,
        dsn: str,
        connect_timeout: int = 15,
        statement_timeout: float = 20.0,
    ) -> None:
        """Initialize from a DSN.

        Args:
            dsn: PostgreSQL connection string.
            connect_timeout: Seconds allowed to establish a connection.
            statement_timeout: Default per-statement deadline in seconds.
        """
        self._dsn = dsn
        self.connect_timeout = connect_timeout
        self.statement_timeout = statement_timeout

    @contextmanager
    def connect(
        self,
        statement_timeout: Optional[float] = None,
        connect_timeout: Optional[int] = None,
    ) -> Iterator[Any]:
        """Yield a fresh connection bounded by the given deadlines."""
        deadline_ms = int((statement_timeout or self.statement_timeout) * 1000)
        conn_timeout = max(MIN_CONNECT_TIMEOUT, math.ceil(connect_timeout or self.connect_timeout))
        conn = psycopg2.connect(
            self._dsn,
            connect_timeout=conn_timeout,
            options=f"-c statement_timeout={deadline_ms}",
            cursor_factory=RealDictCursor,
        )
        try:
            conn.set_session(readonly=True, autocommit=True)
            yield conn
        finally:
            conn.close()

    def fetch_all(
        self,
        sql: str,
        params: Params = None,
        *,
        source: str = "",
        statement_timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        """Run one statement and return its rows as plain dicts.

        Raises:
            QueryExecutionFailure: On any driver error, including timeouts.
        """
        try:
            with self.connect(statement_timeout=statement_timeout) as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall() if cur.description else []
        except psycopg2.Error as exc:
            raise QueryExecutionFailure(source, exc) from exc
        return [dict(row) for row in rows]
