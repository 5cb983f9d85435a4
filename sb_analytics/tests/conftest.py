"""Pytest configuration and fixtures."""

from datetime import date
from typing import Any, Callable, Optional

import pytest

from sb_analytics.database import SourcePair
from sb_analytics.errors import QueryExecutionFailure

TODAY = date(2026, 1, 1)


class FakeProber:
    """Stands in for HealthProber with a fixed answer."""

    def __init__(self, healthy: bool = True) -> None:
        self.healthy = healthy
        self.calls = 0

    def probe(self, source) -> bool:
        self.calls += 1
        return self.healthy


class FakeDatabase:
    """Records every statement; fails for the sources listed in ``failing``."""

    def __init__(self, rows: Optional[list] = None, failing: tuple = ()) -> None:
        self.rows = rows if rows is not None else [{"value": 1}]
        self.failing = set(failing)
        self.calls: list[tuple[str, Any, str]] = []

    def fetch_all(self, sql, params=None, *, source="", statement_timeout=None):
        self.calls.append((sql, params, source))
        if source in self.failing:
            raise QueryExecutionFailure(source, RuntimeError(f"{source} down"))
        return list(self.rows)

    @property
    def sources_tried(self) -> list[str]:
        return [source for _, _, source in self.calls]


class FakeExecutor:
    """Answers templates via a responder keyed on the rendered SQL."""

    def __init__(self, responder: Callable[[str, Any], list]) -> None:
        self.responder = responder
        self.calls: list[tuple[str, Any]] = []

    def execute(self, template, params=None):
        sql = template("public.awards")
        self.calls.append((sql, params))
        return self.responder(sql, params)


@pytest.fixture
def sources():
    return SourcePair.of("public.awards_fast", "public.awards")


@pytest.fixture
def award_row():
    """Row shaped like the aliased award projection."""
    def _make(**overrides):
        row = {
            "piid": "HC102825F0042",
            "award_key": "CONT_AWD_HC102825F0042",
            "agency": "Example Agency",
            "sub_agency": None,
            "office": None,
            "naics": "541512",
            "naics_description": "Computer Systems Design Services",
            "set_aside": None,
            "recipient_uei": "INCUMBENT001",
            "recipient_name": "Incumbent LLC",
            "obligated": "400000.00",
            "current_value": "600000",
            "ceiling": 1_000_000,
            "pop_start": date(2025, 9, 23),
            "pop_current_end": date(2026, 6, 1),
            "pop_potential_end": date(2026, 7, 20),
            "offers_received": "3",
            "extent_competed": "FULL AND OPEN COMPETITION",
        }
        row.update(overrides)
        return row
    return _make
