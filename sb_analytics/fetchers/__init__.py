"""Endpoint-specific query templates built on the adaptive executor."""

from .awards import AwardFetcher
from .history import HistoryFetcher, is_set_aside
from .rollups import RollupFetcher
from .subawards import DISCLAIMER, SubawardFetcher

__all__ = [
    "AwardFetcher",
    "HistoryFetcher",
    "RollupFetcher",
    "SubawardFetcher",
    "DISCLAIMER",
    "is_set_aside",
]
