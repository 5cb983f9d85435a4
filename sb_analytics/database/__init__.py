"""Dual-source query layer for the award dataset."""

from .client import Database
from .executor import AdaptiveQueryExecutor
from .prober import HealthProber
from .sources import Freshness, SourceDescriptor, SourcePair, TemplateFactory

__all__ = [
    "Database",
    "AdaptiveQueryExecutor",
    "HealthProber",
    "Freshness",
    "SourceDescriptor",
    "SourcePair",
    "TemplateFactory",
]
