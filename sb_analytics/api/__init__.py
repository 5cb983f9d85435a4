"""Endpoint layer: handlers, cache categories and the cache-fronted service."""

from .endpoints import Handlers, build_endpoints
from .service import AnalyticsService, ApiRequest, ApiResponse, Endpoint

__all__ = [
    "AnalyticsService",
    "ApiRequest",
    "ApiResponse",
    "Endpoint",
    "Handlers",
    "build_endpoints",
]
