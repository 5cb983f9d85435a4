"""Cache-fronted request handling.

Path routing and CORS stay with the hosting layer: it picks an endpoint
name and hands over the request identity. This module checks the response
cache, runs the endpoint handler off the event loop, shapes every failure
into ``{ok: false, error}`` and populates the cache in the background.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from ..cache import CachePolicy, ResponseCache, build_cache_key
from ..errors import AnalyticsError

logger = logging.getLogger(__name__)


@dataclass
class ApiRequest:
    method: str = "GET"
    path: str = "/"
    query: Dict[str, str] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None

    def params(self) -> Dict[str, Any]:
        """Query parameters overlaid with body fields."""
        merged: Dict[str, Any] = dict(self.query)
        if isinstance(self.body, dict):
            merged.update(self.body)
        return merged


@dataclass
class ApiResponse:
    status: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Endpoint:
    """A named handler and the cache policy of its category.

    Attributes:
        name: Endpoint name the hosting layer dispatches on.
        policy: TTL policy for the endpoint category.
        handler: Blocking function returning the success body.
        body_fields: Body fields that identify the request for caching.
    """

    name: str
    policy: CachePolicy
    handler: Callable[[ApiRequest], Dict[str, Any]]
    body_fields: tuple = ()


def error_body(message: str) -> Dict[str, Any]:
    return {"ok": False, "error": message}


class AnalyticsService:
    """Serves endpoint requests through the shared response cache."""

    def __init__(self, endpoints: Mapping[str, Endpoint], cache: Optional[ResponseCache] = None) -> None:
        self.endpoints = dict(endpoints)
        self.cache = cache if cache is not None else ResponseCache()
        self._refreshing: set[str] = set()

    def cache_key(self, endpoint: Endpoint, request: ApiRequest) -> str:
        return build_cache_key(
            request.method, request.path, request.query, request.body, endpoint.body_fields
        )

    async def serve(self, endpoint_name: str, request: ApiRequest) -> ApiResponse:
        endpoint = self.endpoints.get(endpoint_name)
        if endpoint is None:
            return ApiResponse(404, error_body("Not found"), {"Cache-Control": "no-store"})

        key = self.cache_key(endpoint, request)
        if endpoint.policy.cacheable:
            cached = self.cache.get(key)
            if cached is not None:
                if cached.is_fresh(self.cache.now()):
                    logger.info("cache_hit key=%s", key)
                    return self._respond(endpoint, cached.status, cached.body, "HIT")
                logger.info("cache_stale key=%s", key)
                self._revalidate(endpoint, request, key)
                return self._respond(endpoint, cached.status, cached.body, "STALE")
            logger.info("cache_miss key=%s", key)

        status, body = await self._compute(endpoint, request)
        if status == 200 and endpoint.policy.cacheable:
            self.cache.put_later(key, status, body, endpoint.policy)
        return self._respond(endpoint, status, body, "MISS")

    async def _compute(self, endpoint: Endpoint, request: ApiRequest) -> tuple[int, Dict[str, Any]]:
        try:
            body = await asyncio.to_thread(endpoint.handler, request)
        except AnalyticsError as exc:
            if exc.status_code >= 500:
                logger.error("endpoint=%s status=%d error=%s", endpoint.name, exc.status_code, exc)
            return exc.status_code, error_body(exc.public_message)
        except Exception:
            logger.error("endpoint=%s status=500 unexpected failure", endpoint.name, exc_info=True)
            return 500, error_body("internal error")
        return 200, body

    def _revalidate(self, endpoint: Endpoint, request: ApiRequest, key: str) -> None:
        if key in self._refreshing:
            return
        self._refreshing.add(key)

        async def _refresh() -> None:
            try:
                status, body = await self._compute(endpoint, request)
                if status == 200:
                    self.cache.put(key, status, body, endpoint.policy)
            finally:
                self._refreshing.discard(key)

        self.cache.track(asyncio.get_running_loop().create_task(_refresh()))

    @staticmethod
    def _respond(endpoint: Endpoint, status: int, body: Dict[str, Any], cache_state: str) -> ApiResponse:
        cache_control = endpoint.policy.cache_control() if status == 200 else "no-store"
        headers = {
            "Content-Type": "application/json",
            "Cache-Control": cache_control,
            "X-Cache": cache_state,
        }
        return ApiResponse(status, body, headers)
