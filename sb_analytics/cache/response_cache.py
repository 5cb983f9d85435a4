"""Shared response cache fronting whole endpoint responses.

Values for one key are interchangeable within their freshness window, so
writes are plain last-write-wins overwrites with no locking. Population
runs in the background after the response has been returned; a request
that follows a miss immediately may not see the new entry yet.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence
from urllib.parse import urlencode

from .policies import CachePolicy

logger = logging.getLogger(__name__)


def body_identity(body: Optional[Mapping[str, Any]], fields: Sequence[str]) -> str:
    """Stable hash of the semantically relevant body fields.

    String values are compared trimmed and case-insensitively so requests
    with the same intent collide.
    """
    relevant = {}
    for name in fields:
        value = (body or {}).get(name)
        relevant[name] = None if value is None else str(value).strip().upper()
    encoded = json.dumps(relevant, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def build_cache_key(
    method: str,
    path: str,
    query: Optional[Mapping[str, Any]] = None,
    body: Optional[Mapping[str, Any]] = None,
    body_fields: Sequence[str] = (),
) -> str:
    """Full logical request identity: method, path, sorted query string and body hash."""
    query_string = urlencode(sorted((str(k), str(v)) for k, v in (query or {}).items()))
    key = f"{method.upper()} {path}?{query_string}"
    if body_fields:
        key += f"#{body_identity(body, body_fields)}"
    return key


@dataclass(frozen=True)
class CachedResponse:
    status: int
    body: Dict[str, Any]
    stored_at: float
    policy: CachePolicy

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_fresh(self, now: float) -> bool:
        return self.age(now) < self.policy.ttl

    def is_servable(self, now: float) -> bool:
        return self.age(now) < self.policy.ttl + self.policy.stale_while_revalidate


MAX_ENTRIES = 10_000
SWEEP_INTERVAL_SECONDS = 60.0


class InMemoryStore:
    """Process-wide key -> serialized entry map, capped at ``max_entries``.

    Entries are kept in write order; once the cap is reached the oldest
    write is evicted first.
    """

    def __init__(self, max_entries: int = MAX_ENTRIES) -> None:
        self.max_entries = max_entries
        self._entries: Dict[str, tuple] = {}

    def get(self, key: str) -> Optional[tuple]:
        return self._entries.get(key)

    def set(self, key: str, entry: tuple) -> None:
        self._entries.pop(key, None)
        self._entries[key] = entry
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("cache_evict key=%s reason=capacity", oldest)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def items(self) -> list:
        return list(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)


class ResponseCache:
    """TTL + stale-while-revalidate cache of JSON response bodies.

    Entries past their revalidate window are dropped when read, and swept
    from the whole store at most once per ``sweep_interval`` on write.
    """

    def __init__(
        self,
        store: Optional[InMemoryStore] = None,
        clock: Callable[[], float] = time.time,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._store = store if store is not None else InMemoryStore()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()
        self._pending: set[asyncio.Task] = set()

    def now(self) -> float:
        return self._clock()

    def size(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Optional[CachedResponse]:
        """Return a servable entry (fresh or stale), or None on a miss."""
        raw = self._store.get(key)
        if raw is None:
            return None
        status, payload, stored_at, policy = raw
        entry = CachedResponse(status, json.loads(payload), stored_at, policy)
        if not entry.is_servable(self._clock()):
            self._store.delete(key)
            return None
        return entry

    def put(self, key: str, status: int, body: Mapping[str, Any], policy: CachePolicy) -> None:
        """Store a response; overwrites any existing entry for the key."""
        if not policy.cacheable:
            return
        now = self._clock()
        if now - self._last_sweep >= self._sweep_interval:
            self.sweep(now)
        payload = json.dumps(body, sort_keys=True, default=str)
        self._store.set(key, (status, payload, now, policy))
        logger.debug("cache_put key=%s policy=%s", key, policy.name)

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop every entry past its stale-while-revalidate window."""
        now = self._clock() if now is None else now
        self._last_sweep = now
        removed = 0
        for key, (_, _, stored_at, policy) in self._store.items():
            if now - stored_at >= policy.ttl + policy.stale_while_revalidate:
                self._store.delete(key)
                removed += 1
        if removed:
            logger.info("cache_sweep removed=%d remaining=%d", removed, len(self._store))
        return removed

    def put_later(self, key: str, status: int, body: Mapping[str, Any], policy: CachePolicy) -> asyncio.Task:
        """Fire-and-forget population relative to the response already returned."""
        async def _populate() -> None:
            self.put(key, status, body, policy)

        return self.track(asyncio.get_running_loop().create_task(_populate()))

    def track(self, task: asyncio.Task) -> asyncio.Task:
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for background population and revalidation to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
