"""Per-endpoint-category cache policies."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CachePolicy:
    """TTL plus stale-while-revalidate window, in seconds."""

    name: str
    ttl: int
    stale_while_revalidate: int = 0

    @property
    def cacheable(self) -> bool:
        return self.ttl > 0

    def cache_control(self) -> str:
        """Cache-Control header so intermediaries agree with the internal cache."""
        if not self.cacheable:
            return "no-store"
        return f"public, max-age={self.ttl}, stale-while-revalidate={self.stale_while_revalidate}"


ROLLUP = CachePolicy("rollup", ttl=86_400, stale_while_revalidate=3_600)
LIST = CachePolicy("list", ttl=300, stale_while_revalidate=60)
DETAIL = CachePolicy("detail", ttl=600, stale_while_revalidate=120)
NO_STORE = CachePolicy("none", ttl=0)
