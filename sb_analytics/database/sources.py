"""Source descriptors for the two logically identical views of one entity."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class Freshness(str, Enum):
    FAST = "fast"
    CANONICAL = "canonical"


# Builds query text for the relation it is given
TemplateFactory = Callable[[str], str]


@dataclass(frozen=True)
class SourceDescriptor:
    """One queryable view of an entity.

    Attributes:
        name: Label used in logs ("fast" or "canonical").
        relation: Schema-qualified relation swapped into query templates.
        freshness: Freshness class of the view.
    """

    name: str
    relation: str
    freshness: Freshness

    def render(self, template: TemplateFactory) -> str:
        return template(self.relation)

    @property
    def schema_and_name(self) -> tuple[str, str]:
        schema, _, name = self.relation.rpartition(".")
        return schema or "public", name


@dataclass(frozen=True)
class SourcePair:
    """Fast (materialized, may be absent or stale) and Canonical (authoritative) views."""

    fast: SourceDescriptor
    canonical: SourceDescriptor

    @classmethod
    def of(cls, fast_relation: str, canonical_relation: str) -> "SourcePair":
        return cls(
            fast=SourceDescriptor("fast", fast_relation, Freshness.FAST),
            canonical=SourceDescriptor("canonical", canonical_relation, Freshness.CANONICAL),
        )
