"""Decision - explainable bid/no-bid recommendation for one award."""

from typing import Literal
from pydantic import BaseModel, Field


Category = Literal["bid", "conditional", "no_bid"]


class Criterion(BaseModel):
    """One scored criterion with its weight and templated rationale."""

    name: str
    weight: int = Field(..., gt=0, le=100)
    score: int = Field(..., ge=1, le=5)
    rationale: str


class Decision(BaseModel):
    """Weighted recommendation built from the eight fixed criteria.

    Recomputed on every request; nothing here is persisted.
    """

    scope: str = Field(..., description="Organizational scope used for comparisons")
    naics: str = Field("", description="NAICS code of the target award")
    criteria: list[Criterion] = Field(..., description="Ordered criteria")
    weighted_percent: float = Field(..., ge=0, le=100)
    category: Category
