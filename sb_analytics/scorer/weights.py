"""Scoring weight configuration.

Weights are whole percentage points and must sum to exactly 100.
"""

from pydantic import BaseModel, field_validator


class ScoringWeights(BaseModel):
    """Weights for the eight decision criteria, in evaluation order."""

    technical_fit: int = 24
    past_performance: int = 20
    staffing: int = 12
    schedule_risk: int = 8
    compliance: int = 8
    price_competitiveness: int = 8
    customer_intimacy: int = 10
    competitive_intelligence: int = 10
    version: str = "1.0"

    model_config = {"frozen": True}

    @field_validator(
        'technical_fit', 'past_performance', 'staffing', 'schedule_risk',
        'compliance', 'price_competitiveness', 'customer_intimacy',
        'competitive_intelligence',
    )
    @classmethod
    def weight_range(cls, v: int) -> int:
        """Ensure weights are in (0, 100]."""
        if not 0 < v <= 100:
            raise ValueError(f"Weight must be in (0, 100], got {v}")
        return v

    def model_post_init(self, __context) -> None:
        """Validate that weights sum to 100."""
        total = sum(self.as_dict().values())
        if total != 100:
            raise ValueError(f"Weights must sum to 100, got {total}. ({self.as_dict()})")

    def as_dict(self) -> dict[str, int]:
        """Criterion key -> weight, in evaluation order."""
        return {
            "technical_fit": self.technical_fit,
            "past_performance": self.past_performance,
            "staffing": self.staffing,
            "schedule_risk": self.schedule_risk,
            "compliance": self.compliance,
            "price_competitiveness": self.price_competitiveness,
            "customer_intimacy": self.customer_intimacy,
            "competitive_intelligence": self.competitive_intelligence,
        }


DEFAULT_WEIGHTS = ScoringWeights()
