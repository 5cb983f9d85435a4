"""Lifecycle - performance-stage classification of an award."""

from typing import Literal, Optional
from pydantic import BaseModel, Field


Stage = Literal["not_started", "early", "mid", "late", "complete", "unknown"]


class Lifecycle(BaseModel):
    """Derived from an award's dates and dollars relative to today. Never cached on its own."""

    stage: Stage = Field(..., description="Performance stage bucket")
    burn_percent: Optional[int] = Field(None, description="Obligated as a percent of ceiling")
    elapsed_percent: Optional[int] = Field(None, description="Share of the performance window elapsed")
    days_remaining: Optional[int] = Field(None, description="Days until the window end, negative once past")
    stage_label: str = Field(..., description="Human-readable stage")
    burn_label: str = Field(..., description="Human-readable burn rate")
