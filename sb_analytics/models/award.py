"""Award - typed record for one row of the federal award dataset."""

from datetime import date
from typing import Any, Mapping, Optional
from pydantic import BaseModel, Field, field_validator

from .coercion import clean_text, coerce_date, coerce_number
from .history import Scope


class Award(BaseModel):
    """A single contract award identified by its PIID.

    ``ceiling >= obligated`` is expected but not enforced.
    """

    piid: str = Field(..., description="Procurement instrument identifier")
    award_key: Optional[str] = Field(None, description="Dataset-wide unique award key")

    # Awarding organization hierarchy
    agency: Optional[str] = Field(None, description="Awarding agency name")
    sub_agency: Optional[str] = Field(None, description="Awarding sub-agency / component")
    office: Optional[str] = Field(None, description="Awarding office name")

    # Classification
    naics: Optional[str] = Field(None, description="NAICS industry code")
    naics_description: Optional[str] = None
    set_aside: Optional[str] = Field(None, description="Type of set-aside, None when unrestricted")

    # Recipient
    recipient_uei: Optional[str] = Field(None, description="Recipient unique entity identifier")
    recipient_name: Optional[str] = None

    # Financial
    obligated: float = Field(default=0.0, description="Dollars obligated to date")
    current_value: float = Field(default=0.0, description="Base plus exercised options")
    ceiling: float = Field(default=0.0, description="Base plus all options")

    # Period of performance
    pop_start: Optional[date] = None
    pop_current_end: Optional[date] = None
    pop_potential_end: Optional[date] = None

    # Competition
    offers_received: Optional[int] = None
    extent_competed: Optional[str] = None

    @field_validator("obligated", "current_value", "ceiling", mode="before")
    @classmethod
    def dollars(cls, v: Any) -> float:
        return coerce_number(v, 0.0)

    @field_validator("offers_received", mode="before")
    @classmethod
    def offers(cls, v: Any) -> Optional[int]:
        number = coerce_number(v, None)
        return None if number is None else int(number)

    @field_validator("pop_start", "pop_current_end", "pop_potential_end", mode="before")
    @classmethod
    def dates(cls, v: Any) -> Optional[date]:
        return coerce_date(v)

    @field_validator(
        "award_key", "agency", "sub_agency", "office", "naics", "naics_description",
        "set_aside", "recipient_uei", "recipient_name", "extent_competed",
        mode="before",
    )
    @classmethod
    def text(cls, v: Any) -> Optional[str]:
        return clean_text(v)

    @property
    def scope(self) -> Optional[Scope]:
        """Sub-agency, else office, else agency: the first one present."""
        for level, name in (
            ("sub_agency", self.sub_agency),
            ("office", self.office),
            ("agency", self.agency),
        ):
            if name:
                return Scope(level=level, name=name)
        return None

    @property
    def window_end(self) -> Optional[date]:
        """Potential end when known, else current end."""
        return self.pop_potential_end or self.pop_current_end

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Award":
        """Build from a query row aliased to the field names above."""
        return cls.model_validate(dict(row))
