"""Validated request structures for every endpoint.

Raw query-string and JSON values are converted into these models before any
query is built. Numeric parameters are clamped to their documented ranges
and unparseable numbers fall back to the default; missing or malformed
identifiers are rejected.
"""

import re
from datetime import date
from typing import Any, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from .coercion import coerce_number

_PIID_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9\-]{0,49}$")
_UEI_PATTERN = re.compile(r"^[A-Z0-9]{12}$")
_NAICS_PATTERN = re.compile(r"^\d{2,6}$")

LIMIT_RANGE = (1, 300)
YEARS_RANGE = (1, 10)
WINDOW_DAYS_RANGE = (1, 365)
ROSTER_LIMIT_RANGE = (1, 400)
SHARE_LIMIT_RANGE = (1, 50)
FISCAL_YEAR_RANGE = (2000, 2100)


def clamp(value: Any, default: int, low: int, high: int) -> int:
    """Parse ``value`` as an integer and clamp it to ``[low, high]``."""
    number = coerce_number(value, None)
    if number is None:
        number = default
    return max(low, min(high, int(number)))


def _identifier(value: Any, pattern: re.Pattern, label: str) -> str:
    text = str(value or "").strip().upper()
    if not text:
        raise ValueError(f"Missing {label}")
    if not pattern.match(text):
        raise ValueError(f"Malformed {label}")
    return text


def _naics_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        items = str(value).split(",")
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        raise ValueError("Malformed naics")
    codes = [str(item).strip() for item in items if str(item).strip()]
    for code in codes:
        if not _NAICS_PATTERN.match(code):
            raise ValueError(f"Malformed naics code {code!r}")
    return codes


def _optional_text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


class AgencyRosterRequest(BaseModel):
    limit: int = 400

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, v):
        return clamp(v, 400, *ROSTER_LIMIT_RANGE)


def current_fiscal_year(today: Optional[date] = None) -> int:
    """Federal fiscal year, which starts on October 1."""
    today = today or date.today()
    return today.year + 1 if today.month >= 10 else today.year


class AgencyShareRequest(BaseModel):
    """Small-business share rollup for one fiscal year (``fy`` on the query string)."""

    fy: int = Field(default_factory=current_fiscal_year)
    limit: int = 12

    @field_validator("fy", mode="before")
    @classmethod
    def _fy(cls, v):
        return clamp(v, current_fiscal_year(), *FISCAL_YEAR_RANGE)

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, v):
        return clamp(v, 12, *SHARE_LIMIT_RANGE)


class ExpiringContractsRequest(BaseModel):
    """Awards whose current end date falls inside the next ``window_days``."""

    naics: list[str] = Field(default_factory=list)
    agency: Optional[str] = None
    window_days: int = 180
    limit: int = 100

    @field_validator("naics", mode="before")
    @classmethod
    def _naics(cls, v):
        return _naics_list(v)

    @field_validator("agency", mode="before")
    @classmethod
    def _agency(cls, v):
        return _optional_text(v)

    @field_validator("window_days", mode="before")
    @classmethod
    def _window(cls, v):
        return clamp(v, 180, *WINDOW_DAYS_RANGE)

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, v):
        return clamp(v, 100, *LIMIT_RANGE)


class AwardRequest(BaseModel):
    piid: str

    @field_validator("piid", mode="before")
    @classmethod
    def _piid(cls, v):
        return _identifier(v, _PIID_PATTERN, "piid")


class VendorHistoryRequest(BaseModel):
    uei: str
    years: int = 5
    limit: int = 50

    @field_validator("uei", mode="before")
    @classmethod
    def _uei(cls, v):
        return _identifier(v, _UEI_PATTERN, "uei")

    @field_validator("years", mode="before")
    @classmethod
    def _years(cls, v):
        return clamp(v, 5, *YEARS_RANGE)

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, v):
        return clamp(v, 50, *LIMIT_RANGE)


class TeamingRequest(BaseModel):
    """Candidate partners ranked by obligated dollars in a NAICS slice."""

    naics: list[str]
    agency: Optional[str] = None
    years: int = 5
    limit: int = 25
    exclude_uei: Optional[str] = None

    @field_validator("naics", mode="before")
    @classmethod
    def _naics(cls, v):
        codes = _naics_list(v)
        if not codes:
            raise ValueError("Missing naics")
        return codes

    @field_validator("agency", mode="before")
    @classmethod
    def _agency(cls, v):
        return _optional_text(v)

    @field_validator("exclude_uei", mode="before")
    @classmethod
    def _exclude(cls, v):
        text = _optional_text(v)
        return text.upper() if text else None

    @field_validator("years", mode="before")
    @classmethod
    def _years(cls, v):
        return clamp(v, 5, *YEARS_RANGE)

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, v):
        return clamp(v, 25, *LIMIT_RANGE)


class DecisionRequest(BaseModel):
    piid: str
    bidder_uei: str
    lookback_years: int = 5

    @field_validator("piid", mode="before")
    @classmethod
    def _piid(cls, v):
        return _identifier(v, _PIID_PATTERN, "piid")

    @field_validator("bidder_uei", mode="before")
    @classmethod
    def _uei(cls, v):
        return _identifier(v, _UEI_PATTERN, "bidder_uei")

    @field_validator("lookback_years", mode="before")
    @classmethod
    def _years(cls, v):
        return clamp(v, 5, *YEARS_RANGE)


RequestModel = TypeVar("RequestModel", bound=BaseModel)


def parse_request(model: Type[RequestModel], data: Optional[Mapping[str, Any]]) -> RequestModel:
    """Validate ``data`` into ``model`` or raise a 400-class ValidationError."""
    values = dict(data or {})
    for name in model.model_fields:
        values.setdefault(name, None)
    values = {k: v for k, v in values.items() if k in model.model_fields}
    try:
        return model.model_validate(values)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        message = first.get("msg", "invalid request")
        message = message.removeprefix("Value error, ")
        field = ".".join(str(part) for part in first.get("loc", ()))
        if first.get("type") == "missing":
            message = f"Missing {field}"
        raise ValidationError(message) from exc
