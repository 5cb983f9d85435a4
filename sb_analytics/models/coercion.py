"""Boundary coercion for loosely typed result rows.

Numeric columns may arrive as ``Decimal``, ``int``, ``float`` or text
depending on the source relation and driver.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def coerce_number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Return ``value`` as a float, or ``default`` when it is null or non-numeric."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, Decimal):
        if not value.is_finite():
            return default
        number = float(value)
    else:
        text = str(value).strip().replace(",", "").replace("$", "")
        if not text:
            return default
        try:
            number = float(Decimal(text))
        except (InvalidOperation, ValueError):
            return default
    if number != number or number in (float("inf"), float("-inf")):
        return default
    return number


def coerce_int(value: Any, default: int = 0) -> int:
    number = coerce_number(value, None)
    return default if number is None else int(number)


def coerce_date(value: Any) -> Optional[date]:
    """Parse a DATE column that may arrive as ``date``, ``datetime`` or ISO text."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
