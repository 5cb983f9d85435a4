"""Award performance lifecycle classification."""

from .calculator import burn_percent, classify, classify_award, today_utc

__all__ = ["burn_percent", "classify", "classify_award", "today_utc"]
