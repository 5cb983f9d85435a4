"""Performance lifecycle calculator.

Classifies where an award sits in its period of performance and how much
of its ceiling has been obligated. Pure function of the award's dates and
dollars relative to a reference date.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Optional

from ..models.award import Award
from ..models.lifecycle import Lifecycle

EARLY_BELOW_PERCENT = 25
MID_BELOW_PERCENT = 75

STAGE_LABELS = {
    "not_started": "Not yet started",
    "early": "Early in performance",
    "mid": "Mid-performance",
    "late": "Late in performance, recompete approaching",
    "complete": "Period of performance complete",
    "unknown": "Unknown (performance dates missing or invalid)",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def burn_percent(obligated: float, ceiling: float) -> Optional[int]:
    """Obligated as a whole percent of ceiling; None when there is no ceiling."""
    if not ceiling or ceiling <= 0:
        return None
    return _round_half_up(obligated / ceiling * 100)


def classify(
    pop_start: Optional[date],
    pop_current_end: Optional[date],
    pop_potential_end: Optional[date],
    obligated: float,
    ceiling: float,
    today: Optional[date] = None,
) -> Lifecycle:
    """Classify the performance stage and burn rate of an award.

    The window ends at the potential end date when known, else the current
    end date. A missing date or a window with ``end <= start`` is
    ``unknown``.

    Args:
        pop_start: Period of performance start.
        pop_current_end: Current end date.
        pop_potential_end: End date if all options are exercised.
        obligated: Dollars obligated to date.
        ceiling: Potential total value.
        today: Reference date. Defaults to today in UTC.

    Returns:
        Lifecycle with stage, burn and labels.
    """
    if today is None:
        today = today_utc()

    burn = burn_percent(obligated, ceiling)
    burn_label = f"{burn}% of ceiling obligated" if burn is not None else "Ceiling not reported"

    end = pop_potential_end or pop_current_end
    days_remaining = (end - today).days if end else None

    if pop_start is None or end is None or end <= pop_start:
        return Lifecycle(
            stage="unknown",
            burn_percent=burn,
            days_remaining=days_remaining,
            stage_label=STAGE_LABELS["unknown"],
            burn_label=burn_label,
        )

    clamped = min(max(today, pop_start), end)
    elapsed = _round_half_up((clamped - pop_start).days / (end - pop_start).days * 100)

    if today < pop_start:
        stage = "not_started"
    elif today > end:
        stage = "complete"
    elif elapsed < EARLY_BELOW_PERCENT:
        stage = "early"
    elif elapsed < MID_BELOW_PERCENT:
        stage = "mid"
    else:
        stage = "late"

    return Lifecycle(
        stage=stage,
        burn_percent=burn,
        elapsed_percent=elapsed,
        days_remaining=days_remaining,
        stage_label=STAGE_LABELS[stage],
        burn_label=burn_label,
    )


def classify_award(award: Award, today: Optional[date] = None) -> Lifecycle:
    """Convenience wrapper over :func:`classify` for an Award record."""
    return classify(
        award.pop_start,
        award.pop_current_end,
        award.pop_potential_end,
        award.obligated,
        award.ceiling,
        today=today,
    )
