"""
Season clock: position of "today" inside the assumed Season 2 window.

The window dates are assumptions (see config.constants); every projection
built on this clock is speculative.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum

from seeker_verify.config.constants import SEASON2_ASSUMED_END, SEASON2_ASSUMED_START


class Phase(str, Enum):
    BEFORE = "before"
    ACTIVE = "active"
    AFTER = "after"


@dataclass(frozen=True)
class SeasonProgress:
    start_date: date
    end_date: date
    current_date: date
    days_since_start: int
    days_remaining: int
    total_days: int
    fraction_complete: float
    phase: Phase

    @property
    def percent_complete(self) -> float:
        return self.fraction_complete * 100.0


def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


def calculate(
    now: date | None = None,
    *,
    start: date | None = None,
    end: date | None = None,
) -> SeasonProgress:
    """Phase and clamped completion fraction; 0.0 before the window, 1.0 after it."""
    now = now or _today_utc()
    start = start or date.fromisoformat(SEASON2_ASSUMED_START)
    end = end or date.fromisoformat(SEASON2_ASSUMED_END)
    total_days = (end - start).days
    days_since_start = max(0, (now - start).days)
    days_remaining = max(0, (end - now).days)

    if now < start:
        phase = Phase.BEFORE
        fraction = 0.0
    elif now > end:
        phase = Phase.AFTER
        fraction = 1.0
    elif total_days <= 0:
        phase = Phase.ACTIVE
        fraction = 1.0
    else:
        phase = Phase.ACTIVE
        fraction = max(0.0, min(1.0, days_since_start / total_days))

    return SeasonProgress(
        start_date=start,
        end_date=end,
        current_date=now,
        days_since_start=days_since_start,
        days_remaining=days_remaining,
        total_days=total_days,
        fraction_complete=fraction,
        phase=phase,
    )
