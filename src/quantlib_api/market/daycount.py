from __future__ import annotations

from datetime import date, datetime

# ACT/365 Fixed
DAYS_PER_YEAR = 365.0


def _as_date(d: date | datetime) -> date:
    return d.date() if isinstance(d, datetime) else d


def year_fraction(start: date | datetime, end: date | datetime) -> float:
    """ACT/365 Fixed year fraction between two calendar dates.

    Negative when ``end`` precedes ``start``; callers decide whether that is an
    error.
    """
    return (_as_date(end) - _as_date(start)).days / DAYS_PER_YEAR
