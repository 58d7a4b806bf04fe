"""
Calendar arithmetic for service periods.
"""
from __future__ import annotations

from datetime import datetime

from dateutil.relativedelta import relativedelta


def add_months(start: datetime, months: int) -> datetime:
    """
    Advance ``start`` by whole calendar months.

    The day of month is clamped to the last day of the target month:
    Jan 31 + 1 month -> Feb 28 (Feb 29 in leap years), Mar 31 + 1 -> Apr 30.
    Time of day and tzinfo are preserved.
    """
    return start + relativedelta(months=months)


def service_period(start: datetime, duration_months: int) -> tuple[datetime, datetime]:
    return start, add_months(start, duration_months)
