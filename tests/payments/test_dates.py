"""Tests for calendar-month arithmetic of service periods."""
from datetime import datetime, timezone

import pytest

from wifidash.payments.dates import add_months, service_period


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (datetime(2024, 1, 15), 1, datetime(2024, 2, 15)),
        (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
        (datetime(2023, 1, 31), 1, datetime(2023, 2, 28)),
        (datetime(2024, 3, 31), 1, datetime(2024, 4, 30)),
        (datetime(2024, 11, 30), 3, datetime(2025, 2, 28)),
        (datetime(2024, 2, 29), 12, datetime(2025, 2, 28)),
        (datetime(2024, 5, 1), 6, datetime(2024, 11, 1)),
    ],
)
def test_add_months_clamps_to_month_end(start, months, expected):
    assert add_months(start, months) == expected


def test_add_months_keeps_time_and_tz():
    start = datetime(2024, 1, 31, 23, 59, 59, tzinfo=timezone.utc)
    result = add_months(start, 1)
    assert result == datetime(2024, 2, 29, 23, 59, 59, tzinfo=timezone.utc)
    assert result.tzinfo is timezone.utc


def test_service_period_end_after_start():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    begin, end = service_period(start, 12)
    assert begin == start
    assert end == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert end > begin
