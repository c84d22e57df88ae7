"""
Unit Tests for Date Helpers
"""

from datetime import UTC, date, datetime, timedelta

import pytest

from claimdesk.core.clock import FixedClock, SystemClock
from claimdesk.utils.dates import add_months


@pytest.mark.unit
class TestAddMonths:
    @pytest.mark.parametrize(
        ("start", "months", "expected"),
        [
            (date(2025, 1, 15), 12, date(2026, 1, 15)),
            (date(2025, 11, 30), 3, date(2026, 2, 28)),
            (date(2024, 1, 31), 1, date(2024, 2, 29)),
            (date(2025, 1, 31), 1, date(2025, 2, 28)),
            (date(2025, 3, 31), 1, date(2025, 4, 30)),
            (date(2025, 6, 10), 0, date(2025, 6, 10)),
        ],
    )
    def test_add_months(self, start, months, expected):
        assert add_months(start, months) == expected

    def test_year_rollover(self):
        assert add_months(date(2025, 12, 1), 1) == date(2026, 1, 1)


@pytest.mark.unit
class TestClocks:
    def test_system_clock_is_timezone_aware(self):
        assert SystemClock().now().tzinfo is not None

    def test_fixed_clock_advances(self):
        clock = FixedClock(datetime(2025, 1, 15, 23, 0, tzinfo=UTC))

        clock.advance(timedelta(hours=2))

        assert clock.now() == datetime(2025, 1, 16, 1, 0, tzinfo=UTC)
        assert clock.today() == date(2025, 1, 16)
