"""
Date helpers.
"""

import calendar
from datetime import date


def add_months(start: date, months: int) -> date:
    """
    Add calendar months, clamping the day to the target month's length.

    >>> add_months(date(2024, 1, 31), 1)
    datetime.date(2024, 2, 29)
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
