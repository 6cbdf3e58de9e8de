from __future__ import annotations

import calendar
from datetime import datetime


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length.

    2024-01-31 + 1 month -> 2024-02-29; 2023-01-31 + 1 month -> 2023-02-28.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
