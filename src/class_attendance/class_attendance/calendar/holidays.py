from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from .model import FixedHoliday

# Same calendar date every year.
DEFAULT_FIXED_HOLIDAYS: tuple[FixedHoliday, ...] = (
    FixedHoliday(month=1, day=1, label="New Year's Day"),
    FixedHoliday(month=5, day=1, label="Labour Day"),
    FixedHoliday(month=4, day=4, label="Independence Day"),
    FixedHoliday(month=8, day=15, label="Assumption"),
    FixedHoliday(month=11, day=1, label="All Saints' Day"),
    FixedHoliday(month=12, day=25, label="Christmas"),
    FixedHoliday(month=12, day=31, label="Year End"),
)


def holiday_label_for(
    day: date,
    holidays: Iterable[FixedHoliday],
    *,
    year_start: Optional[date] = None,
    year_end: Optional[date] = None,
) -> Optional[str]:
    """Label of the fixed holiday falling on `day` inside the year bounds, if any.

    Missing bounds default to the day itself.
    """

    start = year_start or day
    end = year_end or day
    if not (start <= day <= end):
        return None
    for h in holidays:
        if h.month == day.month and h.day == day.day:
            return h.label
    return None
