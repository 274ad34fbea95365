"""Ethiopian calendar: 12 months of 30 days plus Pagume, new year in September."""

from __future__ import annotations

import calendar as _stdlib_calendar
from datetime import date, timedelta

from eventanalytics.calendar.base import Calendar
from eventanalytics.calendar.registry import CalendarRegistry

# Ethiopian year N begins in ISO year N + 7.
_YEAR_OFFSET = 7


@CalendarRegistry.register
class EthiopianCalendar(Calendar):
    """Meskerem 1 falls on 11 September, or 12 September before an ISO leap year.

    Valid for ISO years 1900 to 2099.
    """

    @property
    def name(self) -> str:
        return "ethiopian"

    def year_start(self, year: int) -> date:
        iso_year = year + _YEAR_OFFSET
        start = date(iso_year, 9, 11)
        if _stdlib_calendar.isleap(iso_year + 1):
            start += timedelta(days=1)
        return start

    def year_of(self, day: date) -> int:
        candidate = day.year - _YEAR_OFFSET
        if day >= self.year_start(candidate):
            return candidate
        return candidate - 1
