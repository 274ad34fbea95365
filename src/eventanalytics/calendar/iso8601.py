"""ISO 8601 (proleptic Gregorian) calendar."""

from __future__ import annotations

from datetime import date

from eventanalytics.calendar.base import Calendar
from eventanalytics.calendar.registry import CalendarRegistry


@CalendarRegistry.register
class Iso8601Calendar(Calendar):
    @property
    def name(self) -> str:
        return "iso8601"

    def year_start(self, year: int) -> date:
        return date(year, 1, 1)

    def year_of(self, day: date) -> int:
        return day.year

    def years_overlapping_iso_year(self, iso_year: int) -> list[int]:
        return [iso_year]


@CalendarRegistry.register
class GregorianCalendar(Iso8601Calendar):
    @property
    def name(self) -> str:
        return "gregorian"
