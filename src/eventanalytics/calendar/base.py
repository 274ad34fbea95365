"""Calendar abstraction: year boundaries expressed as ISO dates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date


class Calendar(ABC):
    """A calendar system whose years map onto ISO date ranges.

    ``year_end`` is exclusive: it is the first day of the following year.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def year_start(self, year: int) -> date:
        """ISO date of the first day of ``year`` in this calendar."""

    @abstractmethod
    def year_of(self, day: date) -> int:
        """The year in this calendar that contains the ISO date ``day``."""

    def year_end(self, year: int) -> date:
        return self.year_start(year + 1)

    def years_overlapping_iso_year(self, iso_year: int) -> list[int]:
        """Calendar years with at least one day inside the ISO year ``iso_year``."""
        first = self.year_of(date(iso_year, 1, 1))
        last = self.year_of(date(iso_year, 12, 31))
        return list(range(first, last + 1))
