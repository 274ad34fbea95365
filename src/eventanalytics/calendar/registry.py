"""Calendar registry, keyed by the calendar names accepted in settings."""

from __future__ import annotations

from eventanalytics.calendar.base import Calendar


class UnsupportedCalendarError(Exception):
    """Raised when a requested calendar is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.calendar_name = name
        self.available = available
        super().__init__(f"Unsupported calendar '{name}'. Available: {', '.join(available)}")


class CalendarRegistry:
    _calendars: dict[str, type[Calendar]] = {}

    @classmethod
    def register(cls, calendar_class: type[Calendar]) -> type[Calendar]:
        """Register a calendar class. Can be used as a decorator."""
        instance = calendar_class()
        cls._calendars[instance.name] = calendar_class
        return calendar_class

    @classmethod
    def get(cls, name: str) -> Calendar:
        if name not in cls._calendars:
            raise UnsupportedCalendarError(name, available=cls.available())
        return cls._calendars[name]()

    @classmethod
    def available(cls) -> list[str]:
        return sorted(cls._calendars.keys())
