"""Calendar systems used to resolve partition year boundaries."""

# Import calendars to trigger registration
import eventanalytics.calendar.ethiopian as _ethiopian  # noqa: F401
import eventanalytics.calendar.iso8601 as _iso8601  # noqa: F401
from eventanalytics.calendar.base import Calendar
from eventanalytics.calendar.registry import CalendarRegistry, UnsupportedCalendarError

__all__ = ["Calendar", "CalendarRegistry", "UnsupportedCalendarError"]
