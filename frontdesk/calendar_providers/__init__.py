"""Calendar provider abstractions and implementations."""

from .base import (
    CalendarBackendError,
    CalendarError,
    CalendarEvent,
    CalendarNotAuthenticatedError,
    CalendarProvider,
    TimeSlot,
)

__all__ = [
    "CalendarBackendError",
    "CalendarError",
    "CalendarEvent",
    "CalendarNotAuthenticatedError",
    "CalendarProvider",
    "TimeSlot",
]
