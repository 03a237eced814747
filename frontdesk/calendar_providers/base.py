"""Abstract base class for calendar providers.

Defines the interface the front desk needs from a calendar backend:
busy-time lookup, event creation and an authentication check.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class CalendarError(Exception):
    """Base class for calendar backend failures."""


class CalendarNotAuthenticatedError(CalendarError):
    """The backend has no usable credentials yet."""


class CalendarBackendError(CalendarError):
    """The backend was reachable in principle but the request failed."""


@dataclass
class TimeSlot:
    """A window of time on a calendar (busy or free)."""

    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start < end and self.end > start


@dataclass
class CalendarEvent:
    """Represents a calendar event to be created."""

    summary: str
    start: datetime
    end: datetime
    description: str = ""
    attendees: list[str] = field(default_factory=list)  # email addresses
    location: str = ""


class CalendarProvider(ABC):
    """Abstract calendar backend."""

    @abstractmethod
    def is_authenticated(self) -> bool:
        """True when the backend holds credentials it can call with."""

    @abstractmethod
    async def list_busy(self, start: datetime, end: datetime) -> list[TimeSlot]:
        """Return busy intervals overlapping ``[start, end)``.

        Raises:
            CalendarNotAuthenticatedError: no credentials.
            CalendarBackendError: any other backend failure.
        """

    @abstractmethod
    async def create_event(self, event: CalendarEvent) -> dict[str, Any]:
        """Create a calendar event.

        Returns:
            Dict containing ``"event_id"``, ``"html_link"``, ``"start"``,
            ``"end"`` and ``"summary"``.
        """

    @abstractmethod
    async def list_events(self, start: datetime, end: datetime) -> list[dict[str, Any]]:
        """Return events between ``start`` and ``end`` in start order."""
