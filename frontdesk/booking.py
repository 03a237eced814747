"""Books service visits on the calendar.

The gateway turns :class:`BookingDetails` into a calendar event with a
readable description. It makes exactly one attempt: the caller is
expected to offer a manual call back if the booking fails.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from zoneinfo import ZoneInfo

from frontdesk.calendar_providers.base import (
    CalendarError,
    CalendarEvent,
    CalendarNotAuthenticatedError,
    CalendarProvider,
)
from frontdesk.models.booking import BookingDetails, BookingRecord

logger = logging.getLogger(__name__)


class BookingFailedError(Exception):
    """The backend refused or failed the booking for a reason other than auth."""


def compose_summary(details: BookingDetails) -> str:
    return f"Plumbing Service: {details.service_type.value} - {details.customer_name}"


def compose_description(details: BookingDetails) -> str:
    """Human-readable event body for the technician."""
    lines = [
        f"Customer: {details.customer_name}",
        f"Phone: {details.customer_phone}",
    ]
    if details.customer_email:
        lines.append(f"Email: {details.customer_email}")
    lines += [
        "",
        f"Service Type: {details.service_type.value}",
        f"Issue Description: {details.description or 'Not provided'}",
        "",
        f"Address: {details.address}",
        "",
        "--- Booked via AI Receptionist ---",
    ]
    return "\n".join(lines)


class BookingGateway:
    """Validates and submits bookings to a calendar backend."""

    def __init__(
        self,
        provider: CalendarProvider,
        time_zone: str = "America/New_York",
        timeout_seconds: float | None = 10.0,
    ) -> None:
        self._provider = provider
        self._tz = ZoneInfo(time_zone)
        self._timeout = timeout_seconds

    def is_authenticated(self) -> bool:
        return self._provider.is_authenticated()

    async def book(self, details: BookingDetails) -> BookingRecord:
        """Create the calendar event for ``details``.

        Raises:
            CalendarNotAuthenticatedError: the backend has no credentials.
            BookingFailedError: anything else went wrong.
        """
        start = details.start_time
        if start.tzinfo is None:
            start = start.replace(tzinfo=self._tz)
        end = details.end_time or start + timedelta(minutes=details.duration_minutes)
        if end.tzinfo is None:
            end = end.replace(tzinfo=self._tz)
        if end <= start:
            raise BookingFailedError("Appointment must end after it starts")

        event = CalendarEvent(
            summary=compose_summary(details),
            start=start,
            end=end,
            description=compose_description(details),
            attendees=[details.customer_email] if details.customer_email else [],
            location=details.address,
        )

        try:
            result = await asyncio.wait_for(
                self._provider.create_event(event), timeout=self._timeout
            )
        except CalendarNotAuthenticatedError:
            raise
        except asyncio.TimeoutError as exc:
            logger.error("Calendar did not answer within %ss", self._timeout)
            raise BookingFailedError("Calendar timed out") from exc
        except CalendarError as exc:
            logger.error("Booking rejected by calendar: %s", exc)
            raise BookingFailedError(str(exc)) from exc
        except Exception as exc:
            logger.exception("Unexpected error while booking")
            raise BookingFailedError(str(exc)) from exc

        event_id = result.get("event_id", "")
        if not event_id:
            raise BookingFailedError("Calendar returned an event without an id")

        return BookingRecord(
            event_id=event_id,
            start=result.get("start", start),
            end=result.get("end", end),
            summary=result.get("summary", event.summary),
            html_link=result.get("html_link", ""),
        )
