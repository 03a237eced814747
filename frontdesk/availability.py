"""Free appointment slots for a single day.

The day's business hours are cut into back-to-back slots of a fixed
length, then every slot that overlaps a busy interval on the calendar is
removed. The oracle knows nothing about fallbacks: if the calendar is not
authenticated it raises, and the caller decides what to offer instead.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from frontdesk.calendar_providers.base import (
    CalendarBackendError,
    CalendarProvider,
    TimeSlot,
)

log = logging.getLogger("frontdesk.availability")

# Offered to the caller when the calendar cannot be consulted.
FALLBACK_SLOTS: tuple[str, ...] = (
    "8:00 AM",
    "9:00 AM",
    "10:00 AM",
    "11:00 AM",
    "1:00 PM",
    "2:00 PM",
    "3:00 PM",
    "4:00 PM",
)


def fallback_slots() -> list[dict[str, str]]:
    return [{"display": display} for display in FALLBACK_SLOTS]


def display_time(dt: datetime) -> str:
    """``9:00 AM`` style label, no leading zero."""
    return dt.strftime("%I:%M %p").lstrip("0")


def slot_to_dict(slot: TimeSlot) -> dict[str, Any]:
    return {
        "start": slot.start.isoformat(),
        "end": slot.end.isoformat(),
        "display": display_time(slot.start),
    }


def business_window(
    day: date, tz: tzinfo, start_hour: int = 8, end_hour: int = 18
) -> tuple[datetime, datetime]:
    """Opening and closing instants of ``day`` in ``tz``."""
    opens = datetime.combine(day, time(hour=start_hour), tzinfo=tz)
    closes = datetime.combine(day, time(hour=end_hour), tzinfo=tz)
    return opens, closes


def candidate_slots(opens: datetime, closes: datetime, duration_minutes: int) -> list[TimeSlot]:
    """Contiguous slots from ``opens``; a slot ending exactly at ``closes`` is kept."""
    if duration_minutes <= 0:
        raise ValueError(f"Slot duration must be positive, got {duration_minutes}")

    step = timedelta(minutes=duration_minutes)
    slots: list[TimeSlot] = []
    cursor = opens
    while cursor + step <= closes:
        slots.append(TimeSlot(start=cursor, end=cursor + step))
        cursor += step
    return slots


def subtract_busy(slots: list[TimeSlot], busy: list[TimeSlot]) -> list[TimeSlot]:
    """Drop every slot that overlaps any busy interval (touching ends don't count)."""
    return [
        slot for slot in slots
        if not any(slot.overlaps(b.start, b.end) for b in busy)
    ]


class SlotAvailabilityOracle:
    """Computes bookable slots against a calendar backend."""

    def __init__(
        self,
        provider: CalendarProvider,
        time_zone: str = "America/New_York",
        business_start_hour: int = 8,
        business_end_hour: int = 18,
        timeout_seconds: float | None = 10.0,
    ) -> None:
        self._provider = provider
        self._tz = ZoneInfo(time_zone)
        self._start_hour = business_start_hour
        self._end_hour = business_end_hour
        self._timeout = timeout_seconds

    @property
    def provider(self) -> CalendarProvider:
        return self._provider

    def is_authenticated(self) -> bool:
        return self._provider.is_authenticated()

    async def available_slots(self, day: date, slot_duration_minutes: int = 60) -> list[TimeSlot]:
        """Free slots on ``day`` in chronological order.

        Raises:
            CalendarNotAuthenticatedError: the backend has no credentials.
            CalendarBackendError: the backend failed or timed out.
        """
        opens, closes = business_window(day, self._tz, self._start_hour, self._end_hour)
        candidates = candidate_slots(opens, closes, slot_duration_minutes)

        try:
            busy = await asyncio.wait_for(
                self._provider.list_busy(opens, closes), timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            raise CalendarBackendError(
                f"Calendar did not answer within {self._timeout}s"
            ) from exc

        available = subtract_busy(candidates, busy)
        log.info(
            "Availability for %s: %d of %d slots free (%d busy intervals)",
            day.isoformat(), len(available), len(candidates), len(busy),
        )
        return available
