"""Shared test fixtures for the front desk test suite."""

from __future__ import annotations

import asyncio
import os
import sys
from datetime import datetime
from typing import Any

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from frontdesk.calendar_providers.base import (  # noqa: E402
    CalendarEvent,
    CalendarNotAuthenticatedError,
    CalendarProvider,
    TimeSlot,
)


class FakeCalendarProvider(CalendarProvider):
    """In-memory calendar backend with switchable failure modes."""

    def __init__(
        self,
        authenticated: bool = True,
        busy: list[TimeSlot] | None = None,
        fail: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.authenticated = authenticated
        self.busy = busy or []
        self.fail = fail
        self.delay = delay
        self.busy_queries: list[tuple[datetime, datetime]] = []
        self.created: list[CalendarEvent] = []
        self.events: list[dict[str, Any]] = []

    def is_authenticated(self) -> bool:
        return self.authenticated

    async def _maybe_fail(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.authenticated:
            raise CalendarNotAuthenticatedError("not authenticated")
        if self.fail is not None:
            raise self.fail

    async def list_busy(self, start, end):
        self.busy_queries.append((start, end))
        await self._maybe_fail()
        return list(self.busy)

    async def create_event(self, event):
        await self._maybe_fail()
        self.created.append(event)
        return {
            "event_id": f"evt_{len(self.created)}",
            "html_link": "https://calendar.google.com/event/evt",
            "start": event.start,
            "end": event.end,
            "summary": event.summary,
        }

    async def list_events(self, start, end):
        await self._maybe_fail()
        return list(self.events)


@pytest.fixture
def provider():
    return FakeCalendarProvider()


@pytest.fixture
def unauthenticated_provider():
    return FakeCalendarProvider(authenticated=False)
