"""Google Calendar provider implementation.

Uses OAuth user credentials from a :class:`CredentialStore` to talk to the
Calendar API v3. A fresh API client is built from a credential snapshot on
every call, so a re-authorization never changes a request already in
flight.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from frontdesk.credentials import CredentialStore

from .base import (
    CalendarBackendError,
    CalendarEvent,
    CalendarNotAuthenticatedError,
    CalendarProvider,
    TimeSlot,
)

logger = logging.getLogger(__name__)

EMAIL_REMINDER_MINUTES = 24 * 60
POPUP_REMINDER_MINUTES = 60


class GoogleCalendarProvider(CalendarProvider):
    """CalendarProvider backed by Google Calendar API v3."""

    def __init__(
        self,
        credential_store: CredentialStore,
        calendar_id: str = "primary",
        time_zone: str = "America/New_York",
    ) -> None:
        self._store = credential_store
        self._calendar_id = calendar_id
        self._time_zone = time_zone

    @property
    def calendar_id(self) -> str:
        return self._calendar_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _service(self) -> tuple[Any, Credentials]:
        credentials = self._store.credentials()
        if credentials is None:
            raise CalendarNotAuthenticatedError(
                "Google Calendar not initialized. Please authenticate first."
            )
        service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
        return service, credentials

    async def _execute(self, request: Any, credentials: Credentials) -> Any:
        """Run a prepared Google API request in the default thread pool.

        google-auth refreshes an expired access token inside ``execute``;
        a refreshed token is handed back to the credential store.
        """
        loop = asyncio.get_running_loop()
        issued_token = credentials.token
        try:
            result = await loop.run_in_executor(None, partial(request.execute))
        except HttpError as exc:
            status = getattr(exc.resp, "status", "?")
            if status == 401:
                raise CalendarNotAuthenticatedError(
                    "Google Calendar rejected the stored credentials"
                ) from exc
            raise CalendarBackendError(f"Google Calendar API error (status {status})") from exc

        self._store.record_refresh(credentials, issued_token)
        return result

    @staticmethod
    def _to_rfc3339(dt: datetime) -> str:
        """Convert a datetime to an RFC 3339 string with timezone."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.isoformat()

    @staticmethod
    def _parse_time(value: dict[str, str] | str) -> datetime:
        """Parse a Google time value (``dateTime``/``date`` dict or plain string)."""
        if isinstance(value, dict):
            value = value.get("dateTime") or value.get("date", "")
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    # ------------------------------------------------------------------
    # CalendarProvider interface
    # ------------------------------------------------------------------

    def is_authenticated(self) -> bool:
        return self._store.is_authenticated()

    async def list_busy(self, start: datetime, end: datetime) -> list[TimeSlot]:
        """Query the freebusy API for busy intervals in ``[start, end)``.

        Freebusy only reports opaque time. Events marked "free"
        (transparent), such as an all-day reminder, do not block slots.
        """
        service, credentials = self._service()
        body = {
            "timeMin": self._to_rfc3339(start),
            "timeMax": self._to_rfc3339(end),
            "timeZone": self._time_zone,
            "items": [{"id": self._calendar_id}],
        }

        response = await self._execute(service.freebusy().query(body=body), credentials)

        calendar = response.get("calendars", {}).get(self._calendar_id, {})
        if calendar.get("errors"):
            reasons = ", ".join(e.get("reason", "unknown") for e in calendar["errors"])
            raise CalendarBackendError(f"Freebusy query failed: {reasons}")

        busy = [
            TimeSlot(
                start=self._parse_time(interval["start"]),
                end=self._parse_time(interval["end"]),
            )
            for interval in calendar.get("busy", [])
        ]
        busy.sort(key=lambda b: b.start)
        return busy

    async def create_event(self, event: CalendarEvent) -> dict[str, Any]:
        """Insert an event into the Google Calendar.

        Sends an invitation only when the event has attendees.
        """
        service, credentials = self._service()
        body: dict[str, Any] = {
            "summary": event.summary,
            "start": {"dateTime": self._to_rfc3339(event.start), "timeZone": self._time_zone},
            "end": {"dateTime": self._to_rfc3339(event.end), "timeZone": self._time_zone},
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": EMAIL_REMINDER_MINUTES},
                    {"method": "popup", "minutes": POPUP_REMINDER_MINUTES},
                ],
            },
        }
        if event.description:
            body["description"] = event.description
        if event.location:
            body["location"] = event.location
        if event.attendees:
            body["attendees"] = [{"email": addr} for addr in event.attendees]

        result = await self._execute(
            service.events().insert(
                calendarId=self._calendar_id,
                body=body,
                sendUpdates="all" if event.attendees else "none",
            ),
            credentials,
        )

        logger.info("Created event %s on calendar %s", result["id"], self._calendar_id)

        return {
            "event_id": result["id"],
            "html_link": result.get("htmlLink", ""),
            "start": self._parse_time(result["start"]) if "start" in result else event.start,
            "end": self._parse_time(result["end"]) if "end" in result else event.end,
            "summary": result.get("summary", event.summary),
        }

    async def list_events(self, start: datetime, end: datetime) -> list[dict[str, Any]]:
        """List single (expanded) events between ``start`` and ``end``."""
        service, credentials = self._service()
        response = await self._execute(
            service.events().list(
                calendarId=self._calendar_id,
                timeMin=self._to_rfc3339(start),
                timeMax=self._to_rfc3339(end),
                singleEvents=True,
                orderBy="startTime",
            ),
            credentials,
        )

        events = []
        for item in response.get("items", []):
            events.append({
                "event_id": item.get("id", ""),
                "summary": item.get("summary", ""),
                "location": item.get("location", ""),
                "start": self._parse_time(item["start"]).isoformat(),
                "end": self._parse_time(item["end"]).isoformat(),
                "html_link": item.get("htmlLink", ""),
            })
        return events
