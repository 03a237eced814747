"""Calendar endpoints: OAuth setup, availability and manual bookings.

  GET  /api/calendar/auth              Google consent URL
  GET  /api/calendar/auth/callback     OAuth redirect target
  GET  /api/calendar/status            Is the calendar connected?
  GET  /api/calendar/availability/{d}  Free slots for a date
  POST /api/calendar/book              Book from the dashboard
  GET  /api/calendar/appointments      Upcoming appointments
"""

from __future__ import annotations

import html
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from frontdesk.availability import slot_to_dict
from frontdesk.booking import BookingFailedError
from frontdesk.calendar_providers.base import CalendarError, CalendarNotAuthenticatedError
from frontdesk.credentials import CredentialError
from frontdesk.models.booking import BookingRequest

log = logging.getLogger("frontdesk.routes.calendar")

router = APIRouter(prefix="/api/calendar", tags=["calendar"])

REQUIRED_BOOKING_FIELDS = ["customerName", "customerPhone", "serviceType", "address", "startTime"]

_CALLBACK_PAGE = """<html>
  <body style="font-family: Arial, sans-serif; text-align: center; padding: 50px;">
    <h1 style="color: {color};">{title}</h1>
    {body}
  </body>
</html>"""


def _page(title: str, color: str, *paragraphs: str) -> str:
    body = "\n    ".join(f"<p>{html.escape(p)}</p>" for p in paragraphs)
    return _CALLBACK_PAGE.format(title=title, color=color, body=body)


@router.get("/auth")
async def get_auth_url(request: Request):
    """Return the Google OAuth consent URL."""
    try:
        auth_url = request.app.state.credential_store.authorization_url()
    except CredentialError as e:
        log.error("Error getting auth URL: %s", e)
        return JSONResponse({"error": "Failed to generate auth URL"}, status_code=500)
    return {"authUrl": auth_url}


@router.get("/auth/callback")
async def auth_callback(request: Request, code: Optional[str] = None):
    """Handle the OAuth redirect from Google."""
    if not code:
        return JSONResponse({"error": "Authorization code is required"}, status_code=400)

    try:
        await request.app.state.credential_store.exchange_code(code)
    except CredentialError as e:
        log.error("Error handling OAuth callback: %s", e)
        return HTMLResponse(
            _page("Error", "#f44336", "Failed to connect Google Calendar.", str(e)),
            status_code=500,
        )

    log.info("Google Calendar connected via dashboard")
    return HTMLResponse(
        _page(
            "Success!",
            "#4CAF50",
            "Google Calendar has been connected successfully.",
            "You can close this window and return to the dashboard.",
        )
    )


@router.get("/status")
async def calendar_status(request: Request):
    return {
        "authenticated": request.app.state.credential_store.is_authenticated(),
        "calendarId": request.app.state.settings.google_calendar_id,
    }


@router.get("/availability/{day}")
async def get_availability(
    request: Request,
    day: date,
    duration: int = Query(default=60, gt=0, le=600),
):
    """Free slots for ``day`` in business hours."""
    oracle = request.app.state.oracle
    try:
        slots = await oracle.available_slots(day, duration)
    except CalendarNotAuthenticatedError:
        return JSONResponse({"error": "Calendar not authenticated"}, status_code=401)
    except CalendarError as e:
        log.error("Error getting availability: %s", e)
        return JSONResponse({"error": "Failed to get availability"}, status_code=500)

    return {
        "date": day.isoformat(),
        "slots": [slot_to_dict(s) for s in slots],
        "count": len(slots),
    }


@router.post("/book")
async def book_appointment(request: Request):
    """Book an appointment directly from the dashboard."""
    try:
        body: Any = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        return JSONResponse({"error": "Request body must be a JSON object"}, status_code=400)

    if body.get("serviceType") and not body.get("description"):
        body["description"] = f"{body['serviceType']} service request"

    try:
        booking = BookingRequest.model_validate(body)
    except ValidationError as e:
        return JSONResponse(
            {
                "error": "Missing required fields",
                "required": REQUIRED_BOOKING_FIELDS,
                "invalid": sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")}),
            },
            status_code=400,
        )

    try:
        record = await request.app.state.gateway.book(booking)
    except CalendarNotAuthenticatedError:
        return JSONResponse({"error": "Calendar not authenticated"}, status_code=401)
    except BookingFailedError as e:
        log.error("Error booking appointment: %s", e)
        return JSONResponse({"error": "Failed to book appointment"}, status_code=500)

    return {"success": True, "booking": record.model_dump(mode="json")}


@router.get("/appointments")
async def list_appointments(
    request: Request,
    startDate: Optional[datetime] = None,
    endDate: Optional[datetime] = None,
):
    """Upcoming appointments, the next seven days by default."""
    provider = request.app.state.calendar_provider
    if not provider.is_authenticated():
        return JSONResponse({"error": "Calendar not authenticated"}, status_code=401)

    start = startDate or datetime.now(tz=timezone.utc)
    end = endDate or start + timedelta(days=7)
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    if end <= start:
        return JSONResponse({"error": "endDate must be after startDate"}, status_code=400)

    try:
        events = await provider.list_events(start, end)
    except CalendarNotAuthenticatedError:
        return JSONResponse({"error": "Calendar not authenticated"}, status_code=401)
    except CalendarError as e:
        log.error("Error getting appointments: %s", e)
        return JSONResponse({"error": "Failed to get appointments"}, status_code=500)

    return {
        "dateRange": {"start": start.isoformat(), "end": end.isoformat()},
        "appointments": events,
        "count": len(events),
    }
