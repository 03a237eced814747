"""Function-call dispatch for the voice agent.

The agent can call a fixed set of functions (see :class:`FunctionName`).
``dispatch`` resolves the name, validates the arguments against that
function's model, runs the handler and returns a JSON-ready result. It
never raises: unknown names, bad arguments and backend failures all come
back as result dicts so the call can carry on.

Result shapes::

    {"success": True, "message": "...", ...}      handler succeeded
    {"success": False, "message": "...", ...}     validation / degraded backend
    {"error": "..."}                              unknown function or crash
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from frontdesk.availability import SlotAvailabilityOracle, fallback_slots, slot_to_dict
from frontdesk.booking import BookingFailedError, BookingGateway
from frontdesk.calendar_providers.base import CalendarError, CalendarNotAuthenticatedError
from frontdesk.catalog import ServiceCatalog
from frontdesk.models.booking import BookingDetails
from frontdesk.models.functions import (
    ARGUMENT_MODELS,
    BookAppointmentArgs,
    CheckAvailabilityArgs,
    FunctionName,
    GetServiceInfoArgs,
    UpdateCustomerInfoArgs,
)
from frontdesk.models.session import CallSession, redact_pii

log = logging.getLogger("frontdesk.dispatcher")

Result = dict[str, Any]

CALENDAR_NOT_CONFIGURED = (
    "Calendar service not configured. Please have the office call you back "
    "to confirm your appointment."
)
BOOKING_FAILED = (
    "Unable to book appointment at this time. Our team will call you back to confirm."
)
AVAILABILITY_NOT_CONFIGURED = "Calendar service not configured."
AVAILABILITY_FAILED = "Unable to check availability"


def _error_fields(exc: ValidationError) -> list[str]:
    fields = []
    for err in exc.errors():
        if err.get("loc"):
            name = str(err["loc"][0])
            if name not in fields:
                fields.append(name)
    return fields


def _validation_result(exc: ValidationError, message: str) -> Result:
    return {
        "success": False,
        "message": message,
        "invalidFields": _error_fields(exc),
    }


class FunctionDispatcher:
    """Routes agent function calls to their handlers."""

    def __init__(
        self,
        oracle: SlotAvailabilityOracle,
        gateway: BookingGateway,
        catalog: ServiceCatalog | None = None,
        slot_duration_minutes: int = 60,
        booking_duration_minutes: int = 60,
    ) -> None:
        self._oracle = oracle
        self._gateway = gateway
        self._catalog = catalog or ServiceCatalog()
        self._slot_duration = slot_duration_minutes
        self._booking_duration = booking_duration_minutes

        self._handlers: dict[FunctionName, Callable[[Any, CallSession], Awaitable[Result]]] = {
            FunctionName.BOOK_APPOINTMENT: self._book_appointment,
            FunctionName.CHECK_AVAILABILITY: self._check_availability,
            FunctionName.GET_SERVICE_INFO: self._get_service_info,
            FunctionName.UPDATE_CUSTOMER_INFO: self._update_customer_info,
        }
        missing = set(FunctionName) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for functions: {sorted(m.value for m in missing)}")

    # ── Public API ────────────────────────────────────────────

    async def dispatch(self, name: str, arguments: Any, session: CallSession) -> Result:
        """Run one function call against ``session`` and return its result."""
        try:
            function = FunctionName(name)
        except ValueError:
            log.warning("Agent called unknown function %r", name)
            return {"error": f"Unknown function: {name}"}

        try:
            raw_args = self._coerce_arguments(arguments)
        except ValueError as exc:
            return {"success": False, "message": str(exc), "invalidFields": []}

        try:
            if function is FunctionName.UPDATE_CUSTOMER_INFO:
                args = UpdateCustomerInfoArgs.validate_partial(raw_args)
            else:
                args = ARGUMENT_MODELS[function].model_validate(raw_args)
        except ValidationError as exc:
            log.info("Invalid arguments for %s: %s", function.value, _error_fields(exc))
            return _validation_result(exc, f"Invalid arguments for {function.value}")

        try:
            return await self._handlers[function](args, session)
        except Exception as exc:
            log.exception("Error executing function %s", function.value)
            return {"error": str(exc) or exc.__class__.__name__}

    # ── Internal: argument handling ──────────────────────────

    @staticmethod
    def _coerce_arguments(arguments: Any) -> dict[str, Any]:
        """Accept a mapping, a JSON object string, or nothing."""
        if arguments is None:
            return {}
        if isinstance(arguments, str):
            if not arguments.strip():
                return {}
            try:
                arguments = json.loads(arguments)
            except json.JSONDecodeError as exc:
                raise ValueError("Function arguments are not valid JSON") from exc
        if not isinstance(arguments, dict):
            raise ValueError("Function arguments must be an object")
        return arguments

    # ── Handlers ──────────────────────────────────────────────

    async def _book_appointment(self, args: BookAppointmentArgs, session: CallSession) -> Result:
        # Supplied values win, otherwise keep what the call already gathered.
        session.customer_name = args.customer_name or session.customer_name
        session.customer_phone = args.customer_phone or session.customer_phone
        session.customer_email = args.customer_email or session.customer_email
        session.service_type = args.service_type or session.service_type
        session.issue_description = args.description or session.issue_description
        session.address = args.address or session.address
        session.preferred_date = args.date_time.date().isoformat()
        session.preferred_time = args.date_time.strftime("%H:%M")

        try:
            details = BookingDetails(
                customer_name=session.customer_name or "",
                customer_phone=session.customer_phone or "",
                customer_email=session.customer_email,
                service_type=session.service_type,
                description=session.issue_description,
                address=session.address or "",
                start_time=args.date_time,
                duration_minutes=self._booking_duration,
            )
        except ValidationError as exc:
            missing = _error_fields(exc)
            return {
                "success": False,
                "message": "Missing required booking details: " + ", ".join(missing),
                "missingFields": missing,
            }

        if not self._gateway.is_authenticated():
            return {"success": False, "message": CALENDAR_NOT_CONFIGURED}

        try:
            record = await self._gateway.book(details)
        except CalendarNotAuthenticatedError:
            return {"success": False, "message": CALENDAR_NOT_CONFIGURED}
        except BookingFailedError as exc:
            log.error("Error booking appointment: %s", exc)
            return {"success": False, "message": BOOKING_FAILED}

        session.confirm_booking(record.event_id)
        log.info("Booking %s confirmed for %s", record.event_id, redact_pii(session.customer_name))
        when = record.start.strftime("%A, %B %d at %I:%M %p").replace(" 0", " ")
        return {
            "success": True,
            "message": f"Appointment booked for {when}",
            "eventId": record.event_id,
        }

    async def _check_availability(self, args: CheckAvailabilityArgs, session: CallSession) -> Result:
        if not self._oracle.is_authenticated():
            return {
                "success": False,
                "message": AVAILABILITY_NOT_CONFIGURED,
                "slots": fallback_slots(),
            }

        try:
            slots = await self._oracle.available_slots(args.date, self._slot_duration)
        except CalendarNotAuthenticatedError:
            return {
                "success": False,
                "message": AVAILABILITY_NOT_CONFIGURED,
                "slots": fallback_slots(),
            }
        except CalendarError as exc:
            log.error("Error checking availability: %s", exc)
            return {
                "success": False,
                "message": AVAILABILITY_FAILED,
                "slots": fallback_slots(),
            }

        return {
            "success": True,
            "date": args.date.isoformat(),
            "availableSlots": [slot_to_dict(slot) for slot in slots],
        }

    async def _get_service_info(self, args: GetServiceInfoArgs, session: CallSession) -> Result:
        entry = self._catalog.get(args.service_type)
        if entry is not None:
            return entry
        return {
            "availableServices": self._catalog.keys(),
            "services": self._catalog.list(),
        }

    async def _update_customer_info(
        self, args: UpdateCustomerInfoArgs, session: CallSession
    ) -> Result:
        updated = []
        for field in args.model_fields_set:
            setattr(session, field, getattr(args, field))
            updated.append(field)
        log.debug("Updated session fields: %s", sorted(updated))
        result: Result = {"success": True, "message": "Customer information updated"}
        if args.rejected_fields:
            log.info("Ignored invalid customer fields: %s", args.rejected_fields)
            result["invalidFields"] = args.rejected_fields
        return result
