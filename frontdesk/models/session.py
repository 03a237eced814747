"""Pydantic model tracking a caller's details through one voice call."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def redact_pii(value: Optional[str]) -> str:
    """Mask PII for logging — show first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


class ServiceType(str, Enum):
    """Plumbing services the company offers."""

    EMERGENCY = "emergency"
    DRAIN = "drain"
    WATER_HEATER = "waterHeater"
    LEAK = "leak"
    INSTALLATION = "installation"
    GENERAL = "general"


class CallSession(BaseModel):
    """Mutable conversation state for a single active call.

    Fields are filled in as the caller speaks and as the agent calls
    functions. Nothing here is required to be consistent until a booking
    is attempted. ``booking_confirmed`` only ever goes from False to True.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None

    service_type: Optional[ServiceType] = None
    issue_description: Optional[str] = None
    address: Optional[str] = None
    preferred_date: Optional[str] = None
    preferred_time: Optional[str] = None

    booking_confirmed: bool = False
    booking_event_id: Optional[str] = None

    def confirm_booking(self, event_id: str) -> None:
        self.booking_confirmed = True
        self.booking_event_id = event_id

    def summary(self) -> dict:
        """Short description used for the call-ended log line."""
        return {
            "customer_name": self.customer_name,
            "booking_confirmed": self.booking_confirmed,
        }
