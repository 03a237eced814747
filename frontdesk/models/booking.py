"""Pydantic models for booking requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .session import ServiceType


class BookingDetails(BaseModel):
    """Everything needed to put a service visit on the calendar."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    customer_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    customer_email: Optional[str] = None
    service_type: ServiceType
    description: Optional[str] = None
    address: str = Field(min_length=1)
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: int = Field(default=60, gt=0)


class BookingRequest(BookingDetails):
    """Body of ``POST /api/calendar/book`` from the dashboard."""


class BookingRecord(BaseModel):
    """Result of a successful booking, handed straight back to the caller."""

    event_id: str
    start: datetime
    end: datetime
    summary: str
    html_link: str = ""
