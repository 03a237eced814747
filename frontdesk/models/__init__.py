"""Data models for the front desk."""

from .booking import BookingDetails, BookingRecord, BookingRequest
from .session import CallSession, ServiceType

__all__ = [
    "BookingDetails",
    "BookingRecord",
    "BookingRequest",
    "CallSession",
    "ServiceType",
]
