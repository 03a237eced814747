"""Argument models for the functions the voice agent can call.

Each function in the closed set has its own model. Arguments arrive as a
JSON object with camelCase keys; validation happens when the model is
built, before any handler runs.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError
from pydantic.alias_generators import to_camel

from .session import ServiceType


class FunctionName(str, Enum):
    BOOK_APPOINTMENT = "book_appointment"
    CHECK_AVAILABILITY = "check_availability"
    GET_SERVICE_INFO = "get_service_info"
    UPDATE_CUSTOMER_INFO = "update_customer_info"


class _Arguments(BaseModel):
    # Speech platforms send phone numbers and the like as JSON numbers.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class BookAppointmentArgs(_Arguments):
    """Fields omitted here fall back to what the session already knows."""

    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    service_type: Optional[ServiceType] = None
    description: Optional[str] = None
    address: Optional[str] = None
    date_time: dt.datetime


class CheckAvailabilityArgs(_Arguments):
    date: dt.date


class GetServiceInfoArgs(_Arguments):
    # Unknown keys are not an error here: the whole catalog is returned instead.
    service_type: Optional[str] = None


class UpdateCustomerInfoArgs(_Arguments):
    """Session fields the agent may overwrite. Anything else is dropped."""

    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    service_type: Optional[ServiceType] = None
    issue_description: Optional[str] = None
    address: Optional[str] = None
    preferred_date: Optional[str] = None
    preferred_time: Optional[str] = None

    _rejected: list[str] = PrivateAttr(default_factory=list)

    @classmethod
    def validate_partial(cls, data: dict) -> "UpdateCustomerInfoArgs":
        """Validate ``data``, dropping only the keys that fail on their own."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            rejected = []
            for err in exc.errors():
                if err.get("loc") and str(err["loc"][0]) not in rejected:
                    rejected.append(str(err["loc"][0]))

        # Error locations use aliases; the input may use either spelling.
        names = set(rejected) | {
            name for name, field in cls.model_fields.items() if field.alias in rejected
        }
        args = cls.model_validate({k: v for k, v in data.items() if k not in names})
        args._rejected = rejected
        return args

    @property
    def rejected_fields(self) -> list[str]:
        return list(self._rejected)


ARGUMENT_MODELS: dict[FunctionName, type[_Arguments]] = {
    FunctionName.BOOK_APPOINTMENT: BookAppointmentArgs,
    FunctionName.CHECK_AVAILABILITY: CheckAvailabilityArgs,
    FunctionName.GET_SERVICE_INFO: GetServiceInfoArgs,
    FunctionName.UPDATE_CUSTOMER_INFO: UpdateCustomerInfoArgs,
}
