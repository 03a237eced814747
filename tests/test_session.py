"""Tests for CallSession and PII redaction."""

import pytest

from frontdesk.models.session import CallSession, ServiceType, redact_pii


class TestRedactPii:
    def test_masks_middle(self):
        assert redact_pii("555-123-4567") == "555***67"

    @pytest.mark.parametrize("value", [None, "", "Jane"])
    def test_short_values_fully_masked(self, value):
        assert redact_pii(value) == "***"


class TestCallSession:
    def test_fresh_session_is_empty(self):
        session = CallSession()
        assert session.customer_name is None
        assert session.booking_confirmed is False
        assert session.booking_event_id is None

    def test_accepts_camel_case(self):
        session = CallSession.model_validate({"customerName": "Jane", "serviceType": "waterHeater"})
        assert session.customer_name == "Jane"
        assert session.service_type is ServiceType.WATER_HEATER

    def test_confirm_booking(self):
        session = CallSession(customer_name="Jane")
        session.confirm_booking("evt_1")

        assert session.booking_confirmed is True
        assert session.summary() == {"customer_name": "Jane", "booking_confirmed": True}
