"""Tests for contact-detail extraction from customer speech."""

import pytest

from frontdesk.extraction import (
    extract_customer_info,
    extract_email,
    extract_phone,
)
from frontdesk.models.session import CallSession


class TestPatterns:
    @pytest.mark.parametrize("spoken", [
        "555-123-4567",
        "555.123.4567",
        "555 123 4567",
        "5551234567",
    ])
    def test_phone_formats(self, spoken):
        assert extract_phone(f"you can reach me at {spoken} anytime") == spoken

    def test_email(self):
        assert extract_email("it's jane.doe@example.com") == "jane.doe@example.com"

    def test_no_match(self):
        assert extract_phone("my sink is leaking") is None
        assert extract_email("no email, sorry") is None

    def test_last_match_wins(self):
        text = "my old number was 555-123-4567 but now it's 555-987-6543"
        assert extract_phone(text) == "555-987-6543"


class TestExtractCustomerInfo:
    def test_fills_both_fields(self):
        session = CallSession()
        extract_customer_info("call 555-123-4567 or mail bob@plumb.io", session)

        assert session.customer_phone == "555-123-4567"
        assert session.customer_email == "bob@plumb.io"

    def test_later_utterance_overwrites(self):
        session = CallSession()
        extract_customer_info("it's 555-123-4567", session)
        extract_customer_info("sorry, actually 555-000-1111", session)

        assert session.customer_phone == "555-000-1111"

    def test_utterance_without_match_keeps_previous(self):
        session = CallSession(customer_phone="555-123-4567")
        extract_customer_info("the water heater is making noise", session)

        assert session.customer_phone == "555-123-4567"
        assert session.customer_email is None

    def test_idempotent(self):
        text = "reach me at 555-123-4567, a@b.com"
        once = extract_customer_info(text, CallSession()).model_dump()
        twice = extract_customer_info(text, extract_customer_info(text, CallSession()))

        assert twice.model_dump() == once

    def test_other_fields_untouched(self):
        session = CallSession(customer_name="Jane", address="1 Main St")
        extract_customer_info("555-123-4567", session)

        assert session.customer_name == "Jane"
        assert session.address == "1 Main St"

    @pytest.mark.parametrize("text", ["", None, 42])
    def test_empty_or_non_text_is_ignored(self, text):
        session = CallSession()
        extract_customer_info(text, session)
        assert session.customer_phone is None
