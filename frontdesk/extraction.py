"""Best-effort contact details from recognized speech.

Two patterns only: a North American style phone number and an email
address. No attempt is made to check that either is real.
"""

from __future__ import annotations

import re
from typing import Optional

from frontdesk.models.session import CallSession

PHONE_PATTERN = re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}")
EMAIL_PATTERN = re.compile(r"[\w.-]+@[\w.-]+\.\w+")


def _last_match(pattern: re.Pattern[str], text: str) -> Optional[str]:
    matches = pattern.findall(text)
    return matches[-1] if matches else None


def extract_phone(text: str) -> Optional[str]:
    return _last_match(PHONE_PATTERN, text)


def extract_email(text: str) -> Optional[str]:
    return _last_match(EMAIL_PATTERN, text)


def extract_customer_info(text: str, session: CallSession) -> CallSession:
    """Overwrite phone/email on ``session`` with whatever ``text`` contains.

    Both patterns always run; a match replaces any earlier value.
    """
    if not isinstance(text, str) or not text:
        return session

    phone = extract_phone(text)
    if phone:
        session.customer_phone = phone

    email = extract_email(text)
    if email:
        session.customer_email = email

    return session
