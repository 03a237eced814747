"""Application configuration via environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings

log = logging.getLogger("frontdesk.config")


class Settings(BaseSettings):
    # Google Calendar (OAuth web flow)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:3000/api/calendar/auth/callback"
    google_calendar_id: str = "primary"
    google_token_file: str = ""
    calendar_timezone: str = "America/New_York"
    calendar_timeout_seconds: float = 10.0

    # Scheduling rules
    business_start_hour: int = 8
    business_end_hour: int = 18
    slot_duration_minutes: int = 60
    booking_duration_minutes: int = 60

    # Retell voice platform
    retell_api_key: str = ""
    retell_base_url: str = "https://api.retellai.com"
    retell_phone_number: str = ""
    retell_agent_id: str = ""
    retell_llm_id: str = ""
    webhook_url: str = ""

    # Company profile
    company_name: str = "ABC Plumbing Services"
    company_phone: str = "(555) 123-4567"
    service_area: str = "the greater metro area"

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings, raises on errors."""
        warnings: list[str] = []
        _placeholders = {"your_client_id", "your_client_secret", "key_..."}

        if self.business_start_hour >= self.business_end_hour:
            raise ValueError(
                "BUSINESS_START_HOUR must be earlier than BUSINESS_END_HOUR "
                f"(got {self.business_start_hour} and {self.business_end_hour})."
            )

        # Google OAuth client: calendar features degrade without it
        if (
            not self.google_client_id
            or not self.google_client_secret
            or self.google_client_id in _placeholders
            or self.google_client_secret in _placeholders
        ):
            warnings.append(
                "GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET not set — calendar "
                "integration disabled, callers will be offered a call back."
            )

        # Retell: admin endpoints need the key
        if not self.retell_api_key or self.retell_api_key in _placeholders:
            warnings.append(
                "RETELL_API_KEY not set — call creation and agent registration won't work."
            )
        if not self.retell_agent_id:
            warnings.append("RETELL_AGENT_ID not set — outbound calls need an explicit agentId.")

        return warnings


settings = Settings()
