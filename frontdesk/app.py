"""FastAPI application — HTTP + WebSocket endpoints for the voice front desk.

Endpoints:

  WS   /ws/retell         Real-time call events from the voice platform
  *    /api/calendar/...  Calendar OAuth, availability, bookings
  *    /api/retell/...    Call admin, lifecycle webhook, agent info
  GET  /api/health        Health check

The call flow:
  1. The voice platform opens a WebSocket to /ws/retell for each call
  2. A CallEventRouter is created for that connection and owns its session
  3. Function calls are answered on the same socket until call_ended
"""

from __future__ import annotations

# Load .env into os.environ before settings are read.
from dotenv import load_dotenv
load_dotenv()

import logging
import secrets
import time
from datetime import datetime, timezone

# Configure root logger early so all app loggers are visible when run
# via `uvicorn frontdesk.app:app`.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)-20s %(levelname)-7s %(message)s",
)

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from frontdesk.agent_config import get_agent_prompt
from frontdesk.availability import SlotAvailabilityOracle
from frontdesk.booking import BookingGateway
from frontdesk.calendar_providers.base import CalendarProvider
from frontdesk.calendar_providers.google import GoogleCalendarProvider
from frontdesk.catalog import ServiceCatalog
from frontdesk.channels.websocket_channel import WebSocketChannel
from frontdesk.config import Settings, settings as default_settings
from frontdesk.credentials import CredentialStore
from frontdesk.dispatcher import FunctionDispatcher
from frontdesk.router import CallEventRouter
from frontdesk.routes import calendar_router, retell_router
from frontdesk.voice_platform import RetellClient

log = logging.getLogger("frontdesk.app")

_START_TIME = time.time()


def create_app(
    settings: Settings | None = None,
    credential_store: CredentialStore | None = None,
    calendar_provider: CalendarProvider | None = None,
    retell: RetellClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators can be passed in (tests); otherwise they are built from
    ``settings``.
    """
    settings = settings or default_settings
    for warning in settings.validate_startup():
        log.warning(warning)

    if credential_store is None:
        credential_store = CredentialStore(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_redirect_uri,
            token_file=settings.google_token_file or None,
        )
        credential_store.reload()

    if calendar_provider is None:
        calendar_provider = GoogleCalendarProvider(
            credential_store,
            calendar_id=settings.google_calendar_id,
            time_zone=settings.calendar_timezone,
        )

    oracle = SlotAvailabilityOracle(
        calendar_provider,
        time_zone=settings.calendar_timezone,
        business_start_hour=settings.business_start_hour,
        business_end_hour=settings.business_end_hour,
        timeout_seconds=settings.calendar_timeout_seconds,
    )
    gateway = BookingGateway(
        calendar_provider,
        time_zone=settings.calendar_timezone,
        timeout_seconds=settings.calendar_timeout_seconds,
    )
    dispatcher = FunctionDispatcher(
        oracle,
        gateway,
        ServiceCatalog(),
        slot_duration_minutes=settings.slot_duration_minutes,
        booking_duration_minutes=settings.booking_duration_minutes,
    )

    app = FastAPI(
        title="Plumbing Front Desk",
        description="Voice receptionist backend: call events, function calls and calendar booking",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.credential_store = credential_store
    app.state.calendar_provider = calendar_provider
    app.state.oracle = oracle
    app.state.gateway = gateway
    app.state.dispatcher = dispatcher
    app.state.retell = retell or RetellClient(
        api_key=settings.retell_api_key, base_url=settings.retell_base_url
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(calendar_router)
    app.include_router(retell_router)

    # ── Health check ───────────────────────────────────────────

    @app.get("/api/health")
    async def health() -> JSONResponse:
        uptime = round(time.time() - _START_TIME, 1)
        return JSONResponse({
            "status": "healthy",
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            "uptime": uptime,
        })

    # ── Voice platform call WebSocket ──────────────────────────

    @app.websocket("/ws/retell")
    async def retell_socket(websocket: WebSocket) -> None:
        """One connection per call; messages are handled in order."""
        await websocket.accept()
        channel_id = secrets.token_urlsafe(9)
        log.info("Voice platform WebSocket connected (channel=%s)", channel_id)

        channel = WebSocketChannel(websocket, channel_id=channel_id)
        router = CallEventRouter(
            app.state.dispatcher,
            agent_config=lambda: get_agent_prompt(app.state.settings),
            channel_id=channel_id,
        )
        try:
            await router.run(channel)
        finally:
            await channel.close()
            log.info("Voice platform WebSocket ended (channel=%s)", channel_id)

    return app


# ── Module-level app instance for uvicorn ──────────────────────

app = create_app()


if __name__ == "__main__":
    import uvicorn

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"
    )

    uvicorn.run(
        "frontdesk.app:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        log_config=log_config,
    )
