"""Per-call event router — one instance per voice-platform connection.

Each connection gets a CallEventRouter that:
  1. Owns the CallSession for the life of the call
  2. Answers ``call_started`` with the agent configuration
  3. Feeds customer transcripts through the contact-detail extractor
  4. Sends every ``function_call`` to the dispatcher and replies with
     exactly one ``function_call_result``
  5. Logs a summary and drops the session on ``call_ended``

Messages are handled strictly one at a time in arrival order. A failure
while handling one message becomes an ``error`` message on the channel;
it never ends the call.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Callable, Optional

from frontdesk.channels.base import MessageChannel
from frontdesk.dispatcher import FunctionDispatcher
from frontdesk.extraction import extract_customer_info
from frontdesk.models.session import CallSession, redact_pii

log = logging.getLogger("frontdesk.router")

CUSTOMER_SPEAKER = "customer"


class EventType(str, Enum):
    CALL_STARTED = "call_started"
    CALL_ENDED = "call_ended"
    TRANSCRIPT = "transcript"
    FUNCTION_CALL = "function_call"


def error_message(text: str) -> dict[str, Any]:
    return {"type": "error", "message": text}


class CallEventRouter:
    """Routes one call's inbound events.

    Typical lifecycle::

        router = CallEventRouter(dispatcher, agent_config=lambda: get_agent_prompt(settings))
        await router.run(channel)     # returns on call_ended or disconnect
    """

    def __init__(
        self,
        dispatcher: FunctionDispatcher,
        agent_config: Callable[[], dict[str, Any]],
        channel_id: str = "",
    ) -> None:
        self._dispatcher = dispatcher
        self._agent_config = agent_config
        self._channel_id = channel_id

        self._session: Optional[CallSession] = CallSession()
        self._call_id: str = ""
        self._ended = False
        self._final_summary: dict[str, Any] = {}

    # ── Public API ────────────────────────────────────────────

    @property
    def session(self) -> Optional[CallSession]:
        """The live session, or None once the call has ended."""
        return self._session

    @property
    def is_ended(self) -> bool:
        return self._ended

    @property
    def final_summary(self) -> dict[str, Any]:
        return self._final_summary

    async def run(self, channel: MessageChannel) -> None:
        """Consume ``channel`` until the call ends or the peer disconnects."""
        try:
            async for raw in channel.receive_messages():
                for reply in await self.handle_message(raw):
                    await channel.send_message(reply)
                if self._ended:
                    break
        finally:
            if not self._ended:
                self._end_call("channel closed")

    async def handle_message(self, raw: str | bytes) -> list[dict[str, Any]]:
        """Handle one raw frame and return the messages to send back."""
        if self._ended:
            log.debug("Ignoring message after call end (channel=%s)", self._channel_id)
            return []

        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as exc:
            log.warning("Malformed message on channel %s: %s", self._channel_id, exc)
            return [error_message(f"Malformed message: {exc}")]

        if not isinstance(message, dict):
            return [error_message("Malformed message: expected a JSON object")]

        try:
            return await self._route(message)
        except Exception as exc:
            log.exception("Error processing message %r", message.get("type"))
            return [error_message(str(exc) or exc.__class__.__name__)]

    # ── Internal: event handlers ─────────────────────────────

    async def _route(self, message: dict[str, Any]) -> list[dict[str, Any]]:
        kind = message.get("type")
        log.debug("Received message: %s", kind)

        try:
            event = EventType(kind)
        except ValueError:
            log.info("Unknown message type: %r", kind)
            return []

        if event is EventType.CALL_STARTED:
            return self._on_call_started(message)
        if event is EventType.CALL_ENDED:
            return self._on_call_ended(message)
        if event is EventType.TRANSCRIPT:
            return self._on_transcript(message)
        return [await self._on_function_call(message)]

    def _on_call_started(self, message: dict[str, Any]) -> list[dict[str, Any]]:
        self._call_id = str(message.get("call_id") or "")
        log.info("Call started: %s", self._call_id or "?")
        return [{"type": "config", "agent": self._agent_config()}]

    def _on_call_ended(self, message: dict[str, Any]) -> list[dict[str, Any]]:
        self._call_id = str(message.get("call_id") or self._call_id)
        self._end_call("call ended")
        return []

    def _on_transcript(self, message: dict[str, Any]) -> list[dict[str, Any]]:
        if message.get("speaker") == CUSTOMER_SPEAKER and self._session is not None:
            extract_customer_info(message.get("transcript") or "", self._session)
        return []

    async def _on_function_call(self, message: dict[str, Any]) -> dict[str, Any]:
        name = message.get("function_name")
        session = self._session or CallSession()
        try:
            result = await self._dispatcher.dispatch(
                str(name or ""), message.get("arguments"), session
            )
        except Exception as exc:
            log.exception("Error executing function %s", name)
            result = {"error": str(exc) or exc.__class__.__name__}
        return {"type": "function_call_result", "function_name": name, "result": result}

    def _end_call(self, reason: str) -> None:
        session = self._session
        self._ended = True
        self._session = None
        if session is None:
            return

        self._final_summary = {"call_id": self._call_id, **session.summary()}
        log.info(
            "Call %s finished (%s): customer=%s booking_confirmed=%s",
            self._call_id or "?",
            reason,
            redact_pii(session.customer_name),
            session.booking_confirmed,
        )
        if session.booking_confirmed:
            log.info("Booking confirmed for %s", redact_pii(session.customer_name))
