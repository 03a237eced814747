"""WebSocketChannel — MessageChannel over a FastAPI/Starlette WebSocket.

Protocol (voice platform → server)::

  {"type": "call_started",  "call_id": "..."}
  {"type": "transcript",    "transcript": "...", "speaker": "customer"}
  {"type": "function_call", "function_name": "...", "arguments": {...}}
  {"type": "call_ended",    "call_id": "..."}

Server → voice platform::

  {"type": "config",               "agent": {...}}
  {"type": "function_call_result", "function_name": "...", "result": {...}}
  {"type": "error",                "message": "..."}
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator

from fastapi import WebSocket, WebSocketDisconnect

from frontdesk.channels.base import MessageChannel

log = logging.getLogger("websocket_channel")


class WebSocketChannel(MessageChannel):
    """MessageChannel wrapping an accepted FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket, channel_id: str = "") -> None:
        self._ws = websocket
        self._channel_id = channel_id
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closed

    async def receive_messages(self) -> AsyncIterator[str | bytes]:
        while not self._closed:
            try:
                message = await self._ws.receive()
            except WebSocketDisconnect:
                message = {"type": "websocket.disconnect"}
            if message["type"] == "websocket.disconnect":
                log.info("WebSocket closed by peer (channel=%s)", self._channel_id)
                self._closed = True
                break
            # Binary frames are passed on so the router can reject them.
            raw = message.get("text")
            yield raw if raw is not None else message.get("bytes") or b""

    async def send_message(self, message: dict[str, Any]) -> None:
        if self._closed:
            log.debug("Dropping %s message on closed channel", message.get("type"))
            return
        try:
            await self._ws.send_text(json.dumps(message, default=str))
        except (WebSocketDisconnect, RuntimeError):
            log.warning("Failed to send %s message (channel=%s)", message.get("type"), self._channel_id)
            self._closed = True

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._ws.close()
        except RuntimeError:
            pass  # already closed by the peer
        log.info("WebSocket channel closed (channel=%s)", self._channel_id)
