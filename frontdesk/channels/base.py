"""MessageChannel ABC — one bidirectional text channel per active call.

The voice platform delivers call events as JSON text frames and expects
JSON replies on the same connection. The router only needs to read raw
frames in order, send JSON objects back, and close; concrete channels
adapt a specific transport (FastAPI WebSocket, in-memory test double).
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator


class MessageChannel(ABC):
    """Abstract message channel for a single call."""

    @abstractmethod
    def receive_messages(self) -> AsyncIterator[str | bytes]:
        """Yield raw inbound frames (text or binary) in arrival order.

        This is an async generator that runs for the lifetime of the
        connection and stops when the peer disconnects.
        """

    @abstractmethod
    async def send_message(self, message: dict[str, Any]) -> None:
        """Serialize ``message`` as JSON and send it to the peer."""

    @abstractmethod
    async def close(self) -> None:
        """Tear down the connection. Safe to call multiple times."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """False once the peer has gone away or ``close()`` was called."""
