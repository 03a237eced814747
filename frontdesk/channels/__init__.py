"""Message channels the call event router runs over."""

from .base import MessageChannel

__all__ = ["MessageChannel"]
