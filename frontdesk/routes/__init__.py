"""HTTP routers for the dashboard and the voice platform webhooks."""

from .calendar import router as calendar_router
from .retell import router as retell_router

__all__ = ["calendar_router", "retell_router"]
