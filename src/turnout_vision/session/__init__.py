"""Per-session dashboard state."""

from turnout_vision.session.manager import DashboardSession, DashboardSessionManager
from turnout_vision.session.state import DashboardState, IngestionError, ResultSlot

__all__ = [
    "DashboardSession",
    "DashboardSessionManager",
    "DashboardState",
    "IngestionError",
    "ResultSlot",
]
