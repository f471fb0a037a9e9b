"""API module exports."""

from src.api.auth import router as auth_router
from src.api.deps import get_current_user, get_generator, get_history, get_sessions
from src.api.documents import router as documents_router
from src.api.health import router as health_router

__all__ = [
    "auth_router",
    "documents_router",
    "get_current_user",
    "get_generator",
    "get_history",
    "get_sessions",
    "health_router",
]
