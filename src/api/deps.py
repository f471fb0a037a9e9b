"""FastAPI dependency injection for document services and sessions."""

from fastapi import Header, HTTPException, Request, status

from src.core.logging import owner_ctx
from src.core.sessions import DemoUser, SessionStore
from src.documents.generator import DocumentGenerator
from src.documents.history import HistoryStore

SESSION_HEADER = "X-Session-Token"


def get_generator(request: Request) -> DocumentGenerator:
    """Get the document generator from app state."""
    return request.app.state.generator


def get_history(request: Request) -> HistoryStore:
    """Get the history store from app state."""
    return request.app.state.history


def get_sessions(request: Request) -> SessionStore:
    """Get the session store from app state."""
    return request.app.state.sessions


async def get_optional_user(
    request: Request,
    x_session_token: str | None = Header(default=None, alias=SESSION_HEADER),
) -> DemoUser | None:
    """Resolve the session user, if any, and bind it to the log context."""
    user = get_sessions(request).get(x_session_token)
    if user is not None:
        owner_ctx.set(user.id)
    return user


async def get_current_user(
    request: Request,
    x_session_token: str | None = Header(default=None, alias=SESSION_HEADER),
) -> DemoUser:
    """Require a valid session.

    Raises:
        HTTPException: 401 if the token is missing or unknown.
    """
    user = await get_optional_user(request, x_session_token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )
    return user
