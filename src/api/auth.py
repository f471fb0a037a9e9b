"""Demo authentication endpoints.

Any non-empty email and password sign in. Registration additionally needs
a name and a matching password confirmation.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.api.deps import SESSION_HEADER, get_current_user, get_sessions
from src.core.logging import get_logger
from src.core.sessions import DemoUser, SessionStore, make_user

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Payload for signing in."""

    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1)


class RegisterRequest(LoginRequest):
    """Payload for creating a demo account."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    confirm_password: str = Field(min_length=1)

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserResponse(BaseModel):
    """Signed-in user."""

    id: str
    email: str
    name: str
    avatar: str


class SessionResponse(BaseModel):
    """Session token plus the user it belongs to."""

    token: str
    user: UserResponse


def _to_user_response(user: DemoUser) -> UserResponse:
    return UserResponse(id=user.id, email=user.email, name=user.name, avatar=user.avatar)


def _open_session(sessions: SessionStore, user: DemoUser) -> SessionResponse:
    token = sessions.create(user)
    logger.info("session_opened", user_id=user.id)
    return SessionResponse(token=token, user=_to_user_response(user))


@router.post("/login", response_model=SessionResponse)
async def login(
    payload: LoginRequest,
    sessions: Annotated[SessionStore, Depends(get_sessions)],
) -> SessionResponse:
    """Sign in with any non-empty credentials."""
    if not payload.email.strip() or not payload.password.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Email and password are required",
        )
    return _open_session(sessions, make_user(payload.email))


@router.post(
    "/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    payload: RegisterRequest,
    sessions: Annotated[SessionStore, Depends(get_sessions)],
) -> SessionResponse:
    """Create a demo account and sign in."""
    if not payload.name.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Name is required",
        )
    return _open_session(sessions, make_user(payload.email, payload.name))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    sessions: Annotated[SessionStore, Depends(get_sessions)],
    x_session_token: str | None = Header(default=None, alias=SESSION_HEADER),
) -> None:
    """Drop the current session. Unknown tokens are ignored."""
    if sessions.revoke(x_session_token):
        logger.info("session_closed")


@router.get("/me", response_model=UserResponse)
async def me(user: Annotated[DemoUser, Depends(get_current_user)]) -> UserResponse:
    """Return the signed-in user."""
    return _to_user_response(user)
