"""In-memory demo sessions.

Sessions only identify whose document history a request belongs to. Any
non-empty credentials are accepted; this is not a security boundary.
"""

import hashlib
import re
import secrets
from dataclasses import dataclass


@dataclass(frozen=True)
class DemoUser:
    """User derived from the login email."""

    id: str
    email: str
    name: str
    avatar: str


def display_name(email: str) -> str:
    """Title-cased name from the email local part.

    Example:
        >>> display_name("jane.doe@example.com")
        'Jane Doe'
    """
    local = email.split("@", 1)[0]
    words = [w for w in re.split(r"[._\-+]+", local) if w]
    return " ".join(word.capitalize() for word in words) or email


def initials(name: str) -> str:
    """Up to two upper-case initials."""
    return "".join(word[0] for word in name.split()[:2]).upper()


def make_user(email: str, name: str | None = None) -> DemoUser:
    """Build a user with a stable id derived from the email."""
    normalized = email.strip().lower()
    user_name = (name or "").strip() or display_name(normalized)
    return DemoUser(
        id=hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:12],
        email=normalized,
        name=user_name,
        avatar=initials(user_name),
    )


class SessionStore:
    """Token to user mapping held in process memory."""

    def __init__(self) -> None:
        self._sessions: dict[str, DemoUser] = {}

    def create(self, user: DemoUser) -> str:
        """Open a session and return its token."""
        token = secrets.token_urlsafe(24)
        self._sessions[token] = user
        return token

    def get(self, token: str | None) -> DemoUser | None:
        if not token:
            return None
        return self._sessions.get(token)

    def revoke(self, token: str | None) -> bool:
        """Drop a session. Returns True if it existed."""
        if not token:
            return False
        return self._sessions.pop(token, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
