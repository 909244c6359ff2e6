"""
Explicit per-request identity handed to every service call.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Session:
    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.email or self.user_id


def require_session(session: Optional[Session]) -> Session:
    """Return ``session`` or raise ``AuthRequired`` for guests."""
    from app.errors import AuthRequired

    if session is None or not session.user_id:
        raise AuthRequired()
    return session
