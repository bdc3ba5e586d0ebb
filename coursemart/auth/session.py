"""Explicit session context handed to every view.

Replaces a shared, mutable "current user" with a value object that each
request resolves once and passes down.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from coursemart.enrollments.models import Profile

from .exceptions import InvalidTokenError, MissingTokenError


class SessionStatus(str, Enum):
    """Lifecycle state of a session."""

    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"
    ERROR = "error"


@dataclass
class SessionUser:
    """Authenticated user as reported by Supabase Auth."""

    id: str
    email: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class SessionContext:
    """Who is calling, their profile, and how far resolution got."""

    user: SessionUser | None = None
    profile: Profile | None = None
    status: SessionStatus = SessionStatus.LOADING
    access_token: str | None = None
    error: str | None = None

    @classmethod
    def anonymous(cls) -> "SessionContext":
        return cls(status=SessionStatus.ANONYMOUS)

    @classmethod
    def failed(cls, error: str) -> "SessionContext":
        return cls(status=SessionStatus.ERROR, error=error)

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED and self.user is not None

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None

    @property
    def role(self) -> str | None:
        return self.profile.role if self.profile else None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def require_user(self) -> SessionUser:
        """Return the user or raise a 401 matching why there is none."""
        if self.status == SessionStatus.ERROR:
            raise InvalidTokenError()
        if not self.is_authenticated:
            raise MissingTokenError()
        return self.user

