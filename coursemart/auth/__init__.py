"""Session resolution and FastAPI auth dependencies."""

from coursemart.auth.dependencies import (
    AdminSession,
    AuthenticatedSession,
    CurrentSession,
    UserClient,
    get_session_context,
    get_user_client,
    require_role,
)
from coursemart.auth.service import SessionService
from coursemart.auth.session import SessionContext, SessionStatus, SessionUser


__all__ = [
    "AdminSession",
    "AuthenticatedSession",
    "CurrentSession",
    "SessionContext",
    "SessionService",
    "SessionStatus",
    "SessionUser",
    "UserClient",
    "get_session_context",
    "get_user_client",
    "require_role",
]
