"""FastAPI authentication dependencies.

Each request resolves its ``SessionContext`` once and receives it through
dependency injection; nothing about the caller is kept in module state.
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request
from supabase import AsyncClient

from coursemart.database.client import create_supabase_client, get_service_client

from .exceptions import AuthorizationError
from .service import SessionService
from .session import SessionContext


def get_access_token(request: Request) -> str | None:
    """Extract the bearer token from the Authorization header or the access_token cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]

    cookie_value = request.cookies.get("access_token")
    if cookie_value and cookie_value.startswith("Bearer "):
        return cookie_value[7:]
    return cookie_value or None


AccessToken = Annotated[str | None, Depends(get_access_token)]


async def get_user_client(access_token: AccessToken) -> AsyncClient:
    """Request-scoped Supabase client acting as the caller."""
    return await create_supabase_client(access_token)


UserClient = Annotated[AsyncClient, Depends(get_user_client)]


async def get_session_context(request: Request, client: UserClient, access_token: AccessToken) -> SessionContext:
    """Resolve the caller's session and remember the user id for logging."""
    service = SessionService(await get_service_client(), client)
    context = await service.resolve(access_token)
    request.state.user_id = context.user_id
    return context


CurrentSession = Annotated[SessionContext, Depends(get_session_context)]


async def require_session(session: CurrentSession) -> SessionContext:
    """Reject requests without an authenticated session."""
    session.require_user()
    return session


AuthenticatedSession = Annotated[SessionContext, Depends(require_session)]


def require_role(*roles: str) -> Callable[[SessionContext], Awaitable[SessionContext]]:
    """Create a dependency that only lets the given profile roles through."""

    async def role_dependency(session: AuthenticatedSession) -> SessionContext:
        if session.role not in roles:
            raise AuthorizationError(f"This action requires one of the roles: {', '.join(roles)}")
        return session

    return role_dependency


AdminSession = Annotated[SessionContext, Depends(require_role("admin"))]
