"""Resolve access tokens into session contexts."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError
from supabase import AsyncClient, PostgrestAPIError

from coursemart.enrollments.models import Profile
from coursemart.enrollments.queries import PROFILES_TABLE

from .session import SessionContext, SessionStatus, SessionUser


logger = logging.getLogger(__name__)

ALLOWED_ROLES = ("admin", "instructor", "student")
DEFAULT_ROLE = "student"


def profile_defaults(user: SessionUser) -> dict[str, Any]:
    """Profile fields for a user that signed up without a profile row."""
    metadata = user.metadata or {}
    email_name = user.email.split("@")[0] if user.email else None
    full_name = metadata.get("full_name") or metadata.get("name") or email_name or "User"
    role = metadata.get("role")
    if role not in ALLOWED_ROLES:
        role = DEFAULT_ROLE
    return {
        "user_id": user.id,
        "email": user.email or "",
        "full_name": full_name,
        "role": role,
    }


class SessionService:
    """Build a ``SessionContext`` from a bearer token.

    Token verification goes through ``auth_client``; profile reads and the
    first-login profile insert go through ``data_client`` so they run under the
    caller's row-level security policies.
    """

    def __init__(self, auth_client: AsyncClient, data_client: AsyncClient) -> None:
        self.auth_client = auth_client
        self.data_client = data_client

    async def resolve(self, access_token: str | None) -> SessionContext:
        """Resolve the caller's user and profile."""
        if not access_token:
            return SessionContext.anonymous()

        try:
            user_response = await self.auth_client.auth.get_user(access_token)
        except Exception:
            logger.exception("Token verification failed")
            return SessionContext.failed("Token verification failed")

        if not user_response or not user_response.user:
            return SessionContext.anonymous()

        auth_user = user_response.user
        user = SessionUser(
            id=str(auth_user.id),
            email=auth_user.email,
            metadata=dict(auth_user.user_metadata or {}),
        )
        profile = await self.load_profile(user)

        return SessionContext(
            user=user,
            profile=profile,
            status=SessionStatus.AUTHENTICATED,
            access_token=access_token,
        )

    async def load_profile(self, user: SessionUser) -> Profile | None:
        """Fetch the user's profile, creating it on first login.

        A failed lookup leaves the session without a profile instead of failing
        the request; role-gated routes will then refuse access.
        """
        try:
            response = await (
                self.data_client.table(PROFILES_TABLE).select("*").eq("user_id", user.id).maybe_single().execute()
            )
        except (PostgrestAPIError, httpx.HTTPError):
            logger.exception(f"Error fetching profile for user {user.id}")
            return None

        row = response.data if response else None
        if row:
            return self._to_profile(row)

        return await self.create_profile(user)

    async def create_profile(self, user: SessionUser) -> Profile | None:
        """Insert a profile for ``user`` from their sign-up metadata."""
        payload = profile_defaults(user)
        try:
            response = await self.data_client.table(PROFILES_TABLE).insert(payload).execute()
        except (PostgrestAPIError, httpx.HTTPError):
            logger.exception(f"Error creating profile for user {user.id}")
            return None

        logger.info(f"Created {payload['role']} profile for user {user.id}")
        rows = response.data or []
        return self._to_profile(rows[0] if rows else payload)

    @staticmethod
    def _to_profile(row: dict[str, Any]) -> Profile | None:
        try:
            return Profile.model_validate(row)
        except PydanticValidationError:
            logger.warning(f"Ignoring malformed profile row for user {row.get('user_id')}")
            return None
