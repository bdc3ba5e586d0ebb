"""Supabase client construction.

Persistence, authentication and row-level security all live in the hosted
Supabase project. This module only builds clients:

- a process-wide service client used to verify access tokens and manage
  profiles, and
- request-scoped clients whose PostgREST calls carry the caller's access
  token, so every read and write is filtered by RLS policies for that user.
"""

import logging

from supabase import AsyncClient, AsyncClientOptions, acreate_client

from coursemart.config.settings import get_settings


logger = logging.getLogger(__name__)

_service_client: AsyncClient | None = None


async def create_supabase_client(access_token: str | None = None, *, api_key: str | None = None) -> AsyncClient:
    """Create an async Supabase client, optionally acting as the given user."""
    settings = get_settings()
    api_key = api_key or settings.SUPABASE_PUBLISHABLE_KEY

    if not settings.SUPABASE_URL or not api_key:
        error_msg = "Supabase configuration missing"
        raise ValueError(error_msg)

    # No session storage on the server; tokens are supplied per request
    options = AsyncClientOptions(
        auto_refresh_token=False,
        persist_session=False,
    )
    client = await acreate_client(settings.SUPABASE_URL, api_key, options=options)

    if access_token:
        client.postgrest.auth(access_token)

    return client


async def get_service_client() -> AsyncClient:
    """Get the shared client used for token verification and profile bootstrap."""
    global _service_client  # noqa: PLW0603

    if _service_client is None:
        settings = get_settings()
        _service_client = await create_supabase_client(api_key=settings.SUPABASE_SECRET_KEY or None)
        logger.info("Supabase service client initialized")
    return _service_client


async def close_service_client() -> None:
    """Drop the shared client so the next call builds a fresh one."""
    global _service_client  # noqa: PLW0603

    if _service_client is not None:
        _service_client = None
        logger.info("Supabase service client released")
