"""Supabase client singletons.

Provides ``get_supabase()`` which returns a lazily-initialized, process-wide
Supabase client using credentials from ``settings``, and
``get_async_supabase()`` for the realtime feed, which is only available on
the async client.
"""

from supabase import AsyncClient, Client, acreate_client, create_client

from app.core.config import settings

_client: Client | None = None
_async_client: AsyncClient | None = None


def get_supabase() -> Client:
    """Return the singleton Supabase client, creating it on first call."""
    global _client
    if _client is None:
        _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return _client


async def get_async_supabase() -> AsyncClient:
    """Return the singleton async Supabase client, creating it on first call."""
    global _async_client
    if _async_client is None:
        _async_client = await acreate_client(
            settings.SUPABASE_URL, settings.SUPABASE_KEY
        )
    return _async_client


async def close_async_supabase() -> None:
    """Drop every realtime channel and forget the async client."""
    global _async_client
    if _async_client is not None:
        await _async_client.remove_all_channels()
        _async_client = None
