"""Supabase client singletons"""
from typing import Optional

from supabase import AsyncClient, Client, acreate_client, create_client  # type: ignore

from activity_tracker import config

_supabase_client: Optional[Client] = None
_async_supabase_client: Optional[AsyncClient] = None


def _credentials() -> tuple:
    url = config.SUPABASE_URL
    key = config.SUPABASE_SERVICE_ROLE_KEY

    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

    return url, key


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton"""
    global _supabase_client

    if _supabase_client is None:
        url, key = _credentials()
        _supabase_client = create_client(url, key)

    return _supabase_client


async def get_async_supabase_client() -> AsyncClient:
    """Get or create the async Supabase client used for realtime subscriptions"""
    global _async_supabase_client

    if _async_supabase_client is None:
        url, key = _credentials()
        _async_supabase_client = await acreate_client(url, key)

    return _async_supabase_client


def reset_supabase_client():
    """Reset the Supabase client singletons (useful for testing)"""
    global _supabase_client, _async_supabase_client
    _supabase_client = None
    _async_supabase_client = None
