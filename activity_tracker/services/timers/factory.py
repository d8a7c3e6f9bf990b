"""Builds Supabase-backed timer sessions"""
from activity_tracker.infra.supabase.client import get_async_supabase_client, get_supabase_client
from activity_tracker.infra.supabase.realtime import SupabaseChangeFeed
from activity_tracker.infra.supabase.repositories import RepositoryFactory

from .completion import SupabaseCompletionSink
from .manager import TimerManager
from .session import TimerSession
from .sync_adapter import RemoteSyncAdapter


async def create_supabase_session(user_id: str) -> TimerSession:
    """Wire a session for user_id against the configured Supabase project"""
    repositories = RepositoryFactory(get_supabase_client())
    realtime_client = await get_async_supabase_client()

    adapter = RemoteSyncAdapter(user_id, repositories.active_timers, repositories.active_timer_tags)
    sink = SupabaseCompletionSink(user_id, repositories.activities, repositories.activity_tags)
    feed = SupabaseChangeFeed(realtime_client, user_id)

    return TimerSession(user_id, manager=TimerManager(), adapter=adapter, feed=feed, sink=sink)
