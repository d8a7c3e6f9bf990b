"""Multi-timer core: records, manager, storage sync and sessions"""
from .completion import CompletionSink, SupabaseCompletionSink
from .errors import InvalidInput, NotFound, StorageUnavailable, TimerError
from .factory import create_supabase_session
from .feed_reducer import apply_feed_event
from .manager import TimerManager
from .record import TimerRecord
from .scheduler import PeriodicTask
from .session import SessionRegistry, TimerSession
from .sync_adapter import RemoteSyncAdapter
from .timer_set import TimerSet

__all__ = [
    "CompletionSink",
    "SupabaseCompletionSink",
    "TimerError",
    "InvalidInput",
    "NotFound",
    "StorageUnavailable",
    "create_supabase_session",
    "apply_feed_event",
    "TimerManager",
    "TimerRecord",
    "PeriodicTask",
    "SessionRegistry",
    "TimerSession",
    "RemoteSyncAdapter",
    "TimerSet",
]
