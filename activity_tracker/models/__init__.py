"""Domain models for the application"""
from .active_timer import ActiveTimer, ActiveTimerCreate, ActiveTimerUpdate, ActiveTimerTag, ActiveTimerTagCreate
from .activity import Activity, ActivityCreate, ActivityTag, ActivityTagCreate, CompletionSnapshot
from .catalog import Project, Tag
from .feed import FeedEvent, FeedEventKind

__all__ = [
    'ActiveTimer', 'ActiveTimerCreate', 'ActiveTimerUpdate',
    'ActiveTimerTag', 'ActiveTimerTagCreate',
    'Activity', 'ActivityCreate',
    'ActivityTag', 'ActivityTagCreate', 'CompletionSnapshot',
    'Project', 'Tag',
    'FeedEvent', 'FeedEventKind',
]
