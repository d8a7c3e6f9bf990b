"""Repository factory and exports"""
from supabase import Client
from .active_timers import ActiveTimerRepository, ActiveTimerTagRepository
from .activities import ActivityRepository, ActivityTagRepository
from .catalog import ProjectRepository, TagRepository


class RepositoryFactory:
    """Factory for creating repository instances"""

    def __init__(self, client: Client):
        self._client = client
        self._active_timers: ActiveTimerRepository = None
        self._active_timer_tags: ActiveTimerTagRepository = None
        self._activities: ActivityRepository = None
        self._activity_tags: ActivityTagRepository = None
        self._projects: ProjectRepository = None
        self._tags: TagRepository = None

    @property
    def active_timers(self) -> ActiveTimerRepository:
        """Get active timer repository"""
        if self._active_timers is None:
            self._active_timers = ActiveTimerRepository(self._client)
        return self._active_timers

    @property
    def active_timer_tags(self) -> ActiveTimerTagRepository:
        """Get active timer tag repository"""
        if self._active_timer_tags is None:
            self._active_timer_tags = ActiveTimerTagRepository(self._client)
        return self._active_timer_tags

    @property
    def activities(self) -> ActivityRepository:
        """Get activity repository"""
        if self._activities is None:
            self._activities = ActivityRepository(self._client)
        return self._activities

    @property
    def activity_tags(self) -> ActivityTagRepository:
        """Get activity tag repository"""
        if self._activity_tags is None:
            self._activity_tags = ActivityTagRepository(self._client)
        return self._activity_tags

    @property
    def projects(self) -> ProjectRepository:
        """Get project repository"""
        if self._projects is None:
            self._projects = ProjectRepository(self._client)
        return self._projects

    @property
    def tags(self) -> TagRepository:
        """Get tag repository"""
        if self._tags is None:
            self._tags = TagRepository(self._client)
        return self._tags


__all__ = [
    'RepositoryFactory',
    'ActiveTimerRepository',
    'ActiveTimerTagRepository',
    'ActivityRepository',
    'ActivityTagRepository',
    'ProjectRepository',
    'TagRepository',
]
