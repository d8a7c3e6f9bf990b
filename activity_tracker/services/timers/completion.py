"""Completion sinks - turn stopped timers into permanent activities"""
import logging
from abc import ABC, abstractmethod

from activity_tracker.infra.supabase.repositories.activities import ActivityRepository, ActivityTagRepository
from activity_tracker.models.activity import Activity, ActivityCreate, CompletionSnapshot
from activity_tracker.utils.duration import format_duration

logger = logging.getLogger(__name__)


class CompletionSink(ABC):
    """Receives the snapshot of every stopped timer"""

    @abstractmethod
    async def on_completion(self, snapshot: CompletionSnapshot) -> None:
        """Persist the completed activity"""


class SupabaseCompletionSink(CompletionSink):
    """Writes an activities row and its activity_tags rows"""

    def __init__(self, user_id: str, activities: ActivityRepository, activity_tags: ActivityTagRepository):
        self.user_id = user_id
        self._activities = activities
        self._activity_tags = activity_tags

    async def on_completion(self, snapshot: CompletionSnapshot) -> Activity:
        activity = await self._activities.create(ActivityCreate(
            user_id=self.user_id,
            description=snapshot.name,
            project_id=snapshot.project_id,
            duration=snapshot.duration_ms,
            date=snapshot.start_time,
        ))

        # The activity id from storage is needed before tags can be linked
        if snapshot.tag_ids:
            await self._activity_tags.create_many(activity.id, snapshot.tag_ids)
            activity.tag_ids = list(snapshot.tag_ids)

        logger.info(f"Activity recorded: {snapshot.name} - {format_duration(snapshot.duration_ms)}")
        return activity
