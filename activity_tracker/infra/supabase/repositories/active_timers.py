"""Active timer repositories"""
from typing import Any, Dict, Iterable, List

from supabase import Client  # type: ignore

from activity_tracker.models.active_timer import (
    ActiveTimer,
    ActiveTimerCreate,
    ActiveTimerTag,
    ActiveTimerTagCreate,
    ActiveTimerUpdate,
)

from .base import BaseRepository


class ActiveTimerRepository(BaseRepository[ActiveTimer, ActiveTimerCreate, ActiveTimerUpdate]):
    """Repository for currently running or paused timers"""

    def __init__(self, client: Client):
        super().__init__(client, "active_activities", ActiveTimer)

    def _to_model(self, data: Dict[str, Any]) -> ActiveTimer:
        # Flatten the joined active_activity_tags(tag_id) relation into tag_ids
        data = dict(data)
        links = data.pop("active_activity_tags", None) or []
        if links and "tag_ids" not in data:
            data["tag_ids"] = [link["tag_id"] for link in links]
        return super()._to_model(data)

    async def find_by_user(self, user_id: str) -> List[ActiveTimer]:
        """Find all active timers for a user, with their tag associations"""
        response = (
            self._client.table(self._table_name)
            .select("*, active_activity_tags(tag_id)")
            .eq("user_id", user_id)
            .order("start_time", desc=False)
            .execute()
        )
        return self._to_models(response.data)

    async def update_elapsed(self, timer_id: str, elapsed_ms: int) -> bool:
        """Write the latest elapsed time of a running timer"""
        response = (
            self._client.table(self._table_name)
            .update({"elapsed_time": elapsed_ms})
            .eq("id", timer_id)
            .execute()
        )
        return bool(response.data)


class ActiveTimerTagRepository(BaseRepository[ActiveTimerTag, ActiveTimerTagCreate, ActiveTimerTagCreate]):
    """Repository for the active timer <-> tag junction table"""

    def __init__(self, client: Client):
        super().__init__(client, "active_activity_tags", ActiveTimerTag)

    async def add(self, timer_id: str, tag_id: str) -> ActiveTimerTag:
        """Associate a tag with a timer. The pair is unique, so repeats are upserts."""
        return await self.upsert(
            ActiveTimerTagCreate(active_activity_id=timer_id, tag_id=tag_id),
            on_conflict="active_activity_id,tag_id",
        )

    async def remove(self, timer_id: str, tag_id: str) -> bool:
        """Remove a single tag association"""
        response = (
            self._client.table(self._table_name)
            .delete()
            .eq("active_activity_id", timer_id)
            .eq("tag_id", tag_id)
            .execute()
        )
        return bool(response.data)

    async def replace(self, timer_id: str, tag_ids: Iterable[str]) -> None:
        """Make the stored associations of a timer match tag_ids exactly"""
        self._client.table(self._table_name).delete().eq("active_activity_id", timer_id).execute()

        rows = [
            ActiveTimerTagCreate(active_activity_id=timer_id, tag_id=tag_id).model_dump(mode='json')
            for tag_id in tag_ids
        ]
        if rows:
            self._client.table(self._table_name).insert(rows).execute()
