"""Completed activity repositories"""
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel
from supabase import Client  # type: ignore

from activity_tracker.models.activity import (
    Activity,
    ActivityCreate,
    ActivityTag,
    ActivityTagCreate,
)

from .base import BaseRepository


class ActivityRepository(BaseRepository[Activity, ActivityCreate, BaseModel]):
    """Repository for completed activities"""

    def __init__(self, client: Client):
        super().__init__(client, "activities", Activity)

    def _to_model(self, data: Dict[str, Any]) -> Activity:
        data = dict(data)
        links = data.pop("activity_tags", None) or []
        if links and "tag_ids" not in data:
            data["tag_ids"] = [link["tag_id"] for link in links]
        return super()._to_model(data)

    async def find_by_user(self, user_id: str) -> List[Activity]:
        """Find all activities for a user, newest first, with tag ids"""
        response = (
            self._client.table(self._table_name)
            .select("*, activity_tags(tag_id)")
            .eq("user_id", user_id)
            .order("date", desc=True)
            .execute()
        )
        return self._to_models(response.data)


class ActivityTagRepository(BaseRepository[ActivityTag, ActivityTagCreate, ActivityTagCreate]):
    """Repository for the activity <-> tag junction table"""

    def __init__(self, client: Client):
        super().__init__(client, "activity_tags", ActivityTag)

    async def create_many(self, activity_id: str, tag_ids: Iterable[str]) -> List[ActivityTag]:
        """Attach every tag in tag_ids to an activity"""
        rows = [
            ActivityTagCreate(activity_id=activity_id, tag_id=tag_id).model_dump(mode='json')
            for tag_id in tag_ids
        ]
        if not rows:
            return []

        response = self._client.table(self._table_name).insert(rows).execute()
        return self._to_models(response.data or [])
