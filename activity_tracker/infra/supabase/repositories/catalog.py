"""Read-only project and tag repositories"""
from typing import List

from pydantic import BaseModel
from supabase import Client  # type: ignore

from activity_tracker.models.catalog import Project, Tag

from .base import BaseRepository


class ProjectRepository(BaseRepository[Project, BaseModel, BaseModel]):
    """Projects are owned by the CRUD layer; this core only reads them"""

    def __init__(self, client: Client):
        super().__init__(client, "projects", Project)

    async def find_by_user(self, user_id: str) -> List[Project]:
        return await self.find_by_filters({"user_id": user_id})


class TagRepository(BaseRepository[Tag, BaseModel, BaseModel]):
    """Tags are owned by the CRUD layer; this core only reads them"""

    def __init__(self, client: Client):
        super().__init__(client, "tags", Tag)

    async def find_by_user(self, user_id: str) -> List[Tag]:
        return await self.find_by_filters({"user_id": user_id})
