"""Project and tag models (managed by the CRUD layer, read here for export)"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class Project(BaseModel):
    id: str
    name: str
    color: str
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None


class Tag(BaseModel):
    id: str
    name: str
    color: str
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
