"""Completed activity models"""
from datetime import datetime, timedelta
from typing import List, Optional
from pydantic import BaseModel, Field


class ActivityBase(BaseModel):
    """Base activity fields"""
    description: str
    project_id: Optional[str] = None
    duration: int = Field(ge=0)  # milliseconds
    date: datetime  # start instant


class ActivityCreate(ActivityBase):
    """Activity creation model"""
    user_id: str   # UUID as string


class Activity(ActivityBase):
    """Complete activity model from database"""
    id: str
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tag_ids: List[str] = Field(default_factory=list)

    @property
    def end_time(self) -> datetime:
        return self.date + timedelta(milliseconds=self.duration)

    class Config:
        from_attributes = True


class ActivityTagCreate(BaseModel):
    """Activity tag association creation model"""
    activity_id: str
    tag_id: str


class ActivityTag(ActivityTagCreate):
    """Complete activity tag association from database"""
    id: str
    created_at: Optional[datetime] = None


class CompletionSnapshot(BaseModel):
    """Final state of a stopped timer, handed to the completion sink"""
    timer_id: str
    name: str
    duration_ms: int = Field(ge=0)
    start_time: datetime
    end_time: datetime
    project_id: Optional[str] = None
    tag_ids: List[str] = Field(default_factory=list)
