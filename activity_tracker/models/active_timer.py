"""Active timer row models (active_activities / active_activity_tags)"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class ActiveTimerBase(BaseModel):
    """Fields shared by every active timer row"""
    description: str
    project_id: Optional[str] = None
    start_time: datetime
    elapsed_time: int = Field(0, ge=0)  # milliseconds
    is_running: bool = True
    paused_time: Optional[int] = Field(0, ge=0)  # milliseconds, nullable in the table


class ActiveTimerCreate(ActiveTimerBase):
    """Active timer creation model. The id is generated client-side."""
    id: str
    user_id: str   # UUID as string


class ActiveTimerUpdate(BaseModel):
    """Active timer update model - all fields optional"""
    project_id: Optional[str] = None
    elapsed_time: Optional[int] = Field(None, ge=0)
    is_running: Optional[bool] = None
    paused_time: Optional[int] = Field(None, ge=0)


class ActiveTimer(ActiveTimerBase):
    """Complete active timer model from database"""
    id: str
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tag_ids: List[str] = Field(default_factory=list)  # flattened from active_activity_tags

    class Config:
        from_attributes = True


class ActiveTimerTagCreate(BaseModel):
    """Active timer tag association creation model"""
    active_activity_id: str
    tag_id: str


class ActiveTimerTag(ActiveTimerTagCreate):
    """Complete active timer tag association from database"""
    id: str
    created_at: Optional[datetime] = None
