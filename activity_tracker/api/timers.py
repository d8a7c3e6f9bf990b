from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from activity_tracker.auth import get_current_user_id
from activity_tracker.models.activity import CompletionSnapshot
from activity_tracker.services.timers import InvalidInput, NotFound, SessionRegistry, TimerRecord, TimerSession
from activity_tracker.utils.duration import format_clock, format_duration

router = APIRouter(prefix="/api/timers", tags=["timers"])


# Request/Response models
class StartTimerRequest(BaseModel):
    name: str
    project_id: Optional[str] = None
    tag_ids: List[str] = Field(default_factory=list)


class ReassignProjectRequest(BaseModel):
    project_id: Optional[str] = None


class TimerView(BaseModel):
    id: str
    name: str
    start_time: datetime
    elapsed_ms: int
    elapsed_display: str
    running: bool
    paused_ms: int
    project_id: Optional[str] = None
    tag_ids: List[str]

    @classmethod
    def from_record(cls, record: TimerRecord) -> "TimerView":
        return cls(
            id=record.id,
            name=record.name,
            start_time=record.start_instant,
            elapsed_ms=record.elapsed_ms,
            elapsed_display=format_clock(record.elapsed_ms),
            running=record.running,
            paused_ms=record.accumulated_pause_ms,
            project_id=record.project_id,
            tag_ids=list(record.tag_ids),
        )


class TimerResponse(BaseModel):
    timer: TimerView
    warnings: List[str] = Field(default_factory=list)


class TimerListResponse(BaseModel):
    timers: List[TimerView]
    count: int
    warnings: List[str] = Field(default_factory=list)


class CompletionResponse(BaseModel):
    activity: CompletionSnapshot
    duration_display: str
    warnings: List[str] = Field(default_factory=list)


class CancelResponse(BaseModel):
    success: bool
    message: str
    warnings: List[str] = Field(default_factory=list)


# Dependencies
def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.timer_sessions


async def get_timer_session(
    user_id: str = Depends(get_current_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
) -> TimerSession:
    return await registry.get(user_id)


def _not_found(e: NotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


def _timer_response(session: TimerSession, record: TimerRecord) -> TimerResponse:
    return TimerResponse(timer=TimerView.from_record(record), warnings=session.drain_sync_errors())


# Endpoints
@router.get("", response_model=TimerListResponse)
async def list_timers(session: TimerSession = Depends(get_timer_session)):
    """List the user's active timers with freshly computed elapsed times"""
    session.manager.tick()
    timers = [TimerView.from_record(record) for record in session.timers()]
    return TimerListResponse(timers=timers, count=len(timers), warnings=session.drain_sync_errors())


@router.post("", response_model=TimerResponse, status_code=201)
async def start_timer(request: StartTimerRequest, session: TimerSession = Depends(get_timer_session)):
    """Start a new timer"""
    try:
        record = await session.start_new(request.name, project_id=request.project_id, tag_ids=request.tag_ids)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _timer_response(session, record)


@router.post("/{timer_id}/pause", response_model=TimerResponse)
async def pause_timer(timer_id: str, session: TimerSession = Depends(get_timer_session)):
    try:
        record = await session.pause(timer_id)
    except NotFound as e:
        raise _not_found(e)
    return _timer_response(session, record)


@router.post("/{timer_id}/resume", response_model=TimerResponse)
async def resume_timer(timer_id: str, session: TimerSession = Depends(get_timer_session)):
    try:
        record = await session.resume(timer_id)
    except NotFound as e:
        raise _not_found(e)
    return _timer_response(session, record)


@router.post("/{timer_id}/stop", response_model=CompletionResponse)
async def stop_timer(timer_id: str, session: TimerSession = Depends(get_timer_session)):
    """Stop a timer and record it as a completed activity"""
    try:
        snapshot = await session.stop(timer_id)
    except NotFound as e:
        raise _not_found(e)
    return CompletionResponse(
        activity=snapshot,
        duration_display=format_duration(snapshot.duration_ms),
        warnings=session.drain_sync_errors(),
    )


@router.delete("/{timer_id}", response_model=CancelResponse)
async def cancel_timer(timer_id: str, session: TimerSession = Depends(get_timer_session)):
    """Discard a timer without recording an activity"""
    try:
        await session.cancel(timer_id)
    except NotFound as e:
        raise _not_found(e)
    return CancelResponse(success=True, message="Timer cancelled", warnings=session.drain_sync_errors())


@router.put("/{timer_id}/project", response_model=TimerResponse)
async def reassign_project(
    timer_id: str,
    request: ReassignProjectRequest,
    session: TimerSession = Depends(get_timer_session),
):
    try:
        record = await session.reassign_project(timer_id, request.project_id)
    except NotFound as e:
        raise _not_found(e)
    return _timer_response(session, record)


@router.post("/{timer_id}/tags/{tag_id}", response_model=TimerResponse)
async def toggle_tag(timer_id: str, tag_id: str, session: TimerSession = Depends(get_timer_session)):
    """Add the tag to the timer, or remove it if already present"""
    try:
        record = await session.toggle_tag(timer_id, tag_id)
    except NotFound as e:
        raise _not_found(e)
    return _timer_response(session, record)
