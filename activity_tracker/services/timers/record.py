"""Timer record - temporal state of one in-flight activity"""
import uuid
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from activity_tracker.models.active_timer import ActiveTimer, ActiveTimerCreate, ActiveTimerUpdate
from activity_tracker.models.activity import CompletionSnapshot
from activity_tracker.utils.datetime_helper import add_millis, ensure_utc, millis_between

from .errors import InvalidInput


def _new_id() -> str:
    return str(uuid.uuid4())


class TimerRecord(BaseModel):
    """
    One running or paused activity.

    Elapsed time is always derived from the original start instant minus all
    accumulated pauses, so resuming never resets the start. While paused the
    elapsed value is frozen at the moment of the pause.
    """
    id: str = Field(default_factory=_new_id)
    name: str
    start_instant: datetime
    accumulated_pause_ms: int = Field(0, ge=0)
    running: bool = True
    elapsed_ms: int = Field(0, ge=0)
    project_id: Optional[str] = None
    tag_ids: List[str] = Field(default_factory=list)

    @classmethod
    def create(
        cls,
        name: str,
        now: datetime,
        project_id: Optional[str] = None,
        tag_ids: Iterable[str] = (),
    ) -> "TimerRecord":
        """Create a running record. Raises InvalidInput for a blank name."""
        if not name or not name.strip():
            raise InvalidInput("Activity name must not be empty")

        return cls(
            name=name.strip(),
            start_instant=ensure_utc(now),
            project_id=project_id,
            tag_ids=list(dict.fromkeys(tag_ids)),
        )

    def elapsed_at(self, now: datetime) -> int:
        """Elapsed milliseconds at ``now``; the frozen value while paused"""
        if not self.running:
            return self.elapsed_ms
        return max(0, millis_between(self.start_instant, now) - self.accumulated_pause_ms)

    def refresh(self, now: datetime) -> int:
        self.elapsed_ms = self.elapsed_at(now)
        return self.elapsed_ms

    def pause(self, now: datetime) -> bool:
        """Freeze elapsed time. Returns False if already paused."""
        if not self.running:
            return False
        self.elapsed_ms = self.elapsed_at(now)
        self.running = False
        return True

    def resume(self, now: datetime) -> bool:
        """Fold the pause gap into the accumulated pause. Returns False if already running."""
        if self.running:
            return False
        gap = millis_between(self.start_instant, now) - self.accumulated_pause_ms - self.elapsed_ms
        self.accumulated_pause_ms += max(0, gap)
        self.running = True
        return True

    def reassign_project(self, project_id: Optional[str]) -> None:
        self.project_id = project_id

    def toggle_tag(self, tag_id: str) -> bool:
        """Add the tag if missing, remove it otherwise. Returns True when added."""
        if tag_id in self.tag_ids:
            self.tag_ids.remove(tag_id)
            return False
        self.tag_ids.append(tag_id)
        return True

    def finish(self, now: datetime) -> CompletionSnapshot:
        """Freeze the record and describe it as a completed activity.

        The end instant is derived from the frozen elapsed time, so a stop
        issued long after a pause does not count the pause.
        """
        self.pause(now)
        return CompletionSnapshot(
            timer_id=self.id,
            name=self.name,
            duration_ms=self.elapsed_ms,
            start_time=self.start_instant,
            end_time=add_millis(self.start_instant, self.elapsed_ms),
            project_id=self.project_id,
            tag_ids=list(self.tag_ids),
        )

    # Row conversion

    @classmethod
    def from_row(cls, row: ActiveTimer) -> "TimerRecord":
        return cls(
            id=row.id,
            name=row.description,
            start_instant=ensure_utc(row.start_time),
            accumulated_pause_ms=row.paused_time or 0,
            running=row.is_running,
            elapsed_ms=row.elapsed_time,
            project_id=row.project_id,
            tag_ids=list(row.tag_ids),
        )

    def to_create(self, user_id: str) -> ActiveTimerCreate:
        return ActiveTimerCreate(
            id=self.id,
            user_id=user_id,
            description=self.name,
            project_id=self.project_id,
            start_time=self.start_instant,
            elapsed_time=self.elapsed_ms,
            is_running=self.running,
            paused_time=self.accumulated_pause_ms,
        )

    def to_update(self) -> ActiveTimerUpdate:
        return ActiveTimerUpdate(
            project_id=self.project_id,
            elapsed_time=self.elapsed_ms,
            is_running=self.running,
            paused_time=self.accumulated_pause_ms,
        )
