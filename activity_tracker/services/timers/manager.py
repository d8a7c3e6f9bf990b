"""Timer Manager - in-memory lifecycle of concurrently active timers"""
import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from activity_tracker.models.activity import CompletionSnapshot
from activity_tracker.utils.datetime_helper import utcnow

from .record import TimerRecord
from .timer_set import TimerSet

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TimerManager:
    """
    Owns the TimerSet and applies UI commands to it.

    Every method is synchronous and never touches storage; persistence is the
    caller's side effect (see TimerSession). Commands on an unknown id raise
    NotFound.
    """

    def __init__(self, timer_set: Optional[TimerSet] = None, clock: Clock = utcnow):
        self.timer_set = timer_set if timer_set is not None else TimerSet()
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def timers(self) -> List[TimerRecord]:
        return list(self.timer_set)

    def get(self, timer_id: str) -> TimerRecord:
        return self.timer_set.get(timer_id)

    def start_new(
        self,
        name: str,
        project_id: Optional[str] = None,
        tag_ids: Iterable[str] = (),
    ) -> str:
        """Start a new running timer and return its id"""
        record = TimerRecord.create(name, self.now(), project_id=project_id, tag_ids=tag_ids)
        self.timer_set.add(record)
        logger.info(f"Timer started: {record.id} ({record.name})")
        return record.id

    def pause(self, timer_id: str) -> TimerRecord:
        record = self.timer_set.get(timer_id)
        if record.pause(self.now()):
            logger.info(f"Timer paused: {timer_id} at {record.elapsed_ms}ms")
        return record

    def resume(self, timer_id: str) -> TimerRecord:
        record = self.timer_set.get(timer_id)
        if record.resume(self.now()):
            logger.info(f"Timer resumed: {timer_id}")
        return record

    def stop(self, timer_id: str) -> CompletionSnapshot:
        """Remove the timer and return its completion snapshot"""
        record = self.timer_set.get(timer_id)
        snapshot = record.finish(self.now())
        self.timer_set.remove(timer_id)
        logger.info(f"Timer stopped: {timer_id} after {snapshot.duration_ms}ms")
        return snapshot

    def cancel(self, timer_id: str) -> TimerRecord:
        """Remove the timer without producing an activity"""
        record = self.timer_set.remove(timer_id)
        logger.info(f"Timer cancelled: {timer_id}")
        return record

    def reassign_project(self, timer_id: str, project_id: Optional[str]) -> TimerRecord:
        record = self.timer_set.get(timer_id)
        record.reassign_project(project_id)
        return record

    def toggle_tag(self, timer_id: str, tag_id: str) -> bool:
        """Toggle a tag on a timer. Returns True when the tag was added."""
        return self.timer_set.get(timer_id).toggle_tag(tag_id)

    def tick(self, now: Optional[datetime] = None) -> None:
        self.timer_set.tick(now or self.now())
