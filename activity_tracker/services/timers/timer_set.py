"""Timer set - explicit state container for the active timers of one user"""
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .errors import NotFound
from .record import TimerRecord


class TimerSet:
    """
    Mapping from timer id to TimerRecord.

    Ids that left the set (stopped, cancelled or deleted remotely) are
    remembered as retired and can never be added again, so a re-delivered
    insert cannot resurrect a finished timer.
    """

    def __init__(self, records: Iterable[TimerRecord] = ()):
        self._records: Dict[str, TimerRecord] = {}
        self._retired: Set[str] = set()
        for record in records:
            self.add(record)

    def __contains__(self, timer_id: object) -> bool:
        return timer_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TimerRecord]:
        return iter(list(self._records.values()))

    def is_retired(self, timer_id: str) -> bool:
        return timer_id in self._retired

    def get(self, timer_id: str) -> TimerRecord:
        record = self._records.get(timer_id)
        if record is None:
            raise NotFound(timer_id)
        return record

    def find(self, timer_id: str) -> Optional[TimerRecord]:
        return self._records.get(timer_id)

    def add(self, record: TimerRecord) -> bool:
        """Insert a record. Returns False for a known or retired id."""
        if record.id in self._records or record.id in self._retired:
            return False
        self._records[record.id] = record
        return True

    def remove(self, timer_id: str) -> TimerRecord:
        """Remove and retire a record. Raises NotFound if absent."""
        record = self._records.pop(timer_id, None)
        if record is None:
            raise NotFound(timer_id)
        self._retired.add(timer_id)
        return record

    def discard(self, timer_id: str) -> Optional[TimerRecord]:
        """Remove and retire a record if present. Unknown ids are not retired."""
        record = self._records.pop(timer_id, None)
        if record is not None:
            self._retired.add(timer_id)
        return record

    def running(self) -> List[TimerRecord]:
        return [record for record in self._records.values() if record.running]

    def tick(self, now: datetime) -> None:
        """Recompute the displayed elapsed time of every running record"""
        for record in self._records.values():
            if record.running:
                record.refresh(now)
