"""Remote Sync Adapter - mirrors the in-memory timers to Supabase.

Local state is authoritative for the session. Every write happens after the
optimistic local change; a failed write is reported, never rolled back, and
the affected timer is retried by the next ``push``:

- a failed insert/update/tag change marks the timer dirty, and the next push
  upserts its full row and rewrites its tag associations;
- a failed delete is queued and re-issued by the next push.
"""
import logging
from typing import Awaitable, Callable, List, Optional, Set

from activity_tracker.infra.supabase.realtime import ChangeFeed
from activity_tracker.infra.supabase.repositories.active_timers import (
    ActiveTimerRepository,
    ActiveTimerTagRepository,
)
from activity_tracker.models.feed import FeedEventKind

from .errors import StorageUnavailable
from .feed_reducer import apply_feed_event
from .record import TimerRecord
from .timer_set import TimerSet

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[StorageUnavailable], None]


class RemoteSyncAdapter:
    """Bridges one user's TimerSet and the active_activities table"""

    def __init__(
        self,
        user_id: str,
        timers: ActiveTimerRepository,
        timer_tags: ActiveTimerTagRepository,
        on_error: Optional[ErrorReporter] = None,
    ):
        self.user_id = user_id
        self._timers = timers
        self._timer_tags = timer_tags
        self._on_error = on_error
        self._dirty: Set[str] = set()
        self._pending_removals: Set[str] = set()

    @property
    def dirty_ids(self) -> Set[str]:
        return set(self._dirty)

    @property
    def pending_removals(self) -> Set[str]:
        return set(self._pending_removals)

    def set_error_reporter(self, on_error: Optional[ErrorReporter]) -> None:
        self._on_error = on_error

    def _report(self, error: StorageUnavailable) -> None:
        if self._on_error is not None:
            self._on_error(error)

    async def _guard(self, operation: str, timer_id: str, action: Callable[[], Awaitable[object]]) -> bool:
        """Run a storage call, converting any failure into a reported StorageUnavailable"""
        try:
            await action()
            return True
        except Exception as e:
            error = StorageUnavailable(operation, e)
            logger.error(f"{error} (timer {timer_id})")
            self._report(error)
            return False

    async def _write_full(self, record: TimerRecord) -> None:
        await self._timers.upsert(record.to_create(self.user_id))
        await self._timer_tags.replace(record.id, record.tag_ids)

    # Startup

    async def load(self) -> List[TimerRecord]:
        """Rebuild the user's active timers from storage.

        Raises StorageUnavailable when the rows cannot be read.
        """
        try:
            rows = await self._timers.find_by_user(self.user_id)
        except Exception as e:
            raise StorageUnavailable("load", e) from e

        records = [TimerRecord.from_row(row) for row in rows]
        logger.info(f"Loaded {len(records)} active timers for user {self.user_id}")
        return records

    # Mirroring of local mutations

    async def mirror_start(self, record: TimerRecord) -> bool:
        async def write():
            await self._timers.create(record.to_create(self.user_id))
            if record.tag_ids:
                await self._timer_tags.replace(record.id, record.tag_ids)

        ok = await self._guard("insert", record.id, write)
        if not ok:
            self._dirty.add(record.id)
        return ok

    async def mirror_state(self, record: TimerRecord) -> bool:
        """Write running flag, elapsed, pause and project of a timer"""
        if record.id in self._dirty:
            return await self._retry_dirty(record)

        ok = await self._guard("update", record.id, lambda: self._timers.update(record.id, record.to_update()))
        if not ok:
            self._dirty.add(record.id)
        return ok

    async def mirror_tag(self, record: TimerRecord, tag_id: str, added: bool) -> bool:
        if record.id in self._dirty:
            return await self._retry_dirty(record)

        if added:
            ok = await self._guard("tag_add", record.id, lambda: self._timer_tags.add(record.id, tag_id))
        else:
            ok = await self._guard("tag_remove", record.id, lambda: self._timer_tags.remove(record.id, tag_id))
        if not ok:
            self._dirty.add(record.id)
        return ok

    async def mirror_removal(self, timer_id: str) -> bool:
        """Delete a stopped or cancelled timer row (tag rows cascade)"""
        self._dirty.discard(timer_id)
        ok = await self._guard("delete", timer_id, lambda: self._timers.delete(timer_id))
        if ok:
            self._pending_removals.discard(timer_id)
        else:
            self._pending_removals.add(timer_id)
        return ok

    async def _retry_dirty(self, record: TimerRecord) -> bool:
        ok = await self._guard("upsert", record.id, lambda: self._write_full(record))
        if ok:
            self._dirty.discard(record.id)
        return ok

    # Periodic push

    async def push(self, timer_set: TimerSet) -> bool:
        """Retry failed writes, then store the elapsed time of every running timer.

        Returns True when every write of this cycle succeeded.
        """
        ok = True

        for timer_id in sorted(self._pending_removals):
            ok = await self.mirror_removal(timer_id) and ok

        for timer_id in sorted(self._dirty):
            record = timer_set.find(timer_id)
            if record is None:
                self._dirty.discard(timer_id)
                continue
            ok = await self._retry_dirty(record) and ok

        for record in timer_set.running():
            if record.id in self._dirty:
                continue
            elapsed = record.elapsed_ms
            ok = await self._guard(
                "push_elapsed", record.id, lambda: self._timers.update_elapsed(record.id, elapsed)
            ) and ok

        return ok

    # Change feed

    async def consume(self, feed: ChangeFeed, timer_set: TimerSet) -> None:
        """Fold feed events into timer_set until the feed closes"""
        async for event in feed.events():
            try:
                if event.kind == FeedEventKind.DELETE and event.row_id is not None:
                    # Someone else already removed it
                    self._pending_removals.discard(event.row_id)
                apply_feed_event(timer_set, event)
            except Exception as e:
                logger.exception(f"Failed to apply {event.kind.value} event: {e}")
