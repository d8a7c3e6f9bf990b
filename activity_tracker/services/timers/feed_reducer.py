"""Folds change feed events into a TimerSet.

Delivery is at-least-once and unordered relative to local writes, so every
branch is idempotent: duplicate inserts, updates for timers that were already
stopped here and deletes that already happened locally all leave the set as
it is.
"""
import logging
from typing import Any, Dict

from pydantic import ValidationError

from activity_tracker.models.active_timer import ActiveTimer
from activity_tracker.models.feed import FeedEvent, FeedEventKind

from .record import TimerRecord
from .timer_set import TimerSet

logger = logging.getLogger(__name__)


def apply_feed_event(timer_set: TimerSet, event: FeedEvent) -> TimerSet:
    """Apply one change event and return the same set"""
    timer_id = event.row_id
    if timer_id is None:
        logger.warning(f"Ignoring {event.kind.value} event without an id")
        return timer_set

    if event.kind == FeedEventKind.INSERT:
        _apply_insert(timer_set, event.row)
    elif event.kind == FeedEventKind.UPDATE:
        _apply_update(timer_set, timer_id, event.row)
    elif event.kind == FeedEventKind.DELETE:
        if timer_set.discard(timer_id) is not None:
            logger.info(f"Timer {timer_id} removed by another session")

    return timer_set


def _apply_insert(timer_set: TimerSet, row: Dict[str, Any]) -> None:
    try:
        record = TimerRecord.from_row(ActiveTimer(**row))
    except ValidationError as e:
        logger.warning(f"Ignoring insert with an invalid row: {e}")
        return

    if timer_set.add(record):
        logger.info(f"Timer {record.id} ({record.name}) started by another session")


def _apply_update(timer_set: TimerSet, timer_id: str, row: Dict[str, Any]) -> None:
    record = timer_set.find(timer_id)
    if record is None:
        # Already stopped or cancelled here
        return

    if row.get("elapsed_time") is not None:
        record.elapsed_ms = max(0, int(row["elapsed_time"]))
    if row.get("paused_time") is not None:
        # Accumulated pause never decreases, even for stale updates
        record.accumulated_pause_ms = max(record.accumulated_pause_ms, int(row["paused_time"]))
    if row.get("is_running") is not None:
        record.running = bool(row["is_running"])
    if "project_id" in row:
        record.project_id = row["project_id"]
