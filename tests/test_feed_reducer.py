"""Tests for folding change feed events into a TimerSet."""

import pytest

from activity_tracker.models.feed import FeedEvent, FeedEventKind
from activity_tracker.services.timers import TimerRecord, TimerSet, apply_feed_event

from .conftest import T0, at


def _row(timer_id: str = "timer-1", **overrides) -> dict:
    row = {
        "id": timer_id,
        "user_id": "user-1",
        "description": "Remote task",
        "project_id": None,
        "start_time": T0.isoformat(),
        "elapsed_time": 0,
        "is_running": True,
        "paused_time": 0,
        "created_at": T0.isoformat(),
        "updated_at": T0.isoformat(),
    }
    row.update(overrides)
    return row


def _event(kind: FeedEventKind, row: dict) -> FeedEvent:
    return FeedEvent(kind=kind, row=row)


class TestInsert:

    def test_insert_adds_record(self) -> None:
        timer_set = apply_feed_event(TimerSet(), _event(FeedEventKind.INSERT, _row()))

        record = timer_set.get("timer-1")
        assert record.name == "Remote task"
        assert record.running is True
        assert record.start_instant == T0

    def test_duplicate_insert_is_ignored(self) -> None:
        timer_set = TimerSet()
        apply_feed_event(timer_set, _event(FeedEventKind.INSERT, _row(elapsed_time=1_000)))
        apply_feed_event(timer_set, _event(FeedEventKind.INSERT, _row(elapsed_time=9_999)))

        assert len(timer_set) == 1
        assert timer_set.get("timer-1").elapsed_ms == 1_000

    def test_insert_for_retired_id_does_not_resurrect(self) -> None:
        record = TimerRecord.create("Local", T0)
        timer_set = TimerSet([record])
        timer_set.remove(record.id)

        apply_feed_event(timer_set, _event(FeedEventKind.INSERT, _row(record.id)))

        assert record.id not in timer_set

    def test_invalid_insert_row_is_ignored(self) -> None:
        timer_set = apply_feed_event(TimerSet(), _event(FeedEventKind.INSERT, {"id": "x"}))
        assert len(timer_set) == 0


class TestUpdate:

    def test_update_pauses_local_record(self) -> None:
        record = TimerRecord(id="timer-1", name="A", start_instant=T0)
        timer_set = TimerSet([record])

        apply_feed_event(
            timer_set,
            _event(FeedEventKind.UPDATE, _row(elapsed_time=42_000, is_running=False, project_id="p9")),
        )

        assert record.running is False
        assert record.elapsed_ms == 42_000
        assert record.project_id == "p9"
        assert record.elapsed_at(at(100_000)) == 42_000

    def test_update_resumes_local_record(self) -> None:
        record = TimerRecord(id="timer-1", name="A", start_instant=T0, running=False, elapsed_ms=10_000)
        timer_set = TimerSet([record])

        apply_feed_event(
            timer_set,
            _event(FeedEventKind.UPDATE, _row(elapsed_time=10_000, is_running=True, paused_time=5_000)),
        )
        timer_set.tick(at(20_000))

        assert record.running is True
        assert record.accumulated_pause_ms == 5_000
        assert record.elapsed_ms == 15_000

    def test_stale_paused_time_does_not_decrease(self) -> None:
        record = TimerRecord(id="timer-1", name="A", start_instant=T0, accumulated_pause_ms=8_000)
        timer_set = TimerSet([record])

        apply_feed_event(timer_set, _event(FeedEventKind.UPDATE, _row(paused_time=3_000)))

        assert record.accumulated_pause_ms == 8_000

    def test_update_for_absent_id_leaves_set_unchanged(self) -> None:
        record = TimerRecord.create("Local", T0)
        timer_set = TimerSet([record])
        timer_set.remove(record.id)

        result = apply_feed_event(timer_set, _event(FeedEventKind.UPDATE, _row(record.id, is_running=False)))

        assert result is timer_set
        assert len(timer_set) == 0


class TestDelete:

    def test_delete_removes_local_record(self) -> None:
        record = TimerRecord(id="timer-1", name="A", start_instant=T0)
        timer_set = TimerSet([record])

        apply_feed_event(timer_set, _event(FeedEventKind.DELETE, {"id": "timer-1"}))

        assert "timer-1" not in timer_set
        assert timer_set.is_retired("timer-1")

    def test_delete_for_absent_id_is_noop(self) -> None:
        other = TimerRecord(id="timer-2", name="B", start_instant=T0)
        timer_set = TimerSet([other])

        apply_feed_event(timer_set, _event(FeedEventKind.DELETE, {"id": "timer-1"}))
        apply_feed_event(timer_set, _event(FeedEventKind.DELETE, {"id": "timer-1"}))

        assert [record.id for record in timer_set] == ["timer-2"]

    def test_deletes_for_unknown_ids_leave_no_tombstones(self) -> None:
        timer_set = TimerSet()

        for i in range(1_000):
            apply_feed_event(timer_set, _event(FeedEventKind.DELETE, {"id": f"other-user-{i}"}))

        assert len(timer_set) == 0
        assert not timer_set.is_retired("other-user-0")
        assert timer_set._retired == set()

    def test_event_without_id_is_ignored(self) -> None:
        timer_set = apply_feed_event(TimerSet(), _event(FeedEventKind.DELETE, {}))
        assert len(timer_set) == 0


class TestRealtimePayload:

    def test_parses_insert_payload(self) -> None:
        payload = {"data": {"type": "INSERT", "record": _row(), "old_record": None}, "ids": [1]}

        event = FeedEvent.from_realtime_payload(payload)

        assert event.kind == FeedEventKind.INSERT
        assert event.row_id == "timer-1"

    def test_parses_delete_payload_from_old_record(self) -> None:
        payload = {"data": {"type": "DELETE", "record": None, "old_record": {"id": "timer-7"}}}

        event = FeedEvent.from_realtime_payload(payload)

        assert event.kind == FeedEventKind.DELETE
        assert event.row == {"id": "timer-7"}

    def test_parses_flat_event_type_payload(self) -> None:
        payload = {"eventType": "UPDATE", "new": _row(is_running=False), "old": {}}

        event = FeedEvent.from_realtime_payload(payload)

        assert event.kind == FeedEventKind.UPDATE
        assert event.row["is_running"] is False

    def test_unknown_kind_raises(self) -> None:
        with pytest.raises(ValueError):
            FeedEvent.from_realtime_payload({"data": {"type": "TRUNCATE"}})
