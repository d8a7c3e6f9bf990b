"""Tests for the Supabase repositories against a mocked query builder."""

from unittest.mock import MagicMock

import pytest

from activity_tracker.infra.supabase.repositories import (
    ActiveTimerRepository,
    ActiveTimerTagRepository,
    ActivityRepository,
    ActivityTagRepository,
    RepositoryFactory,
    TagRepository,
)
from activity_tracker.models.active_timer import ActiveTimerCreate, ActiveTimerUpdate
from activity_tracker.models.activity import ActivityCreate

from .conftest import T0

CHAIN_METHODS = ("select", "eq", "order", "limit", "insert", "update", "upsert", "delete")


def _client(*results):
    """A client whose query builder returns ``results`` from successive execute() calls"""
    query = MagicMock()
    for name in CHAIN_METHODS:
        getattr(query, name).return_value = query
    query.execute.side_effect = [MagicMock(data=data) for data in results]

    client = MagicMock()
    client.table.return_value = query
    return client, query


def _timer_row(**overrides) -> dict:
    row = {
        "id": "timer-1",
        "user_id": "user-1",
        "description": "Write report",
        "project_id": None,
        "start_time": T0.isoformat(),
        "elapsed_time": 1_000,
        "is_running": True,
        "paused_time": 0,
    }
    row.update(overrides)
    return row


class TestActiveTimerRepository:

    @pytest.mark.asyncio
    async def test_find_by_user_flattens_tag_links(self) -> None:
        client, query = _client([_timer_row(active_activity_tags=[{"tag_id": "t1"}, {"tag_id": "t2"}])])
        repo = ActiveTimerRepository(client)

        timers = await repo.find_by_user("user-1")

        client.table.assert_called_with("active_activities")
        query.select.assert_called_once_with("*, active_activity_tags(tag_id)")
        query.eq.assert_called_once_with("user_id", "user-1")
        assert timers[0].tag_ids == ["t1", "t2"]
        assert timers[0].start_time == T0

    @pytest.mark.asyncio
    async def test_create_sends_json_row(self) -> None:
        client, query = _client([_timer_row()])
        repo = ActiveTimerRepository(client)

        timer = await repo.create(ActiveTimerCreate(
            id="timer-1", user_id="user-1", description="Write report", start_time=T0, elapsed_time=1_000,
        ))

        sent = query.insert.call_args.args[0]
        assert sent["id"] == "timer-1"
        assert sent["start_time"].startswith("2025-10-29T09:00:00")
        assert timer.id == "timer-1"

    @pytest.mark.asyncio
    async def test_create_without_returned_row_raises(self) -> None:
        client, _ = _client([])
        repo = ActiveTimerRepository(client)

        with pytest.raises(ValueError):
            await repo.create(ActiveTimerCreate(id="x", user_id="u", description="A", start_time=T0))

    @pytest.mark.asyncio
    async def test_update_sends_only_set_fields(self) -> None:
        client, query = _client([_timer_row(is_running=False)])
        repo = ActiveTimerRepository(client)

        await repo.update("timer-1", ActiveTimerUpdate(is_running=False, elapsed_time=1_000))

        query.update.assert_called_once_with({"is_running": False, "elapsed_time": 1_000})
        query.eq.assert_called_once_with("id", "timer-1")

    @pytest.mark.asyncio
    async def test_update_elapsed(self) -> None:
        client, query = _client([_timer_row(elapsed_time=9_000)])
        repo = ActiveTimerRepository(client)

        assert await repo.update_elapsed("timer-1", 9_000) is True
        query.update.assert_called_once_with({"elapsed_time": 9_000})

    @pytest.mark.asyncio
    async def test_delete_reports_whether_a_row_was_removed(self) -> None:
        client, _ = _client([_timer_row()], [])
        repo = ActiveTimerRepository(client)

        assert await repo.delete("timer-1") is True
        assert await repo.delete("timer-1") is False


class TestActiveTimerTagRepository:

    @pytest.mark.asyncio
    async def test_add_upserts_on_pair(self) -> None:
        client, query = _client([{"id": "link-1", "active_activity_id": "timer-1", "tag_id": "t1"}])
        repo = ActiveTimerTagRepository(client)

        link = await repo.add("timer-1", "t1")

        query.upsert.assert_called_once_with(
            {"active_activity_id": "timer-1", "tag_id": "t1"}, on_conflict="active_activity_id,tag_id"
        )
        assert link.tag_id == "t1"

    @pytest.mark.asyncio
    async def test_replace_deletes_then_inserts(self) -> None:
        client, query = _client([], [])
        repo = ActiveTimerTagRepository(client)

        await repo.replace("timer-1", ["t1", "t2"])

        query.delete.assert_called_once()
        query.insert.assert_called_once_with([
            {"active_activity_id": "timer-1", "tag_id": "t1"},
            {"active_activity_id": "timer-1", "tag_id": "t2"},
        ])

    @pytest.mark.asyncio
    async def test_replace_with_no_tags_only_deletes(self) -> None:
        client, query = _client([])
        repo = ActiveTimerTagRepository(client)

        await repo.replace("timer-1", [])

        query.delete.assert_called_once()
        query.insert.assert_not_called()


class TestActivityRepositories:

    @pytest.mark.asyncio
    async def test_find_by_user_newest_first_with_tags(self) -> None:
        row = {
            "id": "act-1", "user_id": "user-1", "description": "Review", "duration": 60_000,
            "date": T0.isoformat(), "activity_tags": [{"tag_id": "t1"}],
        }
        client, query = _client([row])
        repo = ActivityRepository(client)

        activities = await repo.find_by_user("user-1")

        query.order.assert_called_once_with("date", desc=True)
        assert activities[0].tag_ids == ["t1"]
        assert activities[0].duration == 60_000

    @pytest.mark.asyncio
    async def test_create_activity(self) -> None:
        row = {"id": "act-1", "user_id": "user-1", "description": "Review", "duration": 5_000, "date": T0.isoformat()}
        client, query = _client([row])
        repo = ActivityRepository(client)

        activity = await repo.create(ActivityCreate(user_id="user-1", description="Review", duration=5_000, date=T0))

        assert query.insert.call_args.args[0]["duration"] == 5_000
        assert activity.id == "act-1"

    @pytest.mark.asyncio
    async def test_create_many_skips_empty_tag_list(self) -> None:
        client, query = _client()
        repo = ActivityTagRepository(client)

        assert await repo.create_many("act-1", []) == []
        query.insert.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_many_inserts_all_links(self) -> None:
        client, query = _client([
            {"id": "l1", "activity_id": "act-1", "tag_id": "t1"},
            {"id": "l2", "activity_id": "act-1", "tag_id": "t2"},
        ])
        repo = ActivityTagRepository(client)

        links = await repo.create_many("act-1", ["t1", "t2"])

        assert [link.tag_id for link in links] == ["t1", "t2"]


class TestRepositoryFactory:

    def test_repositories_are_cached(self) -> None:
        factory = RepositoryFactory(MagicMock())

        assert factory.active_timers is factory.active_timers
        assert isinstance(factory.tags, TagRepository)
        assert factory.activities is not factory.activity_tags
