"""Tests for the change feed channel and its Supabase realtime binding."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from activity_tracker.infra.supabase.realtime import ChangeFeed, SupabaseChangeFeed
from activity_tracker.models.feed import FeedEvent, FeedEventKind


async def _collect(feed: ChangeFeed) -> list:
    return [event async for event in feed.events()]


class TestChangeFeed:

    @pytest.mark.asyncio
    async def test_events_delivered_in_order_until_close(self) -> None:
        feed = ChangeFeed()
        feed.publish(FeedEvent(kind=FeedEventKind.INSERT, row={"id": "a"}))
        feed.publish(FeedEvent(kind=FeedEventKind.DELETE, row={"id": "a"}))
        await feed.close()

        events = await asyncio.wait_for(_collect(feed), timeout=1)

        assert [event.kind for event in events] == [FeedEventKind.INSERT, FeedEventKind.DELETE]

    @pytest.mark.asyncio
    async def test_publish_after_close_is_dropped(self) -> None:
        feed = ChangeFeed()
        await feed.close()
        await feed.close()
        feed.publish(FeedEvent(kind=FeedEventKind.INSERT, row={"id": "late"}))

        assert feed.closed is True
        assert await asyncio.wait_for(_collect(feed), timeout=1) == []


def _client() -> MagicMock:
    channel = MagicMock()
    channel.subscribe = AsyncMock()
    client = MagicMock()
    client.channel.return_value = channel
    client.remove_channel = AsyncMock()
    return client


class TestSupabaseChangeFeed:

    @pytest.mark.asyncio
    async def test_open_subscribes_to_user_changes(self) -> None:
        client = _client()
        feed = SupabaseChangeFeed(client, "user-1")

        await feed.open()

        client.channel.assert_called_once_with("active_activities:user-1")
        channel = client.channel.return_value
        calls = channel.on_postgres_changes.call_args_list
        assert [call.args[0] for call in calls] == ["INSERT", "UPDATE", "DELETE"]
        assert calls[0].kwargs["filter"] == "user_id=eq.user-1"
        assert "filter" not in calls[2].kwargs
        channel.subscribe.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_payloads_become_events(self) -> None:
        client = _client()
        feed = SupabaseChangeFeed(client, "user-1")
        await feed.open()
        callback = client.channel.return_value.on_postgres_changes.call_args.kwargs["callback"]

        callback({"data": {"type": "DELETE", "old_record": {"id": "timer-1"}}})
        callback({"data": {"type": "TRUNCATE"}})
        await feed.close()

        events = await asyncio.wait_for(_collect(feed), timeout=1)
        assert [(event.kind, event.row_id) for event in events] == [(FeedEventKind.DELETE, "timer-1")]

    @pytest.mark.asyncio
    async def test_close_removes_channel(self) -> None:
        client = _client()
        feed = SupabaseChangeFeed(client, "user-1")
        await feed.open()

        await feed.close()
        await feed.close()

        client.remove_channel.assert_awaited_once_with(client.channel.return_value)
        assert feed.closed is True

    @pytest.mark.asyncio
    async def test_close_finishes_feed_even_if_unsubscribe_fails(self) -> None:
        client = _client()
        client.remove_channel.side_effect = ConnectionError("gone")
        feed = SupabaseChangeFeed(client, "user-1")
        await feed.open()

        with pytest.raises(ConnectionError):
            await feed.close()

        assert feed.closed is True
