"""Change feed for the active timer table.

A ``ChangeFeed`` is a typed inbound channel of ``FeedEvent`` objects. The
Supabase implementation subscribes to realtime ``postgres_changes`` and
publishes every payload into the channel; consumers only ever see the queue,
so reconciliation can be exercised without a live websocket.
"""
import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional

from pydantic import ValidationError
from supabase import AsyncClient  # type: ignore

from activity_tracker.models.feed import FeedEvent

logger = logging.getLogger(__name__)

_CLOSED = object()


class ChangeFeed:
    """In-process channel of change events"""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        """Start receiving events. Plain channels have nothing to connect."""

    def publish(self, event: FeedEvent) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    async def events(self) -> AsyncIterator[FeedEvent]:
        """Yield events in delivery order until the feed is closed"""
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)


class SupabaseChangeFeed(ChangeFeed):
    """Change feed backed by a Supabase realtime channel for one user"""

    def __init__(
        self,
        client: AsyncClient,
        user_id: str,
        table: str = "active_activities",
        schema: str = "public",
    ):
        super().__init__()
        self._client = client
        self._user_id = user_id
        self._table = table
        self._schema = schema
        self._channel: Optional[Any] = None

    async def open(self) -> None:
        channel = self._client.channel(f"{self._table}:{self._user_id}")
        user_filter = f"user_id=eq.{self._user_id}"

        channel.on_postgres_changes(
            "INSERT", schema=self._schema, table=self._table, filter=user_filter, callback=self._handle
        )
        channel.on_postgres_changes(
            "UPDATE", schema=self._schema, table=self._table, filter=user_filter, callback=self._handle
        )
        # Realtime cannot filter deletes; unknown ids are no-ops downstream
        channel.on_postgres_changes(
            "DELETE", schema=self._schema, table=self._table, callback=self._handle
        )

        await channel.subscribe()
        self._channel = channel
        logger.info(f"Subscribed to {self._schema}.{self._table} changes for user {self._user_id}")

    def _handle(self, payload: Dict[str, Any]) -> None:
        try:
            event = FeedEvent.from_realtime_payload(payload)
        except (ValueError, ValidationError) as e:
            logger.warning(f"Ignoring malformed realtime payload: {e}")
            return
        self.publish(event)

    async def close(self) -> None:
        try:
            if self._channel is not None:
                await self._client.remove_channel(self._channel)
                logger.info(f"Unsubscribed from {self._table} changes for user {self._user_id}")
        finally:
            self._channel = None
            await super().close()
