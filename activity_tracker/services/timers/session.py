"""Timer Session - per-user composition of manager, storage sync and change feed"""
import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, Iterable, List, Optional

from activity_tracker import config
from activity_tracker.infra.supabase.realtime import ChangeFeed
from activity_tracker.models.activity import CompletionSnapshot

from .completion import CompletionSink
from .errors import StorageUnavailable
from .manager import TimerManager
from .record import TimerRecord
from .scheduler import PeriodicTask
from .sync_adapter import RemoteSyncAdapter

logger = logging.getLogger(__name__)

MAX_SYNC_ERRORS = 50


class TimerSession:
    """
    Outward interface of the timer core for one user.

    Commands mutate the in-memory set first and then mirror the change to
    storage. Storage failures are collected for the caller to show and never
    undo the local change.

    Usage:
        async with TimerSession(user_id, manager, adapter, feed, sink) as session:
            timer = await session.start_new("Write report")
            await session.pause(timer.id)
    """

    def __init__(
        self,
        user_id: str,
        manager: Optional[TimerManager] = None,
        adapter: Optional[RemoteSyncAdapter] = None,
        feed: Optional[ChangeFeed] = None,
        sink: Optional[CompletionSink] = None,
        tick_interval: Optional[float] = None,
        sync_interval: Optional[float] = None,
    ):
        self.user_id = user_id
        self.manager = manager or TimerManager()
        self._adapter = adapter
        self._feed = feed
        self._sink = sink
        self._sync_errors: Deque[str] = deque(maxlen=MAX_SYNC_ERRORS)
        self._feed_task: Optional[asyncio.Task] = None
        self._started = False

        if adapter is not None:
            adapter.set_error_reporter(self.report_error)

        if tick_interval is None:
            tick_interval = config.TIMER_TICK_INTERVAL_MS / 1000
        if sync_interval is None:
            sync_interval = config.TIMER_SYNC_INTERVAL_SECONDS

        self._ticker = PeriodicTask(f"timer-tick:{user_id}", tick_interval, self.manager.tick)
        self._sync_loop = PeriodicTask(f"timer-sync:{user_id}", sync_interval, self.sync)

    @property
    def started(self) -> bool:
        return self._started

    def report_error(self, error: StorageUnavailable) -> None:
        self._sync_errors.append(str(error))

    def drain_sync_errors(self) -> List[str]:
        """Return and clear the storage failures collected since the last call"""
        errors = list(self._sync_errors)
        self._sync_errors.clear()
        return errors

    # Lifecycle

    async def start(self) -> None:
        if self._started:
            return
        self._started = True

        try:
            # Subscribe before reading so rows inserted during the load are queued
            feed_open = await self._open_feed()

            if self._adapter is not None:
                try:
                    for record in await self._adapter.load():
                        self.manager.timer_set.add(record)
                except StorageUnavailable as e:
                    logger.error(f"Could not restore active timers for user {self.user_id}: {e}")
                    self.report_error(e)

            self.manager.tick()
            self._ticker.start()

            if self._adapter is not None:
                self._sync_loop.start()

            if feed_open:
                self._feed_task = asyncio.create_task(
                    self._adapter.consume(self._feed, self.manager.timer_set),
                    name=f"timer-feed:{self.user_id}",
                )
        except BaseException:
            await self.close()
            raise

        logger.info(f"Timer session started for user {self.user_id} with {len(self.manager.timer_set)} timers")

    async def _open_feed(self) -> bool:
        if self._feed is None or self._adapter is None:
            return False
        try:
            await self._feed.open()
        except Exception as e:
            # The session still works without remote updates
            error = StorageUnavailable("subscribe", e)
            logger.error(f"{error} (user {self.user_id})")
            self.report_error(error)
            return False
        return True

    async def close(self) -> None:
        """Stop the tick loop, the sync loop and the feed. Safe to call repeatedly."""
        try:
            await self._ticker.stop()
            await self._sync_loop.stop()
        finally:
            try:
                if self._feed is not None:
                    await self._feed.close()
            except Exception as e:
                logger.error(f"Failed to close change feed for user {self.user_id}: {e}")
            finally:
                if self._feed_task is not None:
                    self._feed_task.cancel()
                    try:
                        await self._feed_task
                    except asyncio.CancelledError:
                        pass
                    self._feed_task = None
                if self._started:
                    logger.info(f"Timer session closed for user {self.user_id}")
                self._started = False

    async def __aenter__(self) -> "TimerSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def sync(self) -> bool:
        """Push elapsed times and retry failed writes"""
        if self._adapter is None:
            return True
        return await self._adapter.push(self.manager.timer_set)

    async def _mirror(self, write: Optional[Callable[[RemoteSyncAdapter], Awaitable[bool]]]) -> None:
        if self._adapter is not None and write is not None:
            await write(self._adapter)

    # Commands

    def timers(self) -> List[TimerRecord]:
        return self.manager.timers()

    async def start_new(
        self,
        name: str,
        project_id: Optional[str] = None,
        tag_ids: Iterable[str] = (),
    ) -> TimerRecord:
        timer_id = self.manager.start_new(name, project_id=project_id, tag_ids=tag_ids)
        record = self.manager.get(timer_id)
        await self._mirror(lambda adapter: adapter.mirror_start(record))
        return record

    async def pause(self, timer_id: str) -> TimerRecord:
        was_running = self.manager.get(timer_id).running
        record = self.manager.pause(timer_id)
        if was_running:
            await self._mirror(lambda adapter: adapter.mirror_state(record))
        return record

    async def resume(self, timer_id: str) -> TimerRecord:
        was_running = self.manager.get(timer_id).running
        record = self.manager.resume(timer_id)
        if not was_running:
            await self._mirror(lambda adapter: adapter.mirror_state(record))
        return record

    async def stop(self, timer_id: str) -> CompletionSnapshot:
        snapshot = self.manager.stop(timer_id)
        await self._mirror(lambda adapter: adapter.mirror_removal(timer_id))

        if self._sink is not None:
            try:
                await self._sink.on_completion(snapshot)
            except Exception as e:
                error = StorageUnavailable("complete", e)
                logger.error(f"{error} (timer {timer_id})")
                self.report_error(error)
        return snapshot

    async def cancel(self, timer_id: str) -> TimerRecord:
        record = self.manager.cancel(timer_id)
        await self._mirror(lambda adapter: adapter.mirror_removal(timer_id))
        return record

    async def reassign_project(self, timer_id: str, project_id: Optional[str]) -> TimerRecord:
        record = self.manager.reassign_project(timer_id, project_id)
        await self._mirror(lambda adapter: adapter.mirror_state(record))
        return record

    async def toggle_tag(self, timer_id: str, tag_id: str) -> TimerRecord:
        added = self.manager.toggle_tag(timer_id, tag_id)
        record = self.manager.get(timer_id)
        await self._mirror(lambda adapter: adapter.mirror_tag(record, tag_id, added))
        return record


SessionFactory = Callable[[str], Awaitable[TimerSession]]


class SessionRegistry:
    """
    One started TimerSession per user.

    Sessions unused for ``idle_timeout`` seconds are pushed one last time and
    closed by ``evict_idle``; the next request for that user reloads the
    timers from storage.
    """

    def __init__(
        self,
        factory: SessionFactory,
        idle_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: Dict[str, TimerSession] = {}
        self._last_used: Dict[str, float] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._reaper: Optional[PeriodicTask] = None
        if idle_timeout is not None:
            self._reaper = PeriodicTask("timer-session-reaper", max(1.0, idle_timeout / 10), self.evict_idle)

    def __len__(self) -> int:
        return len(self._sessions)

    def start(self) -> None:
        if self._reaper is not None:
            self._reaper.start()

    async def get(self, user_id: str) -> TimerSession:
        self._last_used[user_id] = self._clock()
        session = self._sessions.get(user_id)
        if session is not None:
            return session

        # Per-user lock: a slow load for one user does not block the others
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = await self._factory(user_id)
                await session.start()
                self._sessions[user_id] = session
        return session

    async def evict_idle(self) -> int:
        """Close sessions idle for longer than the timeout. Returns how many were closed."""
        if self._idle_timeout is None:
            return 0

        now = self._clock()
        idle = [
            user_id for user_id in list(self._sessions)
            if now - self._last_used.get(user_id, now) > self._idle_timeout
        ]
        for user_id in idle:
            session = self._sessions.pop(user_id)
            self._last_used.pop(user_id, None)
            self._locks.pop(user_id, None)
            await self._close(session, push=True)

        if idle:
            logger.info(f"Evicted {len(idle)} idle timer sessions")
        return len(idle)

    async def _close(self, session: TimerSession, push: bool = False) -> None:
        try:
            if push:
                await session.sync()
        except Exception as e:
            logger.error(f"Final sync failed for user {session.user_id}: {e}")
        finally:
            try:
                await session.close()
            except Exception as e:
                logger.error(f"Failed to close timer session for user {session.user_id}: {e}")

    async def close_all(self) -> None:
        if self._reaper is not None:
            await self._reaper.stop()

        sessions = list(self._sessions.values())
        self._sessions.clear()
        self._last_used.clear()
        self._locks.clear()
        for session in sessions:
            await self._close(session)
