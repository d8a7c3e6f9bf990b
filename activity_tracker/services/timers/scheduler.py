"""Shared periodic loops (display tick, storage sync)"""
import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[None]]]


class PeriodicTask:
    """Runs a callback every ``interval`` seconds on the current event loop.

    One instance drives all timers at once; stopping it is the only teardown
    needed. Errors raised by the callback are logged and the loop continues.
    """

    def __init__(self, name: str, interval: float, callback: Callback):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._name = name
        self._interval = interval
        self._callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                result = self._callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.exception(f"Error in periodic task '{self._name}': {e}")

    def start(self) -> None:
        if self.is_running:
            logger.warning(f"Periodic task '{self._name}' is already running")
            return
        self._task = asyncio.create_task(self._run_loop(), name=self._name)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
