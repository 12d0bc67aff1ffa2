"""Gesture descriptions and the single-shot completion future.

Gesture dispatch has two distinct events: the platform accepting the
gesture, and the gesture later completing or being cancelled. The
dispatcher reports the first synchronously and the second through a
``GestureResultCallback``, possibly from another thread.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

MIN_TAP_DURATION_MS = 40
MAX_TAP_DURATION_MS = 1000


def clamp_tap_duration(duration_ms: int) -> int:
    return min(max(int(duration_ms), MIN_TAP_DURATION_MS), MAX_TAP_DURATION_MS)


@dataclass(frozen=True)
class TapGesture:
    x: float
    y: float
    duration_ms: int


class GestureResultCallback(Protocol):
    def on_completed(self) -> None:
        ...

    def on_cancelled(self) -> None:
        ...


class GestureFuture:
    """Resolves exactly once: True on completion, False on cancel or rejection.

    Callbacks may arrive on any thread; the result is handed to the event
    loop with ``call_soon_threadsafe``. Anything arriving after the first
    resolution, or after the waiter gave up, is ignored.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[bool] = self._loop.create_future()

    def _set(self, value: bool) -> None:
        if self._future.done():
            logger.debug("Ignoring late gesture result %s", value)
            return
        self._future.set_result(value)

    def _resolve(self, value: bool) -> None:
        if self._loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._set(value)
        else:
            self._loop.call_soon_threadsafe(self._set, value)

    def on_completed(self) -> None:
        self._resolve(True)

    def on_cancelled(self) -> None:
        self._resolve(False)

    def reject(self) -> None:
        """Dispatch was refused outright; resolve False immediately."""
        self._resolve(False)

    def cancel(self) -> None:
        self._future.cancel()

    def done(self) -> bool:
        return self._future.done()

    async def wait(self) -> bool:
        try:
            return await self._future
        except asyncio.CancelledError:
            self._future.cancel()
            raise
