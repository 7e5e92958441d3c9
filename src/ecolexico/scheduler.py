import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional


class Handle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        pass


class Scheduler(ABC):
    """Runs a callback after a delay; the returned handle cancels it."""

    @abstractmethod
    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> Handle:
        pass


class _DoneHandle(Handle):
    def cancel(self) -> None:
        pass


class ImmediateScheduler(Scheduler):
    """Ignores the delay. Suited to scripts and synchronous callers."""

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> Handle:
        callback()
        return _DoneHandle()


class _TimerHandle(Handle):
    def __init__(self, timer: asyncio.TimerHandle):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class AsyncioScheduler(Scheduler):
    """Schedules on the event loop that is running when ``schedule`` is called."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> Handle:
        loop = self._loop or asyncio.get_running_loop()
        return _TimerHandle(loop.call_later(delay_seconds, callback))
