"""Single-slot cancellable timer used for the question lifecycle."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Cancellable: ...


class LoopScheduler:
    """Schedules on the running asyncio loop.

    Firings are not run directly: they are handed to ``dispatch`` (the session
    actor's ``submit``) so they are serialized with every other command.
    """

    def __init__(self, dispatch: Callable[..., None]):
        self._dispatch = dispatch

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay_ms) / 1000, self._dispatch, callback)


class TimerSlot:
    """Owns at most one pending scheduled action.

    ``arm`` releases the previous action before scheduling the next one. Every
    arm gets a fresh generation number and a firing whose generation is no
    longer current does nothing, so a cancelled action cannot run even if its
    firing was already queued behind the cancel.
    """

    def __init__(self, scheduler: Scheduler, clock: Callable[[], float]):
        self._scheduler = scheduler
        self._clock = clock
        self._handle: Optional[Cancellable] = None
        self._generation = 0
        self._deadline: Optional[float] = None
        self.kind: Optional[str] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, kind: str, delay_ms: float, callback: Callable[[], None]) -> None:
        self.cancel()
        generation = self._generation

        def fire() -> None:
            if generation != self._generation:
                logger.debug("dropping stale %s timer", kind)
                return
            self._release()
            callback()

        self.kind = kind
        self._deadline = self._clock() + delay_ms
        self._handle = self._scheduler.call_later(delay_ms, fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._release()

    def remaining_ms(self) -> float:
        if self._deadline is None:
            return 0.0
        return max(0.0, self._deadline - self._clock())

    def _release(self) -> None:
        self._generation += 1
        self._handle = None
        self._deadline = None
        self.kind = None
