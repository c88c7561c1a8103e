from __future__ import annotations

import asyncio
from typing import Callable, List
from unittest import IsolatedAsyncioTestCase, TestCase

from .timers import LoopScheduler, TimerSlot


class ManualClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class _ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by hand: ``advance`` moves the clock and fires what is due."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.handles: List[_ManualHandle] = []

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self.clock.now + delay_ms, callback)
        self.handles.append(handle)
        return handle

    def pending(self) -> List[_ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, ms: float) -> None:
        target = self.clock.now + ms
        while True:
            due = sorted((h for h in self.pending() if h.due <= target), key=lambda h: h.due)
            if not due:
                break
            handle = due[0]
            self.clock.now = handle.due
            handle.fired = True
            handle.callback()
        self.clock.now = target


class TimerSlotTests(TestCase):
    def setUp(self) -> None:
        self.clock = ManualClock()
        self.scheduler = ManualScheduler(self.clock)
        self.slot = TimerSlot(self.scheduler, self.clock)
        self.fired: List[str] = []

    def test_fires_after_delay(self):
        self.slot.arm("question", 1000, lambda: self.fired.append("a"))
        self.scheduler.advance(999)
        self.assertEqual(self.fired, [])
        self.scheduler.advance(1)
        self.assertEqual(self.fired, ["a"])
        self.assertFalse(self.slot.pending)

    def test_arm_replaces_previous_action(self):
        self.slot.arm("question", 1000, lambda: self.fired.append("first"))
        self.slot.arm("reveal", 2000, lambda: self.fired.append("second"))

        self.assertEqual(len(self.scheduler.pending()), 1)
        self.assertEqual(self.slot.kind, "reveal")
        self.scheduler.advance(5000)
        self.assertEqual(self.fired, ["second"])

    def test_cancel_prevents_firing(self):
        self.slot.arm("question", 1000, lambda: self.fired.append("a"))
        self.slot.cancel()
        self.scheduler.advance(5000)
        self.assertEqual(self.fired, [])
        self.assertIsNone(self.slot.kind)

    def test_stale_firing_is_dropped(self):
        # simulate a firing that was already queued when the slot was cancelled
        self.slot.arm("question", 1000, lambda: self.fired.append("a"))
        stale = self.scheduler.handles[0].callback
        self.slot.cancel()
        stale()
        self.assertEqual(self.fired, [])

    def test_remaining_time_tracks_clock(self):
        self.assertEqual(self.slot.remaining_ms(), 0.0)
        self.slot.arm("question", 10_000, lambda: None)
        self.scheduler.advance(4000)
        self.assertEqual(self.slot.remaining_ms(), 6000)

    def test_callback_can_rearm(self):
        def chain():
            self.fired.append("question")
            self.slot.arm("reveal", 500, lambda: self.fired.append("reveal"))

        self.slot.arm("question", 1000, chain)
        self.scheduler.advance(1500)
        self.assertEqual(self.fired, ["question", "reveal"])


class LoopSchedulerTests(IsolatedAsyncioTestCase):
    async def test_firings_go_through_dispatch(self):
        dispatched = []
        done = asyncio.Event()

        def dispatch(callback):
            dispatched.append(callback)
            done.set()

        scheduler = LoopScheduler(dispatch)
        marker = lambda: None
        scheduler.call_later(5, marker)

        await asyncio.wait_for(done.wait(), timeout=1)
        self.assertEqual(dispatched, [marker])

    async def test_cancelled_handle_never_dispatches(self):
        dispatched = []
        scheduler = LoopScheduler(dispatched.append)
        handle = scheduler.call_later(5, lambda: None)
        handle.cancel()
        await asyncio.sleep(0.05)
        self.assertEqual(dispatched, [])
