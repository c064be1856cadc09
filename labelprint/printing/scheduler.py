"""
Deferred-call scheduling for the batch print queue.

The queue never touches timers directly; it asks a Scheduler to run a
callback later and keeps the returned handle so it can cancel it. Tests
swap in a manual clock.
"""

import threading
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class ThreadingScheduler:
    """Runs each callback on its own daemon timer thread."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        return timer
