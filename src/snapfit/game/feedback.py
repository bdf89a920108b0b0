"""
Frame-driven deferred callbacks and self-clearing feedback values.

Everything runs on the caller's tick: ``FrameScheduler.advance(dt)`` fires the
callbacks whose delay has elapsed. No threads are involved.
"""

from typing import Any, Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")


class TimerHandle:
    """Cancellation token of a scheduled callback."""

    def __init__(self, due: float, callback: Callable[[], Any], seq: int):
        self.due = due
        self.callback = callback
        self.seq = seq
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True


class FrameScheduler:
    """Clock advanced by the per-frame update tick."""

    def __init__(self, start_time: float = 0.0):
        self.now: float = start_time
        self._timers: List[TimerHandle] = []
        self._seq = 0

    def schedule(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        """Run ``callback`` once ``delay`` seconds of ticks have elapsed."""
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self._seq += 1
        handle = TimerHandle(self.now + delay, callback, self._seq)
        self._timers.append(handle)
        return handle

    def advance(self, dt: float) -> int:
        """
        Move the clock forward and fire due callbacks in due-time order.

        Returns:
            Number of callbacks fired
        """
        if dt < 0:
            raise ValueError("dt must be non-negative")
        self.now += dt
        due = sorted((h for h in self._timers if h.active and h.due <= self.now),
                     key=lambda h: (h.due, h.seq))
        for handle in due:
            # an earlier callback may have cancelled this one
            if not handle.active:
                continue
            handle.fired = True
            handle.callback()
        self._timers = [h for h in self._timers if h.active]
        return len([h for h in due if h.fired])

    def cancel_all(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers = []

    @property
    def pending(self) -> int:
        return len([h for h in self._timers if h.active])


class TimedSlot(Generic[T]):
    """
    Holds a value that auto-clears ``duration`` seconds after it was set.

    Setting a new value supersedes the previous one and its pending clear.
    """

    def __init__(self, scheduler: FrameScheduler, duration: float,
                 on_clear: Optional[Callable[[T], Any]] = None):
        self.scheduler = scheduler
        self.duration = duration
        self.on_clear = on_clear
        self._value: Optional[T] = None
        self._handle: Optional[TimerHandle] = None

    @property
    def value(self) -> Optional[T]:
        return self._value

    def set(self, value: T) -> TimerHandle:
        if self._handle is not None:
            self._handle.cancel()
        self._value = value
        handle = self.scheduler.schedule(self.duration, lambda: self._expire(handle))
        self._handle = handle
        return handle

    def _expire(self, handle: TimerHandle) -> None:
        if handle is not self._handle:
            return
        self.clear()

    def clear(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        value, self._value = self._value, None
        if value is not None and self.on_clear is not None:
            self.on_clear(value)
