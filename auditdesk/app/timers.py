"""Cancellable timers for debounced view-model input.

The presenter layer passes Tk ``after`` and ``after_cancel`` callables (or the
methods of one of the timer sources below) into :class:`TimerScheduler` so
timer state is tracked in one place and cancelled safely when a feature view
unmounts or the app closes.

Timer sources:
    ``ManualTimerSource``  virtual clock advanced explicitly (tests, replays).
    ``AsyncioTimerSource`` binds timers to an asyncio event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Tuple

log = logging.getLogger(__name__)

ScheduleFn = Callable[[int, Callable[[], None]], str]
CancelFn = Callable[[str], None]


class TimerSource(Protocol):
    """Anything exposing ``after``-style schedule and cancel methods."""

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> str: ...
    def cancel(self, token: str) -> None: ...


@dataclass
class TimerHandle:
    """Timer token associated with a single channel.

    Attributes:
        channel: Channel key (for example ``devices.query``).
        token: Token returned by the underlying timer source.
    """
    channel: str
    token: Optional[str] = None


class TimerScheduler:
    """Manage one pending timer per channel on top of a UI timer source."""

    def __init__(self, schedule: ScheduleFn, cancel: CancelFn) -> None:
        """Store schedule/cancel functions and initialize handle registry.

        Args:
            schedule: Function compatible with ``after(delay_ms, callback)``.
            cancel: Function compatible with ``after_cancel(token)``.
        """
        self._schedule = schedule
        self._cancel = cancel
        self._handles: Dict[str, TimerHandle] = {}

    @classmethod
    def from_source(cls, source: TimerSource) -> "TimerScheduler":
        return cls(source.schedule, source.cancel)

    def schedule(self, channel: str, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Schedule or reschedule the timer for a channel.

        Args:
            channel: Timer channel key.
            delay_ms: Delay in milliseconds before callback execution.
            callback: Callback to execute once the delay has elapsed.
        """
        delay = max(1, int(delay_ms))
        self.cancel(channel)
        handle = TimerHandle(channel=channel)

        def _fire() -> None:
            if self._handles.get(channel) is handle:
                del self._handles[channel]
            callback()

        handle.token = self._schedule(delay, _fire)
        self._handles[channel] = handle
        return handle

    def cancel(self, channel: str) -> None:
        """Cancel a pending timer for a channel."""
        handle = self._handles.pop(channel, None)
        if not handle or handle.token is None:
            return
        try:
            self._cancel(handle.token)
        except (KeyError, ValueError) as exc:
            # Source already dropped the token (timer fired or source torn down).
            log.debug("Timer cancel for %s ignored: %s", channel, exc)

    def cancel_all(self) -> None:
        """Cancel all pending timers across all channels."""
        for channel in list(self._handles.keys()):
            self.cancel(channel)

    def handle_for(self, channel: str) -> Optional[TimerHandle]:
        """Return the current handle for a channel, if scheduled."""
        return self._handles.get(channel)

    def is_pending(self, channel: str) -> bool:
        return channel in self._handles


class ManualTimerSource:
    """Deterministic virtual clock; timers fire only inside :meth:`advance`."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._seq = itertools.count(1)
        self._queue: List[Tuple[int, int, str]] = []
        self._callbacks: Dict[str, Callable[[], None]] = {}

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> str:
        seq = next(self._seq)
        token = f"manual-{seq}"
        heapq.heappush(self._queue, (self.now_ms + max(0, int(delay_ms)), seq, token))
        self._callbacks[token] = callback
        return token

    def cancel(self, token: str) -> None:
        self._callbacks.pop(token, None)

    def advance(self, ms: int) -> None:
        """Move the clock forward, firing due timers in (due time, arm order)."""
        target = self.now_ms + max(0, int(ms))
        while self._queue and self._queue[0][0] <= target:
            due, _seq, token = heapq.heappop(self._queue)
            callback = self._callbacks.pop(token, None)
            if callback is None:
                continue
            self.now_ms = due
            callback()
        self.now_ms = target

    def advance_to(self, at_ms: int) -> None:
        self.advance(at_ms - self.now_ms)

    def pending(self) -> int:
        return len(self._callbacks)


class AsyncioTimerSource:
    """Timer source running callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._seq = itertools.count(1)
        self._handles: Dict[str, asyncio.TimerHandle] = {}

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> str:
        token = f"aio-{next(self._seq)}"

        def _run() -> None:
            self._handles.pop(token, None)
            callback()

        self._handles[token] = self._loop.call_later(max(0, int(delay_ms)) / 1000.0, _run)
        return token

    def cancel(self, token: str) -> None:
        handle = self._handles.pop(token, None)
        if handle is not None:
            handle.cancel()

    def pending(self) -> int:
        return len(self._handles)


__all__ = [
    "AsyncioTimerSource",
    "CancelFn",
    "ManualTimerSource",
    "ScheduleFn",
    "TimerHandle",
    "TimerScheduler",
    "TimerSource",
]
