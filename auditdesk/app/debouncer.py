"""Last-write-wins debouncing of rapidly changing input values.

Call context:
    ``ListVM.set_query`` feeds every keystroke into a :class:`Debouncer`; only
    the settled value reaches the view state and downstream fetchers.

Each change cancels the pending timer and arms a new one, so a burst of
changes arriving faster than the delay settles exactly once, with the last
value. A timer that fires after being superseded or after :meth:`close` is a
stale settlement and is discarded.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, Optional, TypeVar

from .timers import TimerScheduler

log = logging.getLogger(__name__)

T = TypeVar("T")
SettleCallback = Callable[[T], None]

_UNSET = object()


class Debouncer(Generic[T]):
    """Coalesce values into settlements after ``delay_ms`` of quiet."""

    def __init__(
        self,
        scheduler: TimerScheduler,
        delay_ms: int = 300,
        *,
        channel: str = "debounce",
        on_settle: Optional[SettleCallback] = None,
        initial: object = _UNSET,
    ) -> None:
        """Bind the debouncer to a timer channel.

        Args:
            scheduler: Shared timer scheduler (one pending timer per channel).
            delay_ms: Default quiet period; ``0`` settles synchronously.
            channel: Unique channel key on ``scheduler``.
            on_settle: Optional first subscriber.
            initial: Value treated as already observed, so re-observing it
                does not arm a timer.
        """
        if int(delay_ms) < 0:
            raise ValueError("delay_ms cannot be negative.")
        self._scheduler = scheduler
        self._delay_ms = int(delay_ms)
        self._channel = channel
        self._listeners: List[SettleCallback] = []
        self._latest: object = initial
        self._settled: object = initial
        self._pending = False
        self._generation = 0
        self._closed = False
        if on_settle is not None:
            self._listeners.append(on_settle)

    # ------------------------------------------------------------------
    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def latest(self) -> Optional[T]:
        """Most recently observed value (``None`` before the first one)."""
        return None if self._latest is _UNSET else self._latest  # type: ignore[return-value]

    @property
    def settled(self) -> Optional[T]:
        """Most recently settled value (``None`` before the first settlement)."""
        return None if self._settled is _UNSET else self._settled  # type: ignore[return-value]

    def subscribe(self, callback: SettleCallback) -> Callable[[], None]:
        """Register a settlement listener. Returns an unsubscribe() handle."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    def observe(self, value: T, delay_ms: Optional[int] = None) -> None:
        """Record a new input value and (re)arm the settlement timer."""
        if self._closed:
            log.debug("Debouncer %s closed; ignoring value", self._channel)
            return
        if self._latest is not _UNSET and self._latest == value:
            return
        self._latest = value
        delay = self._delay_ms if delay_ms is None else int(delay_ms)
        if delay < 0:
            raise ValueError("delay_ms cannot be negative.")

        self._generation += 1
        if delay == 0:
            self._scheduler.cancel(self._channel)
            self._pending = False
            self._settle(value)
            return

        generation = self._generation
        self._pending = True
        self._scheduler.schedule(self._channel, delay, lambda: self._on_timer(generation, value))

    def flush(self) -> bool:
        """Settle the pending value immediately. Returns False if none pending."""
        if not self._pending or self._closed:
            return False
        self._scheduler.cancel(self._channel)
        self._generation += 1
        self._pending = False
        self._settle(self._latest)  # type: ignore[arg-type]
        return True

    def cancel(self) -> None:
        """Drop the pending value without settling it."""
        if self._pending:
            self._scheduler.cancel(self._channel)
        self._generation += 1
        self._pending = False
        # the dropped value must be observable again
        self._latest = self._settled

    def reset(self, value: T) -> None:
        """Cancel any pending value and treat ``value`` as observed and settled."""
        self.cancel()
        self._latest = value
        self._settled = value

    def close(self) -> None:
        """Tear down: cancel the pending timer and refuse further input."""
        if self._closed:
            return
        self.cancel()
        self._closed = True
        self._listeners.clear()

    # ------------------------------------------------------------------
    def _on_timer(self, generation: int, value: T) -> None:
        if self._closed or generation != self._generation:
            log.debug("Discarding stale settlement on %s", self._channel)
            return
        self._pending = False
        self._settle(value)

    def _settle(self, value: T) -> None:
        self._settled = value
        for listener in list(self._listeners):
            listener(value)


__all__ = ["Debouncer"]
