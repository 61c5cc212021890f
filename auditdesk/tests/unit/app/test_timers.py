import asyncio

from auditdesk.app.timers import AsyncioTimerSource, ManualTimerSource, TimerScheduler


class FakeAfterRoot:
    """Tk-like ``after`` surface recording scheduled callbacks."""

    def __init__(self):
        self.calls = {}
        self.cancelled = []
        self._next = 0

    def after(self, delay_ms, callback):
        self._next += 1
        token = f"after#{self._next}"
        self.calls[token] = (delay_ms, callback)
        return token

    def after_cancel(self, token):
        if token not in self.calls:
            raise ValueError(token)
        self.cancelled.append(token)
        del self.calls[token]


def test_schedule_replaces_pending_timer_on_same_channel():
    root = FakeAfterRoot()
    scheduler = TimerScheduler(root.after, root.after_cancel)

    first = scheduler.schedule("devices.query", 300, lambda: None)
    second = scheduler.schedule("devices.query", 300, lambda: None)

    assert root.cancelled == [first.token]
    assert scheduler.handle_for("devices.query") is second
    assert list(root.calls) == [second.token]


def test_fired_timer_clears_handle_and_runs_callback():
    root = FakeAfterRoot()
    scheduler = TimerScheduler(root.after, root.after_cancel)
    fired = []

    handle = scheduler.schedule("reports.query", 0, lambda: fired.append(True))
    delay, callback = root.calls.pop(handle.token)
    callback()

    assert delay == 1
    assert fired == [True]
    assert not scheduler.is_pending("reports.query")


def test_cancel_ignores_tokens_the_source_already_dropped():
    root = FakeAfterRoot()
    scheduler = TimerScheduler(root.after, root.after_cancel)
    handle = scheduler.schedule("security.query", 10, lambda: None)
    root.calls.pop(handle.token)

    scheduler.cancel("security.query")
    scheduler.cancel("never-scheduled")

    assert not scheduler.is_pending("security.query")


def test_cancel_all_clears_every_channel():
    clock = ManualTimerSource()
    scheduler = TimerScheduler.from_source(clock)
    fired = []
    scheduler.schedule("a", 10, lambda: fired.append("a"))
    scheduler.schedule("b", 20, lambda: fired.append("b"))

    scheduler.cancel_all()
    clock.advance(100)

    assert fired == []
    assert clock.pending() == 0


def test_manual_source_fires_in_due_then_arm_order():
    clock = ManualTimerSource()
    fired = []
    clock.schedule(20, lambda: fired.append(("late", clock.now_ms)))
    clock.schedule(10, lambda: fired.append(("first", clock.now_ms)))
    clock.schedule(10, lambda: fired.append(("second", clock.now_ms)))

    clock.advance(15)
    assert fired == [("first", 10), ("second", 10)]
    assert clock.now_ms == 15

    clock.advance_to(20)
    assert fired[-1] == ("late", 20)


def test_manual_source_fires_timers_armed_during_advance():
    clock = ManualTimerSource()
    fired = []

    def chain():
        fired.append(clock.now_ms)
        if len(fired) < 3:
            clock.schedule(5, chain)

    clock.schedule(5, chain)
    clock.advance(100)

    assert fired == [5, 10, 15]


def test_asyncio_source_runs_and_cancels_on_loop():
    async def scenario():
        source = AsyncioTimerSource()
        scheduler = TimerScheduler.from_source(source)
        fired = []
        scheduler.schedule("keep", 1, lambda: fired.append("keep"))
        scheduler.schedule("drop", 1, lambda: fired.append("drop"))
        scheduler.cancel("drop")
        await asyncio.sleep(0.05)
        return fired, source.pending()

    fired, pending = asyncio.run(scenario())

    assert fired == ["keep"]
    assert pending == 0
