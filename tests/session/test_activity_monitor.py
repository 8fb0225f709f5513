from __future__ import annotations

import asyncio

import pytest

from timekeeping.core.enums import MonitorState
from timekeeping.core.exceptions import SessionMonitorError
from timekeeping.session.input_sources import EventHub
from timekeeping.session.monitor import ActivityMonitor
from timekeeping.session.terminator import SessionTerminator


class CountingTerminator:
    def __init__(self):
        self.calls = 0

    def terminate(self) -> None:
        self.calls += 1


class BrokenSource(EventHub):
    def subscribe(self, channel, handler):
        if channel == "scroll":
            raise OSError("no scroll hook")
        return super().subscribe(channel, handler)


def _monitor(hub, terminator, loop, timeout=5.0):
    return ActivityMonitor(hub, terminator, timeout_sec=timeout, loop=loop)


def test_start_registers_every_channel_and_arms(manual_loop):
    hub = EventHub()
    monitor = _monitor(hub, CountingTerminator(), manual_loop).start()

    assert monitor.state is MonitorState.ACTIVE
    assert monitor.armed
    assert monitor.deadline == 5.0
    assert hub.listener_count() == 5
    assert len(manual_loop.pending()) == 1


def test_silence_expires_exactly_once_at_deadline(manual_loop):
    hub = EventHub()
    terminator = CountingTerminator()
    monitor = _monitor(hub, terminator, manual_loop).start()

    manual_loop.advance_to(4.99)
    assert terminator.calls == 0

    manual_loop.advance_to(5)
    assert terminator.calls == 1
    assert monitor.state is MonitorState.EXPIRED
    assert not monitor.armed

    manual_loop.advance(60)
    assert terminator.calls == 1


def test_expiry_releases_listeners_and_ignores_late_events(manual_loop):
    hub = EventHub()
    terminator = CountingTerminator()
    _monitor(hub, terminator, manual_loop).start()

    manual_loop.advance(5)
    hub.emit("keypress")
    manual_loop.advance(10)

    assert hub.listener_count() == 0
    assert manual_loop.pending() == []
    assert terminator.calls == 1


def test_activity_every_two_seconds_rearms_until_silence(manual_loop):
    hub = EventHub()
    terminator = CountingTerminator()
    monitor = _monitor(hub, terminator, manual_loop).start()

    for t in (0, 2, 4, 6):
        manual_loop.advance_to(t)
        hub.emit("mousemove")

    manual_loop.advance_to(9)
    assert terminator.calls == 0
    assert monitor.deadline == 11

    manual_loop.advance_to(10.99)
    assert terminator.calls == 0
    manual_loop.advance_to(11)
    assert terminator.calls == 1


@pytest.mark.parametrize("channel", ["mousemove", "mousedown", "click", "scroll", "keypress"])
def test_any_channel_counts_as_activity(manual_loop, channel):
    hub = EventHub()
    terminator = CountingTerminator()
    _monitor(hub, terminator, manual_loop).start()

    manual_loop.advance(4)
    hub.emit(channel)
    manual_loop.advance(4)

    assert terminator.calls == 0


def test_event_storm_keeps_a_single_pending_timer(manual_loop):
    hub = EventHub()
    _monitor(hub, CountingTerminator(), manual_loop).start()

    for _ in range(1000):
        hub.emit("mousemove")
        hub.emit("scroll")
    manual_loop.advance(1)
    for _ in range(1000):
        hub.emit("keypress")

    assert len(manual_loop.pending()) == 1


def test_stop_cancels_timer_and_unsubscribes(manual_loop):
    hub = EventHub()
    terminator = CountingTerminator()
    monitor = _monitor(hub, terminator, manual_loop).start()

    monitor.stop()
    manual_loop.advance(30)

    assert monitor.state is MonitorState.STOPPED
    assert hub.listener_count() == 0
    assert manual_loop.pending() == []
    assert terminator.calls == 0
    monitor.stop()


def test_context_manager_releases_on_error(manual_loop):
    hub = EventHub()
    monitor = _monitor(hub, CountingTerminator(), manual_loop)

    with pytest.raises(RuntimeError):
        with monitor:
            assert hub.listener_count() == 5
            raise RuntimeError("view crashed")

    assert hub.listener_count() == 0
    assert manual_loop.pending() == []


def test_failed_registration_is_not_armed(manual_loop):
    hub = BrokenSource()
    monitor = _monitor(hub, CountingTerminator(), manual_loop)

    with pytest.raises(SessionMonitorError):
        monitor.start()

    assert not monitor.armed
    assert monitor.state is MonitorState.STOPPED
    assert hub.listener_count() == 0
    assert manual_loop.pending() == []


def test_monitor_cannot_restart_after_expiry(manual_loop):
    monitor = _monitor(EventHub(), CountingTerminator(), manual_loop).start()
    manual_loop.advance(5)

    with pytest.raises(SessionMonitorError):
        monitor.start()


def test_start_without_running_loop_fails():
    monitor = ActivityMonitor(EventHub(), CountingTerminator(), timeout_sec=5)

    with pytest.raises(SessionMonitorError):
        monitor.start()

    assert monitor.state is MonitorState.STOPPED


def test_expiry_on_real_event_loop(credentials, notifier, navigator):
    async def scenario():
        hub = EventHub()
        terminator = SessionTerminator(credentials, notifier, navigator)
        monitor = ActivityMonitor(hub, terminator, timeout_sec=0.1)
        monitor.start()
        for _ in range(3):
            await asyncio.sleep(0.03)
            hub.emit("click")
        assert monitor.state is MonitorState.ACTIVE
        await asyncio.sleep(0.5)
        return monitor

    monitor = asyncio.run(scenario())

    assert monitor.state is MonitorState.EXPIRED
    assert navigator.visits == 1
    assert not credentials.has_credential()
    assert len(notifier.notices) == 1
