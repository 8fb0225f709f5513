from __future__ import annotations

from datetime import datetime

import pytest

from timekeeping.session.credentials import InMemoryCredentialStore


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0)


class ManualHandle:
    def __init__(self, when: float, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualLoop:
    """Just enough of an asyncio loop for timer logic, driven by ``advance``."""

    def __init__(self):
        self._now = 0.0
        self._timers: list[ManualHandle] = []

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback, *args) -> ManualHandle:
        handle = ManualHandle(self._now + delay, callback, args)
        self._timers.append(handle)
        return handle

    def pending(self) -> list[ManualHandle]:
        return [t for t in self._timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        target = self._now + seconds
        while True:
            due = [t for t in self.pending() if t.when <= target]
            if not due:
                break
            handle = min(due, key=lambda t: t.when)
            self._timers.remove(handle)
            self._now = handle.when
            handle.callback(*handle.args)
        self._now = target

    def advance_to(self, when: float) -> None:
        self.advance(when - self._now)


@pytest.fixture
def manual_loop() -> ManualLoop:
    return ManualLoop()


class RecordingNotifier:
    def __init__(self):
        self.notices = []

    def notify(self, message, kind) -> None:
        self.notices.append((message, kind))


class RecordingNavigator:
    def __init__(self):
        self.visits = 0

    def go_to_unauthenticated_entry(self) -> None:
        self.visits += 1


@pytest.fixture
def credentials() -> InMemoryCredentialStore:
    return InMemoryCredentialStore("token-abc")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()
