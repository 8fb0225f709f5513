from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_positive_seconds
from ..core.constants import ACTIVITY_CHANNELS, DEFAULT_IDLE_TIMEOUT_SEC
from ..core.enums import MonitorState
from ..core.exceptions import SessionMonitorError
from .input_sources import InputSource, Unsubscribe
from .terminator import SessionTerminator

log = logging.getLogger(__name__)


class ActivityMonitor:
    """Ends the session after ``timeout_sec`` without input on any channel.

    Every channel feeds the same activity handler, which only moves the
    deadline forward. A single ``call_later`` handle is pending at any time:
    when it fires early because activity moved the deadline, it re-schedules
    itself for the remaining time instead of firing the terminator. Event
    storms therefore never pile up timers.

    One instance covers one authenticated session. ``start`` may be called
    once; after expiry or ``stop`` a new monitor is needed.
    """

    def __init__(
        self,
        source: InputSource,
        terminator: SessionTerminator,
        *,
        timeout_sec: float = DEFAULT_IDLE_TIMEOUT_SEC,
        channels: Iterable[str] = ACTIVITY_CHANNELS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        clock: Clock = now_local,
    ):
        self._source = source
        self._terminator = terminator
        self._timeout = require_positive_seconds(timeout_sec, "timeout_sec")
        self._channels = tuple(channels)
        self._loop = loop
        self._clock = clock

        self._state = MonitorState.PENDING
        self._handle: Optional[asyncio.TimerHandle] = None
        self._deadline: Optional[float] = None
        self._unsubscribers: list[Unsubscribe] = []
        self._last_activity: Optional[datetime] = None

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def armed(self) -> bool:
        return self._state is MonitorState.ACTIVE and self._handle is not None

    @property
    def deadline(self) -> Optional[float]:
        """Loop time at which the session ends without further input."""
        return self._deadline if self._state is MonitorState.ACTIVE else None

    @property
    def timeout_sec(self) -> float:
        return self._timeout

    @property
    def last_activity(self) -> Optional[datetime]:
        return self._last_activity

    def start(self) -> "ActivityMonitor":
        if self._state is not MonitorState.PENDING:
            raise SessionMonitorError(f"Monitor cannot start from state {self._state.value}")

        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                self._state = MonitorState.STOPPED
                raise SessionMonitorError("Activity monitor needs a running event loop") from exc

        for channel in self._channels:
            try:
                self._unsubscribers.append(self._source.subscribe(channel, self._on_activity))
            except Exception as exc:
                log.error("Cannot listen on input channel %r: %s", channel, exc)
                self._release()
                self._state = MonitorState.STOPPED
                raise SessionMonitorError(f"Cannot listen on input channel {channel!r}") from exc

        self._state = MonitorState.ACTIVE
        self._last_activity = self._clock()
        self._deadline = self._loop.time() + self._timeout
        self._handle = self._loop.call_later(self._timeout, self._on_deadline)
        log.info("Activity monitor armed (timeout=%ss, channels=%s)", self._timeout, ",".join(self._channels))
        return self

    def stop(self) -> None:
        self._release()
        if self._state in (MonitorState.PENDING, MonitorState.ACTIVE):
            self._state = MonitorState.STOPPED
            log.info("Activity monitor stopped")

    def __enter__(self) -> "ActivityMonitor":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _on_activity(self, *_args) -> None:
        if self._state is not MonitorState.ACTIVE:
            return
        self._last_activity = self._clock()
        self._deadline = self._loop.time() + self._timeout

    def _on_deadline(self) -> None:
        self._handle = None
        if self._state is not MonitorState.ACTIVE:
            return

        remaining = self._deadline - self._loop.time()
        if remaining > 0:
            self._handle = self._loop.call_later(remaining, self._on_deadline)
            return

        self._state = MonitorState.EXPIRED
        log.info("No input for %ss since %s; ending session", self._timeout, self._last_activity)
        try:
            self._terminator.terminate()
        finally:
            self._release()

    def _release(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

        unsubscribers, self._unsubscribers = self._unsubscribers, []
        errors = []
        for unsubscribe in unsubscribers:
            try:
                unsubscribe()
            except Exception as exc:
                errors.append(exc)
        if errors:
            raise SessionMonitorError(f"{len(errors)} input listener(s) failed to unsubscribe") from errors[0]
