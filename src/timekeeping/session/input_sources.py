"""Input-event sources the activity monitor subscribes to.

PRIVACY: only the fact that an event happened is forwarded, never key codes
or pointer positions.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Iterable, Protocol

from ..core.constants import ACTIVITY_CHANNELS, MOVE_THROTTLE_SEC

log = logging.getLogger(__name__)

Handler = Callable[[], None]
Unsubscribe = Callable[[], None]


class InputSource(Protocol):
    def subscribe(self, channel: str, handler: Handler) -> Unsubscribe:
        """Register ``handler`` for ``channel``; the returned callable undoes it."""

        raise NotImplementedError


class EventHub(InputSource):
    """In-process fan-out of named input channels to their handlers."""

    def __init__(self, channels: Iterable[str] = ACTIVITY_CHANNELS):
        self._handlers: dict[str, list[Handler]] = {c: [] for c in channels}

    def subscribe(self, channel: str, handler: Handler) -> Unsubscribe:
        if channel not in self._handlers:
            raise ValueError(f"Unknown input channel: {channel!r}")
        handlers = self._handlers[channel]
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, channel: str) -> None:
        for handler in list(self._handlers.get(channel, ())):
            handler()

    def listener_count(self, channel: str | None = None) -> int:
        if channel is not None:
            return len(self._handlers.get(channel, ()))
        return sum(len(h) for h in self._handlers.values())


class PynputInputSource(InputSource):
    """System-wide mouse/keyboard activity via pynput.

    pynput calls back on its own listener threads; every event is handed to
    the asyncio loop with ``call_soon_threadsafe`` so subscribers only ever run
    on the loop thread. Listeners start with the first subscription.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, *, move_throttle_sec: float = MOVE_THROTTLE_SEC):
        self._loop = loop
        self._hub = EventHub(ACTIVITY_CHANNELS)
        self._move_throttle = float(move_throttle_sec)
        self._last_move: float | None = None
        self._mouse_listener = None
        self._keyboard_listener = None

    def subscribe(self, channel: str, handler: Handler) -> Unsubscribe:
        unsubscribe = self._hub.subscribe(channel, handler)
        try:
            self._ensure_listening()
        except Exception:
            unsubscribe()
            raise
        return unsubscribe

    def _ensure_listening(self) -> None:
        if self._mouse_listener is not None:
            return

        # Imported here: pynput binds to the display server at import time.
        from pynput import keyboard, mouse

        mouse_listener = mouse.Listener(on_move=self._on_move, on_click=self._on_click, on_scroll=self._on_scroll)
        keyboard_listener = keyboard.Listener(on_press=self._on_press)
        mouse_listener.daemon = True
        keyboard_listener.daemon = True
        mouse_listener.start()
        keyboard_listener.start()
        self._mouse_listener = mouse_listener
        self._keyboard_listener = keyboard_listener
        log.info("Input listeners started (activity only, no keylogging)")

    def close(self) -> None:
        for listener in (self._mouse_listener, self._keyboard_listener):
            if listener is not None:
                listener.stop()
        self._mouse_listener = None
        self._keyboard_listener = None

    # pynput threads

    def _post(self, channel: str) -> None:
        try:
            self._loop.call_soon_threadsafe(self._hub.emit, channel)
        except RuntimeError:
            # Loop already closed during shutdown.
            log.debug("Dropped %s event after loop shutdown", channel)

    def _on_move(self, x, y) -> None:
        now = time.monotonic()
        if self._last_move is not None and now - self._last_move < self._move_throttle:
            return
        self._last_move = now
        self._post("mousemove")

    def _on_click(self, x, y, button, pressed) -> None:
        self._post("mousedown" if pressed else "click")

    def _on_scroll(self, x, y, dx, dy) -> None:
        self._post("scroll")

    def _on_press(self, key) -> None:
        self._post("keypress")
