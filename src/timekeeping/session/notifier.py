from __future__ import annotations

import logging
from typing import Protocol

from ..core.enums import NoticeKind

_LEVELS = {
    NoticeKind.INFO: logging.INFO,
    NoticeKind.SUCCESS: logging.INFO,
    NoticeKind.WARNING: logging.WARNING,
    NoticeKind.ERROR: logging.ERROR,
}


class Notifier(Protocol):
    def notify(self, message: str, kind: NoticeKind) -> None:
        """Fire-and-forget, non-blocking user notice."""

        raise NotImplementedError


class LoggingNotifier(Notifier):
    def __init__(self, logger: logging.Logger | None = None):
        self._log = logger or logging.getLogger("timekeeping.notice")

    def notify(self, message: str, kind: NoticeKind) -> None:
        self._log.log(_LEVELS.get(kind, logging.INFO), "[%s] %s", kind.value, message)
