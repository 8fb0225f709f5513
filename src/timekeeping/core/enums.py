from __future__ import annotations

from enum import Enum


class NoticeKind(str, Enum):
    """Severity of a user-visible notice."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class MonitorState(str, Enum):
    """Lifecycle of an activity monitor."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    STOPPED = "STOPPED"


class LedgerBackend(str, Enum):
    MEMORY = "memory"
    JSON = "json"
    MYSQL = "mysql"
