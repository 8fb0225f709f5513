from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

from .attendance.json_repository import JsonFileAttendanceLedger
from .attendance.memory_repository import InMemoryAttendanceLedger
from .attendance.mysql_attendance_repository import MySQLAttendanceLedger
from .attendance.repository import AttendanceLedger
from .attendance.service import AttendanceService
from .core.constants import ACTIVITY_CHANNELS, DEFAULT_HISTORY_LIMIT, DEFAULT_IDLE_TIMEOUT_SEC, DEFAULT_LOGIN_URL
from .core.enums import LedgerBackend
from .database.bootstrap import apply_schema
from .database.connection import DatabaseConnection, DBConfig
from .session.credentials import CredentialStore, FileCredentialStore, InMemoryCredentialStore
from .session.input_sources import InputSource
from .session.monitor import ActivityMonitor
from .session.navigation import Navigator
from .session.notifier import LoggingNotifier, Notifier
from .session.terminator import SessionTerminator


@dataclass(frozen=True)
class Container:
    ledger: AttendanceLedger
    attendance_service: AttendanceService

    credentials: CredentialStore
    notifier: Notifier

    idle_timeout_sec: float
    activity_channels: tuple[str, ...]
    login_url: str

    def build_terminator(self, navigator: Navigator) -> SessionTerminator:
        return SessionTerminator(self.credentials, self.notifier, navigator)

    def build_monitor(
        self,
        source: InputSource,
        navigator: Navigator,
        *,
        timeout_sec: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> ActivityMonitor:
        """Fresh monitor for one authenticated session."""
        return ActivityMonitor(
            source,
            self.build_terminator(navigator),
            timeout_sec=timeout_sec or self.idle_timeout_sec,
            channels=self.activity_channels,
            loop=loop,
        )


def build_ledger(settings: Any) -> AttendanceLedger:
    backend = LedgerBackend(str(getattr(settings, "LEDGER_BACKEND", "memory")).lower())

    if backend is LedgerBackend.JSON:
        return JsonFileAttendanceLedger(getattr(settings, "LEDGER_PATH"))

    if backend is LedgerBackend.MYSQL:
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(conn)
        return MySQLAttendanceLedger(conn)

    return InMemoryAttendanceLedger()


def build_container(settings: Any) -> Container:
    ledger = build_ledger(settings)
    attendance_service = AttendanceService(
        ledger,
        history_limit=int(getattr(settings, "HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)),
    )

    credential_file = getattr(settings, "CREDENTIAL_FILE", "")
    credentials: CredentialStore = FileCredentialStore(credential_file) if credential_file else InMemoryCredentialStore()

    return Container(
        ledger=ledger,
        attendance_service=attendance_service,
        credentials=credentials,
        notifier=LoggingNotifier(),
        idle_timeout_sec=float(getattr(settings, "IDLE_TIMEOUT_SEC", DEFAULT_IDLE_TIMEOUT_SEC)),
        activity_channels=tuple(getattr(settings, "ACTIVITY_CHANNELS", ACTIVITY_CHANNELS)),
        login_url=str(getattr(settings, "LOGIN_URL", DEFAULT_LOGIN_URL)),
    )
