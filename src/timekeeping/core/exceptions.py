from __future__ import annotations

from .enums import NoticeKind


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind = NoticeKind.ERROR


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = NoticeKind.WARNING


class AlreadyClockedIn(ValidationError):
    """Today's record already exists (open or closed)."""

    kind = NoticeKind.INFO

    def __init__(self, message: str = "Already timed in today"):
        super().__init__(message)


class NoOpenSession(ValidationError):
    """Clock-out attempted without an open record for today."""

    kind = NoticeKind.INFO

    def __init__(self, message: str = "No open time-in record for today"):
        super().__init__(message)


class InvalidOrdering(ValidationError):
    """Clock-out timestamp precedes the clock-in timestamp."""

    kind = NoticeKind.ERROR

    def __init__(self, message: str = "Time out cannot be earlier than time in"):
        super().__init__(message)


class PersistenceFailure(DomainError):
    """The storage collaborator failed; the command had no effect."""

    def __init__(self, message: str = "Attendance storage is unavailable"):
        super().__init__(message)


class SessionMonitorError(DomainError):
    """The activity monitor could not be armed."""
