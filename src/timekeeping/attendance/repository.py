from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import TimeRecord


class AttendanceLedger(Protocol):
    """Persistence collaborator for time records, keyed by (user_id, day_key).

    ``put`` either appends a new open record or closes the stored open record
    with the same ``record_id``. Implementations are the final arbiter of the
    per-day invariant: appending over an existing day raises
    ``AlreadyClockedIn`` and closing a record that is not open raises
    ``NoOpenSession``. Storage faults surface as ``PersistenceFailure``.
    """

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[TimeRecord]:
        raise NotImplementedError

    def put(self, user_id: int, record: TimeRecord) -> None:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[TimeRecord]:
        """Records in append order."""

        raise NotImplementedError
