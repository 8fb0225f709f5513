from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import day_key
from ..core.exceptions import InvalidOrdering, NoOpenSession


@dataclass(frozen=True)
class TimeRecord:
    """Domain entity: one user's work session for one calendar day."""

    record_id: str
    user_id: int
    day_key: date
    time_in: datetime
    time_out: Optional[datetime] = None

    @classmethod
    def open_at(cls, user_id: int, now: datetime) -> "TimeRecord":
        return cls(record_id=uuid.uuid4().hex, user_id=int(user_id), day_key=day_key(now), time_in=now)

    @property
    def is_open(self) -> bool:
        return self.time_out is None

    def closed_at(self, now: datetime) -> "TimeRecord":
        if not self.is_open:
            raise NoOpenSession("Already timed out today")
        if now < self.time_in:
            raise InvalidOrdering()
        return replace(self, time_out=now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record_id,
            "user_id": self.user_id,
            "day_key": self.day_key.isoformat(),
            "time_in": self.time_in.isoformat(),
            "time_out": self.time_out.isoformat() if self.time_out else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeRecord":
        time_out = data.get("time_out")
        return cls(
            record_id=str(data["record_id"]),
            user_id=int(data["user_id"]),
            day_key=date.fromisoformat(data["day_key"]),
            time_in=datetime.fromisoformat(data["time_in"]),
            time_out=datetime.fromisoformat(time_out) if time_out else None,
        )
