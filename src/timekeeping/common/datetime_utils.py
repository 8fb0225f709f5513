from __future__ import annotations

from datetime import date, datetime
from typing import Callable

Clock = Callable[[], datetime]


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def day_key(moment: datetime) -> date:
    """Calendar day a timestamp belongs to, in the caller's local calendar."""
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def format_time(value: datetime | None, *, empty: str = "--") -> str:
    return value.strftime("%H:%M:%S") if value else empty
