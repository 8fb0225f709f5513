from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from ..core.exceptions import PersistenceFailure
from .memory_repository import apply_put
from .model import TimeRecord
from .repository import AttendanceLedger

log = logging.getLogger(__name__)


class JsonFileAttendanceLedger(AttendanceLedger):
    """Ledger kept in one local JSON file: ``{"<user_id>": [record, ...]}``.

    Every write replaces the whole file atomically, so a failed write leaves
    the previous ledger intact. Writers are serialized per instance only: the
    file must be owned by a single process. Use the MySQL ledger when several
    processes record attendance at once.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, list[TimeRecord]]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
            return {key: [TimeRecord.from_dict(item) for item in items] for key, items in raw.items()}
        except (OSError, ValueError, KeyError, TypeError) as exc:
            log.exception("Cannot read attendance ledger %s", self._path)
            raise PersistenceFailure(f"Cannot read attendance ledger: {exc}") from exc

    def _save(self, data: dict[str, list[TimeRecord]]) -> None:
        payload = {key: [r.to_dict() for r in items] for key, items in data.items()}
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".ledger-", suffix=".json", dir=str(self._path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as exc:
            log.exception("Cannot write attendance ledger %s", self._path)
            raise PersistenceFailure(f"Cannot write attendance ledger: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[TimeRecord]:
        with self._lock:
            for r in self._load().get(str(int(user_id)), []):
                if r.day_key == work_date:
                    return r
        return None

    def put(self, user_id: int, record: TimeRecord) -> None:
        key = str(int(user_id))
        with self._lock:
            data = self._load()
            data[key] = apply_put(data.get(key, []), record)
            self._save(data)

    def list_for_user(self, user_id: int) -> Sequence[TimeRecord]:
        with self._lock:
            return list(self._load().get(str(int(user_id)), []))
