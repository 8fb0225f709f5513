"""Back up the attendance ledger.

mysql backend: dumps the time_records table with `mysqldump` (must be installed).
json backend: copies the ledger file next to a timestamped name.
"""

from __future__ import annotations

import importlib
import shutil
import subprocess
from datetime import datetime
from pathlib import Path

from timekeeping.config import get_settings_module


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    backend = str(getattr(settings, "LEDGER_BACKEND", "memory")).lower()

    out_dir = Path(__file__).resolve().parents[1] / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")

    if backend == "json":
        src = Path(settings.LEDGER_PATH)
        if not src.exists():
            raise SystemExit(f"Ledger file not found: {src}")
        out_file = out_dir / f"time_records_{ts}.json"
        shutil.copy2(src, out_file)
        print(f"OK: Backup created: {out_file}")
        return

    if backend != "mysql":
        raise SystemExit(f"Nothing to back up for ledger backend {backend!r}")

    db = settings.DB_CONFIG
    out_file = out_dir / f"{db['database']}_{ts}.sql"
    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        f"-p{db['password']}",
        db["database"],
        "time_records",
    ]

    try:
        with out_file.open("wb") as f:
            subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True)
        print(f"OK: Backup created: {out_file}")
    except FileNotFoundError:
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools.")


if __name__ == "__main__":
    main()
