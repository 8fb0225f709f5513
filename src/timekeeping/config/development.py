import os
from pathlib import Path

from . import channels_from_env

DATA_DIR = Path(os.getenv("TIMEKEEPING_HOME", Path.home() / ".timekeeping"))

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True

# memory | json | mysql
LEDGER_BACKEND = os.getenv("LEDGER_BACKEND", "json")
LEDGER_PATH = os.getenv("LEDGER_PATH", str(DATA_DIR / "time_records.json"))

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timekeeping"),
}

# If enabled (mysql backend), schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

IDLE_TIMEOUT_SEC = float(os.getenv("IDLE_TIMEOUT_SEC", "100"))
ACTIVITY_CHANNELS = channels_from_env()
LOGIN_URL = os.getenv("LOGIN_URL", "http://localhost:5000/login")
CREDENTIAL_FILE = os.getenv("CREDENTIAL_FILE", str(DATA_DIR / "access_token"))

HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "")
