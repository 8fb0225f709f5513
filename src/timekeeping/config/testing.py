SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

LEDGER_BACKEND = "memory"
LEDGER_PATH = ""

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "timekeeping_test",
}

AUTO_INIT_DB = False

IDLE_TIMEOUT_SEC = 5.0
ACTIVITY_CHANNELS = ("mousemove", "mousedown", "click", "scroll", "keypress")
LOGIN_URL = "/login"
CREDENTIAL_FILE = ""

HISTORY_LIMIT = 30

LOG_LEVEL = "ERROR"
LOG_FILE = ""
