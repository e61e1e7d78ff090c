import os
from pathlib import Path

DATA_DIR = Path(os.getenv("DATA_DIR", "./data")).expanduser()

DB_PATH = os.getenv("DB_PATH", str(DATA_DIR / "worklog.db"))
FALLBACK_PATH = os.getenv("FALLBACK_PATH", str(DATA_DIR / "worklog-fallback.json"))
SECRET_PATH = os.getenv("SECRET_PATH", str(DATA_DIR / "secret.key"))

# Operator-supplied secret; when empty a device secret is generated under DATA_DIR
WORKLOG_SECRET = os.getenv("WORKLOG_SECRET", "")

# Set to 0 to force the key-value fallback even when SQLite is present
NATIVE_STORAGE = bool(int(os.getenv("NATIVE_STORAGE", "1")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True
