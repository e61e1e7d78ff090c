import os
from pathlib import Path

DATA_DIR = Path(os.getenv("DATA_DIR", "~/.worklog")).expanduser()

DB_PATH = os.getenv("DB_PATH", str(DATA_DIR / "worklog.db"))
FALLBACK_PATH = os.getenv("FALLBACK_PATH", str(DATA_DIR / "worklog-fallback.json"))
SECRET_PATH = os.getenv("SECRET_PATH", str(DATA_DIR / "secret.key"))

WORKLOG_SECRET = os.getenv("WORKLOG_SECRET", "")

NATIVE_STORAGE = bool(int(os.getenv("NATIVE_STORAGE", "1")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False
