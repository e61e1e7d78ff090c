import os

DB_PATH = os.getenv("DB_PATH", ":memory:")
FALLBACK_PATH = os.getenv("FALLBACK_PATH", "")
SECRET_PATH = os.getenv("SECRET_PATH", "")

WORKLOG_SECRET = "test-secret"

NATIVE_STORAGE = bool(int(os.getenv("NATIVE_STORAGE", "1")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
DEBUG = False
TESTING = True
