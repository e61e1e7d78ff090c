from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

from loguru import logger

from ..core.exceptions import StorageError
from ..records.codec import LEGACY_COLUMNS
from .backend import SerialExecutor, StorageBackend, StoredRow
from .sqlite_base import column_names, db_cursor, fetchall, fetchone

T = TypeVar("T")

CREATE_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS work_days (
  day_key TEXT PRIMARY KEY,
  morning_in TEXT,
  lunch_out TEXT,
  lunch_in TEXT,
  final_out TEXT,
  pause_no_exit INTEGER NOT NULL DEFAULT 0,
  used_permit INTEGER NOT NULL DEFAULT 0,
  permit_out TEXT,
  permit_in TEXT,
  calculated_json TEXT,
  encrypted_payload TEXT,
  updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS app_settings (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_work_days_updated_at ON work_days(updated_at);
"""

SELECT_COLUMNS = ", ".join(("day_key",) + LEGACY_COLUMNS + ("encrypted_payload", "updated_at"))


class SQLiteBackend(StorageBackend):
    """Native structured storage. One connection, statements serialized on one worker thread."""

    name = "sqlite"

    def __init__(self, db_path: Union[str, Path]):
        self._db_path = str(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._serial = SerialExecutor("worklog-sqlite")

    async def open(self) -> None:
        await self._run(self._open)

    async def close(self) -> None:
        await self._run(self._close)
        self._serial.shutdown()

    async def get_row(self, day_key: str) -> Optional[StoredRow]:
        return await self._run(self._get_row, day_key)

    async def list_rows(self) -> Sequence[StoredRow]:
        return await self._run(self._list_rows)

    async def upsert_day(self, *, day_key: str, payload: str, updated_at: str) -> None:
        await self._run(self._upsert_day, day_key, payload, updated_at)

    async def delete_all(self) -> None:
        await self._run(self._delete_all)

    async def get_setting(self, key: str) -> Optional[str]:
        return await self._run(self._get_setting, key)

    async def set_setting(self, key: str, value: str) -> None:
        await self._run(self._set_setting, key, value)

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await self._serial.run(fn, *args)
        except sqlite3.Error as e:
            logger.error(f"SQLite operation {fn.__name__} failed: {e}")
            raise StorageError(f"SQLite operation failed: {e}") from e

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("SQLite backend is not open")
        return self._conn

    def _open(self) -> None:
        if self._conn is not None:
            return
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.executescript(CREATE_SCHEMA_SQL)
        # Tables created before encryption existed lack the payload column.
        if "encrypted_payload" not in column_names(conn, "work_days"):
            with db_cursor(conn) as cur:
                cur.execute("ALTER TABLE work_days ADD COLUMN encrypted_payload TEXT")
            logger.info("Added encrypted_payload column to work_days")
        self._conn = conn
        logger.info(f"SQLite storage ready at {self._db_path}")

    def _close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _get_row(self, day_key: str) -> Optional[StoredRow]:
        with db_cursor(self._connection()) as cur:
            cur.execute(f"SELECT {SELECT_COLUMNS} FROM work_days WHERE day_key = ?", (day_key,))
            r = fetchone(cur)
        return _to_row(r) if r else None

    def _list_rows(self) -> list[StoredRow]:
        with db_cursor(self._connection()) as cur:
            cur.execute(f"SELECT {SELECT_COLUMNS} FROM work_days ORDER BY day_key DESC")
            rows = fetchall(cur)
        return [_to_row(r) for r in rows]

    def _upsert_day(self, day_key: str, payload: str, updated_at: str) -> None:
        with db_cursor(self._connection()) as cur:
            cur.execute(
                """
                INSERT INTO work_days (day_key, encrypted_payload, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(day_key) DO UPDATE SET
                  morning_in = NULL,
                  lunch_out = NULL,
                  lunch_in = NULL,
                  final_out = NULL,
                  pause_no_exit = 0,
                  used_permit = 0,
                  permit_out = NULL,
                  permit_in = NULL,
                  calculated_json = NULL,
                  encrypted_payload = excluded.encrypted_payload,
                  updated_at = excluded.updated_at
                """,
                (day_key, payload, updated_at),
            )

    def _delete_all(self) -> None:
        with db_cursor(self._connection()) as cur:
            cur.execute("DELETE FROM work_days")
            cur.execute("DELETE FROM app_settings")

    def _get_setting(self, key: str) -> Optional[str]:
        with db_cursor(self._connection()) as cur:
            cur.execute("SELECT value FROM app_settings WHERE key = ?", (key,))
            r = fetchone(cur)
        return str(r["value"]) if r else None

    def _set_setting(self, key: str, value: str) -> None:
        with db_cursor(self._connection()) as cur:
            cur.execute(
                """
                INSERT INTO app_settings (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )


def _to_row(r: dict) -> StoredRow:
    return StoredRow(
        day_key=str(r["day_key"]),
        payload=r.get("encrypted_payload"),
        columns={column: r.get(column) for column in LEGACY_COLUMNS},
        updated_at=str(r.get("updated_at") or ""),
    )
