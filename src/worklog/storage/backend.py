from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StoredRow:
    """One stored day as the backend holds it, before any decryption.

    `payload` is the envelope string (current or legacy). `columns` carries the
    plain columns of rows written before encryption existed; `flat` a plain
    record in the flat camelCase shape.
    """

    day_key: str
    payload: Optional[str] = None
    columns: Mapping[str, Any] = field(default_factory=dict)
    flat: Optional[Mapping[str, Any]] = None
    updated_at: str = ""


class StorageBackend(Protocol):
    name: str

    async def open(self) -> None:
        """Connect and create the schema if absent. Called once per process."""

        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError

    async def get_row(self, day_key: str) -> Optional[StoredRow]:
        raise NotImplementedError

    async def list_rows(self) -> Sequence[StoredRow]:
        """All rows, most recent day first."""

        raise NotImplementedError

    async def upsert_day(self, *, day_key: str, payload: str, updated_at: str) -> None:
        """Insert or replace the envelope for a day and blank any plain columns."""

        raise NotImplementedError

    async def delete_all(self) -> None:
        """Delete every day and every setting."""

        raise NotImplementedError

    async def get_setting(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set_setting(self, key: str, value: str) -> None:
        raise NotImplementedError


class SerialExecutor:
    """Single worker thread; jobs run one at a time in submission order."""

    def __init__(self, name: str):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    async def run(self, fn: Callable[..., T], *args: Any) -> T:
        return await asyncio.wrap_future(self._executor.submit(fn, *args))

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
