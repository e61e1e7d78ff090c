from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future
from typing import Any, Awaitable, Callable, Optional


class SingleFlight:
    """Run an async initializer once; concurrent first callers share its outcome.

    The result is memoized after the first success. A failure is handed to every
    waiter of that attempt and the next call starts a fresh attempt. The shared
    future is a `concurrent.futures.Future`, so waiters may live on any event loop.
    """

    def __init__(self, initializer: Callable[[], Awaitable[Any]]):
        self._initializer = initializer
        self._lock = threading.Lock()
        self._future: Optional[Future] = None

    @property
    def done(self) -> bool:
        future = self._future
        return future is not None and future.done() and future.exception() is None

    async def get(self) -> Any:
        owner = False
        with self._lock:
            if self._future is None:
                self._future = Future()
                owner = True
            future = self._future

        if owner:
            try:
                value = await self._initializer()
            except BaseException as e:
                with self._lock:
                    self._future = None
                future.set_exception(e)
                raise
            future.set_result(value)
            return value

        return await asyncio.wrap_future(future)
