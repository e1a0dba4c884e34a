from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeVar

from expense_tracker.core.logging import get_logger, log_event

logger = get_logger(__name__)

T = TypeVar("T")

DISCONNECT_POLL_SECONDS = 0.5


class ParseSuperseded(Exception):
    """A newer parse from the same client session cancelled this one."""


class ClientDisconnected(Exception):
    """The HTTP client went away before the parse finished."""


class InflightParses:
    """
    One running parse per client session.

    Starting a parse under a key that already has one running cancels the older
    task, which aborts its OCR request. Only task handles are kept here.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task] = {}

    def start(self, key: str, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        previous = self._tasks.get(key)
        if previous is not None and not previous.done():
            previous.cancel()
            log_event(logger, "extraction.parse.superseded", session_key=key)
        task = asyncio.create_task(coro)
        self._tasks[key] = task
        task.add_done_callback(lambda t: self._discard(key, t))
        return task

    def running(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    def _discard(self, key: str, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]


async def await_unless_disconnected(
    task: asyncio.Task[T],
    is_disconnected: Callable[[], Awaitable[bool]],
    *,
    poll_seconds: float = DISCONNECT_POLL_SECONDS,
) -> T:
    """Wait for ``task``; cancel it if the client disconnects first."""
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_seconds)
            if done:
                break
            if await is_disconnected():
                task.cancel()
                log_event(logger, "extraction.parse.client_disconnected")
                raise ClientDisconnected()
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task.cancelled():
        raise ParseSuperseded()
    return task.result()


inflight_parses = InflightParses()
