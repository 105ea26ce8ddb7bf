"""One-shot awaitable used to sequence dependent variable initialization."""

from __future__ import annotations

import asyncio
import threading
from enum import Enum
from typing import Any, Generator

from qv_common.errors import InitLockMissingError
from qv_state.models import QueryVariableState


class InitLockState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


def _wake(future: asyncio.Future[None]) -> None:
    if not future.done():
        future.set_result(None)


class InitLock:
    """Pending until resolved; resolution is terminal and idempotent.

    Waiters that start before or after ``resolve()`` all complete, whichever
    thread resolves the lock. Each waiter parks a future on its own running
    loop and is woken through ``call_soon_threadsafe``, so a lock may be
    created outside any loop (inside a reducer) and awaited from several.
    """

    __slots__ = ("_guard", "_resolved", "_waiters")

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._resolved = False
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = []

    @property
    def state(self) -> InitLockState:
        return InitLockState.RESOLVED if self._resolved else InitLockState.PENDING

    @property
    def resolved(self) -> bool:
        return self._resolved

    @property
    def waiter_count(self) -> int:
        with self._guard:
            return len(self._waiters)

    def resolve(self) -> None:
        """Release every current and future waiter. Repeated calls are no-ops."""
        with self._guard:
            if self._resolved:
                return
            self._resolved = True
            waiters, self._waiters = self._waiters, []
        for loop, future in waiters:
            try:
                loop.call_soon_threadsafe(_wake, future)
            except RuntimeError:
                # loop already closed, nobody left to wake
                continue

    async def wait(self) -> None:
        loop = asyncio.get_running_loop()
        with self._guard:
            if self._resolved:
                return
            future: asyncio.Future[None] = loop.create_future()
            entry = (loop, future)
            self._waiters.append(entry)
        try:
            await future
        finally:
            with self._guard:
                if entry in self._waiters:
                    self._waiters.remove(entry)

    def __await__(self) -> Generator[Any, None, None]:
        return self.wait().__await__()

    def __repr__(self) -> str:
        return f"InitLock(state={self.state.value})"


def require_init_lock(state: QueryVariableState) -> InitLock:
    """Return the variable's init lock or fail loudly when there is none.

    Awaiting a variable that never began initialization is a caller bug.
    """
    lock = state.variable.init_lock
    if lock is None:
        raise InitLockMissingError(
            f"Variable '{state.variable.name}' has no init lock to await",
            context={"type": state.variable.type, "name": state.variable.name},
        )
    return lock
