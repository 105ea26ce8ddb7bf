"""Dispatcher holding the live variable collection."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from qv_common.errors import InitLockMissingError
from qv_state.events import VariableEvent
from qv_state.init_lock import InitLock, require_init_lock
from qv_state.models import QueryVariableState
from qv_state.reducer import QueryVariableReducer
from qv_state.router import EMPTY_COLLECTION, VariableCollection, query_variables_reducer

logger = logging.getLogger(__name__)

Subscriber = Callable[[VariableCollection, VariableEvent], None]


class VariableStateStore:
    """Serialize events into the collection reducer and notify subscribers.

    Subscribers run only when an event produced a new collection.
    """

    def __init__(
        self,
        *,
        reducer: QueryVariableReducer | None = None,
        initial: VariableCollection = EMPTY_COLLECTION,
    ) -> None:
        self._reducer = reducer or QueryVariableReducer()
        self._state = initial
        self._lock = threading.RLock()
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> VariableCollection:
        with self._lock:
            return self._state

    def get(self, type: str, name: str) -> QueryVariableState | None:
        return self.state.get(type, name)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; the returned function unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def dispatch(self, event: VariableEvent) -> VariableCollection:
        with self._lock:
            previous = self._state
            self._state = query_variables_reducer(previous, event, self._reducer)
            current = self._state
            subscribers = list(self._subscribers)
        if current is previous:
            return current
        for callback in subscribers:
            try:
                callback(current, event)
            except Exception:
                logger.exception("Variable state subscriber failed")
        return current

    def init_lock(self, type: str, name: str) -> InitLock:
        """Return the init lock of ``(type, name)``; raise if there is none."""
        instance = self.get(type, name)
        if instance is None:
            raise InitLockMissingError(
                f"Unknown variable '{name}'", context={"type": type, "name": name}
            )
        return require_init_lock(instance)

    async def wait_for_init(self, type: str, name: str) -> None:
        """Wait until the variable's initialization has been resolved.

        The lock reference is taken before suspending, so a release that
        happens while waiting does not strand the waiter.
        """
        lock = self.init_lock(type, name)
        await lock.wait()
