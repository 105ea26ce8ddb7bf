"""Ordered collection of query variables and event routing into it."""

from __future__ import annotations

import logging
from typing import Iterator, Mapping

from qv_state.events import AddInstance, RoutedEvent, VariableEvent
from qv_state.models import QUERY_VARIABLE_TYPE, QueryVariableState, VariableKey
from qv_state.reducer import QueryVariableReducer, query_variable_reducer

logger = logging.getLogger(__name__)


class VariableCollection:
    """Immutable, insertion-ordered sequence of instances keyed by ``(type, name)``.

    The key index gives constant-time routing; iteration order is insertion
    order.
    """

    __slots__ = ("_instances", "_index")

    def __init__(self, instances: tuple[QueryVariableState, ...] = ()) -> None:
        index: dict[VariableKey, int] = {}
        for position, instance in enumerate(instances):
            if instance.key in index:
                raise ValueError(f"Duplicate variable key {instance.key!r}")
            index[instance.key] = position
        self._instances = instances
        self._index: Mapping[VariableKey, int] = index

    @classmethod
    def _from_parts(
        cls, instances: tuple[QueryVariableState, ...], index: Mapping[VariableKey, int]
    ) -> "VariableCollection":
        collection = cls.__new__(cls)
        collection._instances = instances
        collection._index = index
        return collection

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[QueryVariableState]:
        return iter(self._instances)

    def __getitem__(self, position: int) -> QueryVariableState:
        return self._instances[position]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VariableCollection):
            return NotImplemented
        return self._instances == other._instances

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        names = ", ".join(f"{t}:{n}" for t, n in self._index)
        return f"VariableCollection([{names}])"

    @property
    def instances(self) -> tuple[QueryVariableState, ...]:
        return self._instances

    def keys(self) -> tuple[VariableKey, ...]:
        return tuple(self._index)

    def get(self, type: str, name: str) -> QueryVariableState | None:
        position = self._index.get((type, name))
        return None if position is None else self._instances[position]

    def append(self, instance: QueryVariableState) -> "VariableCollection":
        if instance.key in self._index:
            raise ValueError(f"Duplicate variable key {instance.key!r}")
        index = dict(self._index)
        index[instance.key] = len(self._instances)
        return self._from_parts(self._instances + (instance,), index)

    def replace_at(self, type: str, name: str, instance: QueryVariableState) -> "VariableCollection":
        """Swap the instance stored under ``(type, name)``; others keep identity."""
        position = self._index[(type, name)]
        if self._instances[position] is instance:
            return self
        instances = list(self._instances)
        instances[position] = instance
        return self._from_parts(tuple(instances), self._index)


EMPTY_COLLECTION = VariableCollection()


def route(
    collection: VariableCollection,
    type: str,
    name: str,
    event: VariableEvent,
    reducer: QueryVariableReducer | None = None,
) -> VariableCollection:
    """Apply ``event`` to the instance keyed ``(type, name)`` only.

    Events for other variable kinds pass through. An unknown key leaves the
    collection untouched.
    """
    if type != QUERY_VARIABLE_TYPE:
        return collection
    instance = collection.get(type, name)
    if instance is None:
        logger.warning(
            "Dropping %s for unknown variable %s:%s", event.__class__.__name__, type, name
        )
        return collection
    reduce = reducer or query_variable_reducer
    return collection.replace_at(type, name, reduce(instance, event))


def query_variables_reducer(
    collection: VariableCollection | None,
    event: VariableEvent,
    reducer: QueryVariableReducer | None = None,
) -> VariableCollection:
    """Reduce the whole collection; unrelated events are passed through."""
    if collection is None:
        collection = EMPTY_COLLECTION
    reduce = reducer or query_variable_reducer

    if isinstance(event, AddInstance):
        model = event.model
        if model.type != QUERY_VARIABLE_TYPE:
            return collection
        if model.key in collection:
            logger.warning("Variable %s:%s already exists, ignoring add", model.type, model.name)
            return collection
        return collection.append(reduce(None, event))

    if isinstance(event, RoutedEvent):
        return route(collection, event.type, event.name, event, reducer)

    return collection
