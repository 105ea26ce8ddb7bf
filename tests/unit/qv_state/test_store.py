"""Tests for the variable state store and dependency sequencing."""

from __future__ import annotations

import asyncio
import logging
import threading

import pytest

from qv_common.errors import InitLockMissingError
from qv_state.events import (
    AddInstance,
    BeginInitLock,
    ReleaseInitLock,
    ReplaceOptionsFromResults,
    ResolveInitLock,
    SetCurrent,
)
from qv_state.models import CurrentSelection, VariableModel
from qv_state.store import VariableStateStore


pytestmark = pytest.mark.unit_state


def _store(*names: str) -> VariableStateStore:
    store = VariableStateStore()
    for name in names:
        store.dispatch(AddInstance(VariableModel(name=name)))
    return store


def test_dispatch_updates_state_and_notifies() -> None:
    store = _store("dc")
    seen: list[str] = []
    store.subscribe(lambda collection, event: seen.append(type(event).__name__))

    store.dispatch(ReplaceOptionsFromResults("query", "dc", [{"value": "eu"}]))
    store.dispatch(SetCurrent("query", "dc", CurrentSelection(text="eu", value="eu")))

    assert seen == ["ReplaceOptionsFromResults", "SetCurrent"]
    assert store.get("query", "dc").picker.link_text == "eu"


def test_unchanged_state_does_not_notify() -> None:
    store = _store("dc")
    seen: list[object] = []
    store.subscribe(lambda collection, event: seen.append(event))
    store.dispatch(SetCurrent("query", "missing", CurrentSelection()))
    assert seen == []


def test_unsubscribe_stops_notifications() -> None:
    store = _store()
    seen: list[object] = []
    unsubscribe = store.subscribe(lambda collection, event: seen.append(event))
    unsubscribe()
    unsubscribe()
    store.dispatch(AddInstance(VariableModel(name="dc")))
    assert seen == []


def test_failing_subscriber_does_not_break_dispatch(caplog: pytest.LogCaptureFixture) -> None:
    store = _store()
    seen: list[object] = []

    def broken(collection, event) -> None:
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda collection, event: seen.append(event))
    with caplog.at_level(logging.ERROR, logger="qv_state.store"):
        store.dispatch(AddInstance(VariableModel(name="dc")))
    assert len(seen) == 1
    assert "subscriber failed" in caplog.text


def test_init_lock_requires_begin() -> None:
    store = _store("dc")
    with pytest.raises(InitLockMissingError):
        store.init_lock("query", "dc")
    with pytest.raises(InitLockMissingError):
        store.init_lock("query", "unknown")


def test_dependent_variable_waits_for_parent_init() -> None:
    store = _store("dc", "host")
    store.dispatch(BeginInitLock("query", "dc"))
    order: list[str] = []

    async def init_dc() -> None:
        await asyncio.sleep(0)
        store.dispatch(ReplaceOptionsFromResults("query", "dc", [{"value": "eu"}]))
        order.append("dc ready")
        store.dispatch(ResolveInitLock("query", "dc"))

    async def init_host() -> None:
        await store.wait_for_init("query", "dc")
        order.append("host starts")
        store.dispatch(ReplaceOptionsFromResults("query", "host", [{"value": "web-1"}]))

    async def scenario() -> None:
        await asyncio.wait_for(asyncio.gather(init_host(), init_dc()), timeout=1)
        # a late waiter still completes once the lock is resolved
        await asyncio.wait_for(store.wait_for_init("query", "dc"), timeout=1)

    asyncio.run(scenario())

    assert order == ["dc ready", "host starts"]
    store.dispatch(ReleaseInitLock("query", "dc"))
    assert store.get("query", "dc").variable.init_lock is None
    assert store.get("query", "host").variable.options[0].value == "web-1"


def test_waiter_survives_release_after_resolve() -> None:
    store = _store("dc")
    store.dispatch(BeginInitLock("query", "dc"))

    async def scenario() -> None:
        waiting = asyncio.create_task(store.wait_for_init("query", "dc"))
        await asyncio.sleep(0)
        store.dispatch(ResolveInitLock("query", "dc"))
        store.dispatch(ReleaseInitLock("query", "dc"))
        await asyncio.wait_for(waiting, timeout=1)

    asyncio.run(scenario())


def test_resolve_dispatched_from_another_thread_wakes_waiter() -> None:
    store = _store("dc")
    store.dispatch(BeginInitLock("query", "dc"))
    lock = store.init_lock("query", "dc")
    waiting = threading.Event()
    done: list[str] = []

    async def wait_in_worker() -> None:
        task = asyncio.ensure_future(store.wait_for_init("query", "dc"))
        await asyncio.sleep(0)
        waiting.set()
        await asyncio.wait_for(task, timeout=2)
        done.append("dc")

    worker = threading.Thread(target=asyncio.run, args=(wait_in_worker(),))
    worker.start()
    assert waiting.wait(timeout=2)
    store.dispatch(ResolveInitLock("query", "dc"))
    worker.join(timeout=3)

    assert lock.resolved
    assert not worker.is_alive()
    assert done == ["dc"]
