"""Per-instance state machine for query variables."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, get_args

from qv_common.errors import UnknownEventError
from qv_state.events import (
    AddInstance,
    BeginInitLock,
    CloseDropdown,
    OpenDropdown,
    ReleaseInitLock,
    ReplaceOptionsFromResults,
    ReplaceTagsFromResults,
    ResolveInitLock,
    SelectOption,
    SetCurrent,
    VariableEvent,
)
from qv_state.init_lock import InitLock
from qv_state.models import INITIAL_QUERY_VARIABLE_STATE, QueryVariableState
from qv_state.selection import (
    hide_drop_down,
    replace_options,
    replace_tags,
    select_option,
    set_current,
    show_drop_down,
)
from qv_state.settings import DEFAULT_SETTINGS, VariableStateSettings
from qv_state.templating import PatternCompiler, TemplateResolver, compile_js_regex

logger = logging.getLogger(__name__)

Handler = Callable[[QueryVariableState, Any], QueryVariableState]


class QueryVariableReducer:
    """Apply one event to one query variable state.

    Transitions are pure except ``ResolveInitLock``, which resolves the lock
    object in place and hands back the very same state object.
    """

    def __init__(
        self,
        *,
        settings: VariableStateSettings = DEFAULT_SETTINGS,
        template_resolver: TemplateResolver | None = None,
        compile_pattern: PatternCompiler = compile_js_regex,
    ) -> None:
        self.settings = settings
        self.template_resolver = template_resolver
        self.compile_pattern = compile_pattern
        self._handlers: dict[type, Handler] = {
            AddInstance: self._add_instance,
            ReplaceOptionsFromResults: self._replace_options,
            ReplaceTagsFromResults: self._replace_tags,
            SetCurrent: self._set_current,
            BeginInitLock: self._begin_init_lock,
            ResolveInitLock: self._resolve_init_lock,
            ReleaseInitLock: self._release_init_lock,
            SelectOption: self._select_option,
            OpenDropdown: self._open_dropdown,
            CloseDropdown: self._close_dropdown,
        }
        missing = set(get_args(VariableEvent)) - set(self._handlers)
        if missing:
            raise TypeError(f"Unhandled variable events: {sorted(t.__name__ for t in missing)}")

    @property
    def handled_events(self) -> frozenset[type]:
        return frozenset(self._handlers)

    def __call__(
        self, state: QueryVariableState | None, event: VariableEvent
    ) -> QueryVariableState:
        if state is None:
            state = INITIAL_QUERY_VARIABLE_STATE
        handler = self._handlers.get(type(event))
        if handler is None:
            raise UnknownEventError(
                f"Not a query variable event: {type(event).__name__}",
                context={"event": repr(event)},
            )
        return handler(state, event)

    def _add_instance(self, state: QueryVariableState, event: AddInstance) -> QueryVariableState:
        variable = replace(
            event.model,
            is_global=event.is_global,
            index=event.index,
            init_lock=state.variable.init_lock,
        )
        return replace(state, variable=variable)

    def _replace_options(
        self, state: QueryVariableState, event: ReplaceOptionsFromResults
    ) -> QueryVariableState:
        return replace_options(
            state,
            event.results,
            settings=self.settings,
            template_resolver=self.template_resolver,
            compile_pattern=self.compile_pattern,
        )

    def _replace_tags(
        self, state: QueryVariableState, event: ReplaceTagsFromResults
    ) -> QueryVariableState:
        return replace_tags(state, event.results)

    def _set_current(self, state: QueryVariableState, event: SetCurrent) -> QueryVariableState:
        return set_current(state, event.current, settings=self.settings)

    def _begin_init_lock(
        self, state: QueryVariableState, event: BeginInitLock
    ) -> QueryVariableState:
        if state.variable.init_lock is not None:
            logger.debug("Replacing existing init lock of variable %s", state.variable.name)
        return replace(state, variable=replace(state.variable, init_lock=InitLock()))

    def _resolve_init_lock(
        self, state: QueryVariableState, event: ResolveInitLock
    ) -> QueryVariableState:
        lock = state.variable.init_lock
        if lock is None:
            logger.debug("No init lock to resolve on variable %s", state.variable.name)
        else:
            lock.resolve()
        return state

    def _release_init_lock(
        self, state: QueryVariableState, event: ReleaseInitLock
    ) -> QueryVariableState:
        return replace(state, variable=replace(state.variable, init_lock=None))

    def _select_option(self, state: QueryVariableState, event: SelectOption) -> QueryVariableState:
        return select_option(
            state,
            event.option,
            force_select=event.force_select,
            modifiers=event.modifiers,
            settings=self.settings,
        )

    def _open_dropdown(self, state: QueryVariableState, event: OpenDropdown) -> QueryVariableState:
        return show_drop_down(state, settings=self.settings)

    def _close_dropdown(self, state: QueryVariableState, event: CloseDropdown) -> QueryVariableState:
        return hide_drop_down(state, settings=self.settings)


_DEFAULT_REDUCER = QueryVariableReducer()


def query_variable_reducer(
    state: QueryVariableState | None, event: VariableEvent
) -> QueryVariableState:
    """Reduce with default settings and no template variables."""
    return _DEFAULT_REDUCER(state, event)
