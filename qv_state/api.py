"""Public API surface for qv_state."""

from qv_state.events import (
    NO_MODIFIERS,
    AddInstance,
    BeginInitLock,
    CloseDropdown,
    ModifierKeys,
    OpenDropdown,
    ReleaseInitLock,
    ReplaceOptionsFromResults,
    ReplaceTagsFromResults,
    ResolveInitLock,
    RoutedEvent,
    SelectOption,
    SetCurrent,
    VariableEvent,
)
from qv_state.init_lock import InitLock, InitLockState, require_init_lock
from qv_state.models import (
    QUERY_VARIABLE_TYPE,
    CurrentSelection,
    Option,
    PickerState,
    QueryVariableState,
    Tag,
    VariableHide,
    VariableModel,
    VariableRefresh,
    VariableSort,
)
from qv_state.normalizer import normalize_results
from qv_state.reducer import QueryVariableReducer, query_variable_reducer
from qv_state.router import (
    EMPTY_COLLECTION,
    VariableCollection,
    query_variables_reducer,
    route,
)
from qv_state.selection import apply_state_changes
from qv_state.settings import DEFAULT_SETTINGS, VariableStateSettings
from qv_state.sorting import sort_options
from qv_state.store import VariableStateStore
from qv_state.templating import (
    PassthroughTemplateResolver,
    PatternCompiler,
    ScopedTemplateResolver,
    TemplateResolver,
    compile_js_regex,
)

__all__ = [
    "AddInstance",
    "apply_state_changes",
    "BeginInitLock",
    "CloseDropdown",
    "compile_js_regex",
    "CurrentSelection",
    "DEFAULT_SETTINGS",
    "EMPTY_COLLECTION",
    "InitLock",
    "InitLockState",
    "ModifierKeys",
    "NO_MODIFIERS",
    "normalize_results",
    "OpenDropdown",
    "Option",
    "PassthroughTemplateResolver",
    "PatternCompiler",
    "PickerState",
    "QUERY_VARIABLE_TYPE",
    "query_variable_reducer",
    "query_variables_reducer",
    "QueryVariableReducer",
    "QueryVariableState",
    "ReleaseInitLock",
    "ReplaceOptionsFromResults",
    "ReplaceTagsFromResults",
    "require_init_lock",
    "ResolveInitLock",
    "route",
    "RoutedEvent",
    "ScopedTemplateResolver",
    "SelectOption",
    "SetCurrent",
    "sort_options",
    "Tag",
    "TemplateResolver",
    "VariableCollection",
    "VariableEvent",
    "VariableHide",
    "VariableModel",
    "VariableRefresh",
    "VariableSort",
    "VariableStateSettings",
    "VariableStateStore",
]
