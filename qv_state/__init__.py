"""State machine for query-backed variable pickers.

Re-exports the commonly used types; see ``qv_state.api`` for the full surface.
"""

from qv_state.api import (
    AddInstance,
    CurrentSelection,
    Option,
    QueryVariableReducer,
    QueryVariableState,
    SelectOption,
    SetCurrent,
    Tag,
    VariableCollection,
    VariableModel,
    VariableSort,
    VariableStateSettings,
    VariableStateStore,
    query_variables_reducer,
)

__all__ = [
    "AddInstance",
    "CurrentSelection",
    "Option",
    "QueryVariableReducer",
    "QueryVariableState",
    "SelectOption",
    "SetCurrent",
    "Tag",
    "VariableCollection",
    "VariableModel",
    "VariableSort",
    "VariableStateSettings",
    "VariableStateStore",
    "query_variables_reducer",
]
