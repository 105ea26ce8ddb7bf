"""Immutable state records for query variables and their pickers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from qv_state.init_lock import InitLock


QUERY_VARIABLE_TYPE = "query"

TextOrTexts = Union[str, tuple[str, ...]]
VariableKey = tuple[str, str]


class VariableSort(IntEnum):
    """Option ordering modes; odd values ascend, even values descend."""

    DISABLED = 0
    ALPHABETICAL_ASC = 1
    ALPHABETICAL_DESC = 2
    NUMERICAL_ASC = 3
    NUMERICAL_DESC = 4
    ALPHABETICAL_CASE_INSENSITIVE_ASC = 5
    ALPHABETICAL_CASE_INSENSITIVE_DESC = 6


class VariableHide(IntEnum):
    DONT_HIDE = 0
    HIDE_LABEL = 1
    HIDE_VARIABLE = 2


class VariableRefresh(IntEnum):
    NEVER = 0
    ON_DASHBOARD_LOAD = 1
    ON_TIME_RANGE_CHANGED = 2


@dataclass(frozen=True)
class Option:
    """One selectable choice; ``value`` is its identity."""

    text: str
    value: str
    selected: bool = False
    is_none: bool = False


@dataclass(frozen=True)
class Tag:
    """Named grouping of option values."""

    text: str
    selected: bool = False
    values: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if isinstance(self.values, list):
            object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class CurrentSelection:
    """Committed, externally visible selection of a variable."""

    text: TextOrTexts = ""
    value: TextOrTexts = ""
    tags: tuple[Tag, ...] = ()

    def __post_init__(self) -> None:
        # arrays decoded from JSON arrive as lists
        for name in ("text", "value", "tags"):
            raw = getattr(self, name)
            if isinstance(raw, list):
                object.__setattr__(self, name, tuple(raw))

    def values(self) -> tuple[str, ...]:
        """Return the selected values as a tuple regardless of arity."""
        if isinstance(self.value, tuple):
            return self.value
        return (self.value,)


@dataclass(frozen=True)
class VariableModel:
    """Definition and data of a query variable."""

    type: str = QUERY_VARIABLE_TYPE
    name: str = ""
    label: str | None = None
    is_global: bool = False
    index: int = -1
    hide: VariableHide = VariableHide.DONT_HIDE
    skip_url_sync: bool = False
    datasource: str | None = None
    query: str = ""
    regex: str = ""
    sort: VariableSort = VariableSort.DISABLED
    refresh: VariableRefresh = VariableRefresh.NEVER
    multi: bool = False
    include_all: bool = False
    all_value: str | None = None
    options: tuple[Option, ...] = ()
    current: CurrentSelection = field(default_factory=CurrentSelection)
    tags: tuple[Tag, ...] = ()
    use_tags: bool = False
    tags_query: str = ""
    tag_values_query: str = ""
    definition: str = ""
    init_lock: InitLock | None = field(default=None, compare=False)

    @property
    def key(self) -> VariableKey:
        return (self.type, self.name)


@dataclass(frozen=True)
class PickerState:
    """Dropdown state derived from, and kept in step with, the variable."""

    show_drop_down: bool = False
    link_text: TextOrTexts | None = None
    selected_values: tuple[Option, ...] = ()
    selected_tags: tuple[Tag, ...] = ()
    search_query: str | None = None
    search_options: tuple[Option, ...] = ()
    highlight_index: int = -1
    tags: tuple[Tag, ...] = ()
    options: tuple[Option, ...] = ()
    query_has_search_filter: bool = False
    old_variable_text: TextOrTexts | None = None


@dataclass(frozen=True)
class QueryVariableState:
    """Complete state of one query variable instance."""

    picker: PickerState = field(default_factory=PickerState)
    variable: VariableModel = field(default_factory=VariableModel)

    @property
    def key(self) -> VariableKey:
        return self.variable.key


INITIAL_PICKER_STATE = PickerState()
INITIAL_VARIABLE_MODEL = VariableModel()
INITIAL_QUERY_VARIABLE_STATE = QueryVariableState(
    picker=INITIAL_PICKER_STATE, variable=INITIAL_VARIABLE_MODEL
)
