"""Events consumed by the query variable state machine.

Every event except ``AddInstance`` carries the ``(type, name)`` routing key of
the variable it targets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence, Union

from qv_state.models import CurrentSelection, Option, VariableModel


@dataclass(frozen=True)
class ModifierKeys:
    """Keyboard modifiers held while an option was clicked."""

    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def any_active(self) -> bool:
        return self.ctrl or self.meta or self.shift


NO_MODIFIERS = ModifierKeys()


@dataclass(frozen=True)
class AddInstance:
    model: VariableModel
    is_global: bool = False
    index: int = -1


@dataclass(frozen=True)
class ReplaceOptionsFromResults:
    type: str
    name: str
    results: Sequence[Any] = ()


@dataclass(frozen=True)
class ReplaceTagsFromResults:
    type: str
    name: str
    results: Sequence[Any] = ()


@dataclass(frozen=True)
class SetCurrent:
    type: str
    name: str
    current: CurrentSelection = field(default_factory=CurrentSelection)


@dataclass(frozen=True)
class BeginInitLock:
    type: str
    name: str


@dataclass(frozen=True)
class ResolveInitLock:
    type: str
    name: str


@dataclass(frozen=True)
class ReleaseInitLock:
    type: str
    name: str


@dataclass(frozen=True)
class SelectOption:
    type: str
    name: str
    option: Option
    force_select: bool = False
    modifiers: ModifierKeys = NO_MODIFIERS


@dataclass(frozen=True)
class OpenDropdown:
    type: str
    name: str


@dataclass(frozen=True)
class CloseDropdown:
    type: str
    name: str


RoutedEvent = Union[
    ReplaceOptionsFromResults,
    ReplaceTagsFromResults,
    SetCurrent,
    BeginInitLock,
    ResolveInitLock,
    ReleaseInitLock,
    SelectOption,
    OpenDropdown,
    CloseDropdown,
]

VariableEvent = Union[AddInstance, RoutedEvent]
