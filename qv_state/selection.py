"""Selection transitions and the picker post-processing pipeline."""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial
from typing import Any, Callable, Iterable

from qv_state.events import NO_MODIFIERS, ModifierKeys
from qv_state.models import CurrentSelection, Option, QueryVariableState, Tag
from qv_state.normalizer import normalize_results, result_field
from qv_state.settings import DEFAULT_SETTINGS, VariableStateSettings
from qv_state.templating import PatternCompiler, TemplateResolver, compile_js_regex

logger = logging.getLogger(__name__)

MutateStateFunc = Callable[[QueryVariableState], QueryVariableState]


def apply_state_changes(
    state: QueryVariableState, *steps: MutateStateFunc
) -> QueryVariableState:
    """Thread ``state`` through ``steps`` in order."""
    for step in steps:
        state = step(state)
    return state


def _with_picker(state: QueryVariableState, **changes: Any) -> QueryVariableState:
    return replace(state, picker=replace(state.picker, **changes))


def _with_variable(state: QueryVariableState, **changes: Any) -> QueryVariableState:
    return replace(state, variable=replace(state.variable, **changes))


def update_link_text(
    state: QueryVariableState, settings: VariableStateSettings = DEFAULT_SETTINGS
) -> QueryVariableState:
    """Derive the picker link text from the current selection.

    With tags selected, options already implied by a tag are left out and a
    trailing separator tells the renderer that tag names follow.
    """
    current = state.variable.current
    if not current.tags:
        return _with_picker(state, link_text=current.text)

    tagged_values: set[str] = set()
    for tag in current.tags:
        tagged_values.update(tag.values or ())

    texts = [
        option.text
        for option in state.variable.options
        if option.selected and option.value not in tagged_values
    ]
    link_text = settings.text_separator.join(texts)
    if link_text:
        link_text = f"{link_text}{settings.text_separator}"
    return _with_picker(state, link_text=link_text)


def update_options(
    state: QueryVariableState, settings: VariableStateSettings = DEFAULT_SETTINGS
) -> QueryVariableState:
    return _with_picker(state, options=state.variable.options[: settings.display_limit])


def update_selected_values(state: QueryVariableState) -> QueryVariableState:
    return _with_picker(
        state, selected_values=tuple(o for o in state.variable.options if o.selected)
    )


def update_selected_tags(state: QueryVariableState) -> QueryVariableState:
    return _with_picker(
        state, selected_tags=tuple(t for t in state.variable.tags if t.selected)
    )


def picker_pipeline(
    settings: VariableStateSettings = DEFAULT_SETTINGS,
) -> tuple[MutateStateFunc, ...]:
    """Steps run after every selection-affecting transition, in order."""
    return (
        partial(update_link_text, settings=settings),
        partial(update_options, settings=settings),
        update_selected_values,
        update_selected_tags,
    )


def replace_options(
    state: QueryVariableState,
    results: Iterable[Any],
    *,
    settings: VariableStateSettings = DEFAULT_SETTINGS,
    template_resolver: TemplateResolver | None = None,
    compile_pattern: PatternCompiler = compile_js_regex,
) -> QueryVariableState:
    """Replace the option list from fresh query results.

    The picker is not refreshed here; selection is re-derived by a following
    ``SetCurrent``.
    """
    variable = state.variable
    options = list(
        normalize_results(
            variable.regex,
            variable.sort,
            results,
            settings=settings,
            template_resolver=template_resolver,
            compile_pattern=compile_pattern,
        )
    )
    if variable.include_all:
        options.insert(0, Option(text=settings.all_text, value=settings.all_value))
    if not options:
        options.append(
            Option(text=settings.none_text, value=settings.none_value, is_none=True)
        )
    logger.debug("Variable %s now has %d options", variable.name, len(options))
    return _with_variable(state, options=tuple(options))


def replace_tags(state: QueryVariableState, results: Iterable[Any]) -> QueryVariableState:
    tags = []
    for result in results:
        tags.append(Tag(text=result_field(result, "text"), selected=False))
    return _with_variable(state, tags=tuple(tags))


def _normalize_current(
    current: CurrentSelection, settings: VariableStateSettings
) -> CurrentSelection:
    if isinstance(current.text, tuple) and current.text:
        return replace(current, text=settings.text_separator.join(current.text))
    if isinstance(current.value, tuple) and (
        not current.value or current.value[0] != settings.all_value
    ):
        return replace(current, text=settings.text_separator.join(current.value))
    return current


def set_current(
    state: QueryVariableState,
    current: CurrentSelection,
    *,
    settings: VariableStateSettings = DEFAULT_SETTINGS,
) -> QueryVariableState:
    """Commit ``current`` and mark the matching options as selected."""
    current = _normalize_current(current, settings)
    selected_values = set(current.values())
    options = tuple(
        replace(option, selected=option.value in selected_values)
        for option in state.variable.options
    )
    new_state = _with_variable(state, current=current, options=options)
    return apply_state_changes(new_state, *picker_pipeline(settings))


def select_option(
    state: QueryVariableState,
    option: Option,
    *,
    force_select: bool = False,
    modifiers: ModifierKeys = NO_MODIFIERS,
    settings: VariableStateSettings = DEFAULT_SETTINGS,
) -> QueryVariableState:
    """Toggle ``option`` following single/multi-select and All semantics.

    The option list never ends up with nothing selected: if the toggle
    cleared everything, the first option is selected instead.
    """
    multi = state.variable.multi
    chosen_is_all = option.value == settings.all_value
    new_options: list[Option] = []
    for existing in state.variable.options:
        if existing.value == option.value:
            selected = True if force_select else (not option.selected if multi else True)
        else:
            selected = existing.selected
            if chosen_is_all or existing.value == settings.all_value:
                selected = False
            elif not multi:
                selected = False
            elif modifiers.any_active:
                selected = False
        new_options.append(replace(existing, selected=selected))

    if new_options and not any(o.selected for o in new_options):
        new_options[0] = replace(new_options[0], selected=True)

    new_state = _with_variable(state, options=tuple(new_options))
    return apply_state_changes(new_state, *picker_pipeline(settings))


def show_drop_down(
    state: QueryVariableState, *, settings: VariableStateSettings = DEFAULT_SETTINGS
) -> QueryVariableState:
    """Open the dropdown, remembering the text shown before it opened."""
    picker = state.picker
    # a search-filtered query keeps the last typed search
    search_query = (
        picker.search_query
        if picker.query_has_search_filter and picker.search_query
        else ""
    )
    new_state = _with_picker(
        state,
        old_variable_text=state.variable.current.text,
        highlight_index=-1,
        search_query=search_query,
        show_drop_down=True,
    )
    return apply_state_changes(new_state, *picker_pipeline(settings))


def hide_drop_down(
    state: QueryVariableState, *, settings: VariableStateSettings = DEFAULT_SETTINGS
) -> QueryVariableState:
    new_state = _with_picker(state, show_drop_down=False)
    return apply_state_changes(new_state, *picker_pipeline(settings))
