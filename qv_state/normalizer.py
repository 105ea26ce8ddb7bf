"""Turn raw query results ("metric names") into canonical options."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping

from qv_common.errors import PatternCompileError, error_to_payload
from qv_state.models import Option, VariableSort
from qv_state.settings import DEFAULT_SETTINGS, VariableStateSettings
from qv_state.sorting import sort_options
from qv_state.templating import (
    PassthroughTemplateResolver,
    PatternCompiler,
    TemplateResolver,
    compile_js_regex,
)

logger = logging.getLogger(__name__)

_PASSTHROUGH = PassthroughTemplateResolver()


def result_field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def compile_variable_regex(
    regex_source: str | None,
    *,
    template_resolver: TemplateResolver | None = None,
    compile_pattern: PatternCompiler = compile_js_regex,
) -> re.Pattern[str] | None:
    """Resolve and compile a variable regex; None means "do not filter"."""
    if not regex_source:
        return None
    resolver = template_resolver or _PASSTHROUGH
    resolved = resolver.replace(regex_source, {}, "regex")
    if not resolved:
        return None
    try:
        return compile_pattern(resolved)
    except PatternCompileError as exc:
        logger.debug(
            "Ignoring variable regex %r: %s", regex_source, exc, extra=error_to_payload(exc)
        )
        return None


def unique_by_value(options: Iterable[Option]) -> list[Option]:
    """Drop options whose value was already seen; first occurrence wins."""
    seen: set[str] = set()
    unique: list[Option] = []
    for option in options:
        if option.value in seen:
            continue
        seen.add(option.value)
        unique.append(option)
    return unique


def normalize_results(
    regex_source: str | None,
    sort_mode: VariableSort | int,
    raw_results: Iterable[Any],
    *,
    settings: VariableStateSettings = DEFAULT_SETTINGS,
    template_resolver: TemplateResolver | None = None,
    compile_pattern: PatternCompiler = compile_js_regex,
) -> tuple[Option, ...]:
    """Convert raw ``{text, value}`` results into sorted, deduplicated options.

    A missing ``text`` falls back to ``value`` and vice versa. When a regex
    is configured, results whose value does not match are dropped and, if
    the regex captures, the first group replaces both text and value; a
    match where that group did not participate is dropped.
    """
    pattern = compile_variable_regex(
        regex_source,
        template_resolver=template_resolver,
        compile_pattern=compile_pattern,
    )

    options: list[Option] = []
    for item in raw_results:
        raw_text = result_field(item, "text")
        raw_value = result_field(item, "value")
        text = _as_text(raw_value if raw_text is None else raw_text)
        value = _as_text(raw_text if raw_value is None else raw_value)

        if pattern is not None:
            matches = pattern.search(value)
            if not matches:
                continue
            if pattern.groups >= 1:
                captured = matches.group(1)
                if captured is None:
                    # group 1 sat in a branch that did not match
                    continue
                value = text = captured

        options.append(Option(text=text, value=value, selected=False))

    return sort_options(unique_by_value(options), sort_mode, settings)
