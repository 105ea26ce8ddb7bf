"""Option ordering by sort mode."""

from __future__ import annotations

import math
from typing import Iterable

from qv_state.models import Option, VariableSort
from qv_state.settings import DEFAULT_SETTINGS, VariableStateSettings


def decode_sort_mode(mode: VariableSort | int) -> tuple[int, bool]:
    """Split a sort mode into ``(sort_type, reverse)``."""
    value = int(mode)
    return math.ceil(value / 2), value % 2 == 0


def numeric_sort_key(
    text: str, settings: VariableStateSettings = DEFAULT_SETTINGS
) -> int | float:
    """Return the first integer found in ``text``, or -1 when there is none.

    Digit runs too long to convert compare as infinite, keeping their
    arrival order among themselves.
    """
    match = settings.numeric_sort_regex.search(text)
    if not match or match.group(1) is None:
        return -1
    digits = match.group(1)
    try:
        return int(digits)
    except ValueError:
        if digits.isdecimal():
            return math.inf
        if digits.startswith("-") and digits[1:].isdecimal():
            return -math.inf
        return -1


def sort_options(
    options: Iterable[Option],
    mode: VariableSort | int,
    settings: VariableStateSettings = DEFAULT_SETTINGS,
) -> tuple[Option, ...]:
    """Return ``options`` ordered by ``mode``; the input is never mutated.

    ``sorted`` is stable, so ties keep their arrival order. Descending modes
    reverse the ascending result as a whole.
    """
    items = tuple(options)
    if int(mode) == VariableSort.DISABLED:
        return items

    sort_type, reverse = decode_sort_mode(mode)
    if sort_type == 1:
        items = tuple(sorted(items, key=lambda opt: opt.text))
    elif sort_type == 2:
        items = tuple(sorted(items, key=lambda opt: numeric_sort_key(opt.text, settings)))
    elif sort_type == 3:
        items = tuple(sorted(items, key=lambda opt: opt.text.casefold()))

    if reverse:
        items = items[::-1]
    return items
