"""Template substitution and regex compilation collaborators."""

from __future__ import annotations

import re
from typing import Mapping, Protocol, Sequence, Union, runtime_checkable

from qv_common.errors import PatternCompileError


TemplateValue = Union[str, Sequence[str]]
TemplateScope = Mapping[str, TemplateValue]

_VARIABLE_RE = re.compile(
    r"\$(\w+)|\[\[([\s\S]+?)(?::(\w+))?\]\]|\$\{(\w+)(?::(\w+))?\}"
)
_JS_REGEX_RE = re.compile(r"^/(.*)/([gimsuy]*)$", re.DOTALL)
_JS_NAMED_GROUP_RE = re.compile(r"\(\?<(?![=!])")
_JS_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}


@runtime_checkable
class TemplateResolver(Protocol):
    """Resolve ``$variable`` references inside a template string."""

    def replace(
        self, target: str, scope: TemplateScope | None = None, fmt: str | None = None
    ) -> str:
        """Return ``target`` with every known variable reference substituted."""


@runtime_checkable
class PatternCompiler(Protocol):
    """Translate a textual regex into an executable matcher."""

    def __call__(self, source: str) -> re.Pattern[str]:
        """Compile ``source``; raise PatternCompileError when it is invalid."""


class PassthroughTemplateResolver:
    """Resolver for callers without template variables."""

    def replace(
        self, target: str, scope: TemplateScope | None = None, fmt: str | None = None
    ) -> str:
        return target


def _format_value(value: TemplateValue, fmt: str | None) -> str:
    if isinstance(value, str):
        return re.escape(value) if fmt == "regex" else value
    values = list(value)
    if fmt == "regex":
        escaped = [re.escape(item) for item in values]
        if len(escaped) == 1:
            return escaped[0]
        return "(" + "|".join(escaped) + ")"
    if fmt == "pipe":
        return "|".join(values)
    return ",".join(values)


class ScopedTemplateResolver:
    """Substitute ``$name``, ``${name}`` and ``[[name]]`` from a variable mapping.

    Values passed in ``scope`` take precedence over the resolver's own
    variables. An explicit format in the reference (``${name:pipe}``) wins
    over the ``fmt`` argument. Unknown names are left as written.
    """

    def __init__(self, variables: TemplateScope | None = None) -> None:
        self._variables: dict[str, TemplateValue] = dict(variables or {})

    def replace(
        self, target: str, scope: TemplateScope | None = None, fmt: str | None = None
    ) -> str:
        if not target:
            return target
        lookup: dict[str, TemplateValue] = dict(self._variables)
        lookup.update(scope or {})

        def _substitute(match: re.Match[str]) -> str:
            name = match.group(1) or match.group(2) or match.group(4)
            explicit_fmt = match.group(3) or match.group(5)
            if name not in lookup:
                return match.group(0)
            return _format_value(lookup[name], explicit_fmt or fmt)

        return _VARIABLE_RE.sub(_substitute, target)


def compile_js_regex(source: str) -> re.Pattern[str]:
    """Compile a dashboard regex string.

    ``/pattern/flags`` literals keep their flags (``i``, ``m``, ``s``; ``g``,
    ``u`` and ``y`` carry no meaning for a single search and are dropped).
    Anything else is anchored as ``^source$``.
    """
    literal = _JS_REGEX_RE.match(source)
    if source.startswith("/"):
        if not literal:
            raise PatternCompileError(
                f"'{source}' is not a valid regular expression.",
                context={"source": source},
            )
        pattern, flag_chars = literal.group(1), literal.group(2)
    else:
        pattern, flag_chars = f"^{source}$", ""

    flags = 0
    for char in flag_chars:
        flags |= _JS_FLAGS.get(char, 0)
    pattern = _JS_NAMED_GROUP_RE.sub("(?P<", pattern)
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        raise PatternCompileError(
            f"'{source}' is not a valid regular expression.",
            context={"source": source, "reason": str(exc)},
            cause=exc,
        ) from exc
