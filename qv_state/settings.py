"""Domain constants for query variables, exposed as configuration."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from qv_common.config.env import parse_int_env, parse_str_env
from qv_common.errors import ConfigurationError, wrap_error

ALL_VARIABLE_TEXT = "All"
ALL_VARIABLE_VALUE = "$__all"
NONE_VARIABLE_TEXT = "None"
NONE_VARIABLE_VALUE = ""
DISPLAY_LIMIT = 1000
NUMERIC_SORT_PATTERN = r".*?(\d+).*"
TEXT_SEPARATOR = " + "

_ENV_FIELDS = {
    "QV_ALL_TEXT": "all_text",
    "QV_ALL_VALUE": "all_value",
    "QV_NONE_TEXT": "none_text",
    "QV_NONE_VALUE": "none_value",
    "QV_NUMERIC_SORT_PATTERN": "numeric_sort_pattern",
}


class VariableStateSettings(BaseModel):
    """Sentinels, limits and patterns used by the variable state machine."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    all_text: str = Field(default=ALL_VARIABLE_TEXT, description="Display text of the synthetic All option")
    all_value: str = Field(default=ALL_VARIABLE_VALUE, description="Sentinel value of the synthetic All option")
    none_text: str = Field(default=NONE_VARIABLE_TEXT, description="Display text of the synthetic None option")
    none_value: str = Field(default=NONE_VARIABLE_VALUE, description="Value of the synthetic None option")
    display_limit: int = Field(default=DISPLAY_LIMIT, gt=0, description="Maximum options handed to the picker")
    numeric_sort_pattern: str = Field(
        default=NUMERIC_SORT_PATTERN,
        description="Regex whose first group yields the numeric sort key",
    )
    text_separator: str = Field(default=TEXT_SEPARATOR, description="Separator for joined selection texts")

    @field_validator("numeric_sort_pattern")
    @classmethod
    def validate_numeric_pattern(cls, value: str) -> str:
        try:
            compiled = re.compile(value)
        except re.error as exc:
            raise ValueError(f"numeric_sort_pattern does not compile: {exc}") from exc
        if compiled.groups < 1:
            raise ValueError("numeric_sort_pattern must contain a capture group")
        return value

    @property
    def numeric_sort_regex(self) -> re.Pattern[str]:
        # cached by re
        return re.compile(self.numeric_sort_pattern)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VariableStateSettings":
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise wrap_error(
                ConfigurationError,
                "Invalid variable state settings",
                context={"errors": exc.errors(include_url=False)},
                cause=exc,
            ) from exc

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> "VariableStateSettings":
        """Build settings from ``QV_*`` environment variables.

        Keyword overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for env_name, field_name in _ENV_FIELDS.items():
            value = parse_str_env(env.get(env_name))
            if value is not None:
                data[field_name] = value
        separator = parse_str_env(env.get("QV_TEXT_SEPARATOR"), strip=False)
        if separator:
            data["text_separator"] = separator
        raw_limit = env.get("QV_DISPLAY_LIMIT")
        if raw_limit is not None:
            limit = parse_int_env(raw_limit)
            if limit is None:
                raise ConfigurationError(
                    "QV_DISPLAY_LIMIT must be an integer", context={"value": raw_limit}
                )
            data["display_limit"] = limit
        data.update(overrides)
        return cls.from_dict(data)

    @classmethod
    def load(cls, filepath: Path | str) -> "VariableStateSettings":
        """Load settings from a YAML or JSON file."""
        path = Path(filepath)
        if not path.exists():
            raise ConfigurationError(
                f"Settings file not found: {path}", context={"path": path}
            )
        text = path.read_text(encoding="utf-8")
        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                f"Settings file is not valid: {path}", context={"path": path}, cause=exc
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Settings file must contain a mapping at the top level.",
                context={"path": path},
            )
        return cls.from_dict(data)


DEFAULT_SETTINGS = VariableStateSettings()
