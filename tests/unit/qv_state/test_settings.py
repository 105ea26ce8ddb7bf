"""Tests for variable state settings."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from qv_common.errors import ConfigurationError
from qv_state.settings import DEFAULT_SETTINGS, VariableStateSettings


pytestmark = pytest.mark.unit_state


def test_defaults() -> None:
    assert DEFAULT_SETTINGS.all_text == "All"
    assert DEFAULT_SETTINGS.all_value == "$__all"
    assert DEFAULT_SETTINGS.none_text == "None"
    assert DEFAULT_SETTINGS.none_value == ""
    assert DEFAULT_SETTINGS.display_limit == 1000
    assert DEFAULT_SETTINGS.text_separator == " + "


def test_from_env_reads_overrides() -> None:
    settings = VariableStateSettings.from_env(
        {
            "QV_ALL_VALUE": " __all__ ",
            "QV_DISPLAY_LIMIT": "50",
            "QV_TEXT_SEPARATOR": ", ",
        }
    )
    assert settings.all_value == "__all__"
    assert settings.display_limit == 50
    assert settings.text_separator == ", "


def test_from_env_keyword_overrides_win() -> None:
    settings = VariableStateSettings.from_env({"QV_DISPLAY_LIMIT": "50"}, display_limit=10)
    assert settings.display_limit == 10


def test_from_env_rejects_non_integer_limit() -> None:
    with pytest.raises(ConfigurationError):
        VariableStateSettings.from_env({"QV_DISPLAY_LIMIT": "many"})


@pytest.mark.parametrize(
    "data",
    [
        {"display_limit": 0},
        {"numeric_sort_pattern": "("},
        {"numeric_sort_pattern": r"\d+"},
        {"unknown": 1},
    ],
)
def test_invalid_values_raise_configuration_error(data: dict) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        VariableStateSettings.from_dict(data)
    assert excinfo.value.context["errors"]


def test_invalid_values_keep_validation_cause() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        VariableStateSettings.from_dict({"display_limit": -1})
    assert isinstance(excinfo.value.__cause__, ValidationError)
    assert excinfo.value.error_type == "ConfigurationError"


def test_load_yaml(tmp_path: Path) -> None:
    path = tmp_path / "variables.yaml"
    path.write_text("all_text: Everything\ndisplay_limit: 200\n", encoding="utf-8")
    settings = VariableStateSettings.load(path)
    assert settings.all_text == "Everything"
    assert settings.display_limit == 200


def test_load_json(tmp_path: Path) -> None:
    path = tmp_path / "variables.json"
    path.write_text(json.dumps({"none_text": "-"}), encoding="utf-8")
    assert VariableStateSettings.load(path).none_text == "-"


def test_load_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "variables.yml"
    path.write_text("", encoding="utf-8")
    assert VariableStateSettings.load(path) == DEFAULT_SETTINGS


def test_load_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "variables.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        VariableStateSettings.load(path)


def test_load_rejects_broken_file(tmp_path: Path) -> None:
    path = tmp_path / "variables.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        VariableStateSettings.load(path)


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        VariableStateSettings.load(tmp_path / "nope.yaml")


def test_settings_are_frozen() -> None:
    with pytest.raises(Exception):
        DEFAULT_SETTINGS.display_limit = 5  # type: ignore[misc]
