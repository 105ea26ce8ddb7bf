"""Shared fixtures for qv_state tests."""

import pytest

from qv_state.models import Option, QueryVariableState, VariableModel


@pytest.fixture
def make_state():
    """Build a query variable state with the given option values."""

    def _make(values=(), *, selected=(), multi=False, include_all=False, **variable_kwargs):
        options = tuple(
            Option(text=value, value=value, selected=value in selected) for value in values
        )
        variable = VariableModel(
            name=variable_kwargs.pop("name", "server"),
            multi=multi,
            include_all=include_all,
            options=options,
            **variable_kwargs,
        )
        return QueryVariableState(variable=variable)

    return _make
