"""Selection of the variables that get written to disk."""

from __future__ import annotations

from typing import Iterable, Iterator

from .models import Variable, VariableType


def keep(variable: Variable, target_scope: str) -> bool:
    """Return True for file-type variables whose scope equals target_scope exactly."""
    return (
        variable.environment_scope == target_scope
        and variable.variable_type is VariableType.FILE
    )


def select_file_variables(variables: Iterable[Variable], target_scope: str) -> Iterator[Variable]:
    for variable in variables:
        if keep(variable, target_scope):
            yield variable
