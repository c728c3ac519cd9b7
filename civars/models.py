"""
Type definitions for groups, projects and CI/CD variables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class VariableType(str, Enum):
    """GitLab CI/CD variable kinds."""
    ENV_VAR = "env_var"
    FILE = "file"


@dataclass(frozen=True)
class Group:
    """A GitLab group owning zero or more projects."""
    id: int
    name: str
    full_name: str = ""
    full_path: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Group":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            full_name=data.get("full_name") or data.get("name", ""),
            full_path=data.get("full_path", ""),
        )


@dataclass(frozen=True)
class Project:
    """Snapshot of a project, read-only for the rest of the run."""
    id: int
    name: str
    path_with_namespace: str = ""
    namespace_id: int | None = None
    namespace_kind: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Project":
        namespace = data.get("namespace") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            path_with_namespace=data.get("path_with_namespace", ""),
            namespace_id=namespace.get("id"),
            namespace_kind=namespace.get("kind"),
        )

    @property
    def display_name(self) -> str:
        return self.path_with_namespace or self.name or str(self.id)


@dataclass(frozen=True)
class Variable:
    """A project-level CI/CD variable."""
    key: str
    value: str = field(repr=False)
    environment_scope: str = "*"
    variable_type: VariableType = VariableType.ENV_VAR
    protected: bool = False
    masked: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Variable":
        raw_type = data.get("variable_type") or VariableType.ENV_VAR.value
        try:
            variable_type = VariableType(raw_type)
        except ValueError:
            # Unknown kinds are kept as env vars so they never match the file filter
            variable_type = VariableType.ENV_VAR
        value = data.get("value")
        return cls(
            key=data["key"],
            value="" if value is None else value,
            environment_scope=data.get("environment_scope") or "*",
            variable_type=variable_type,
            protected=bool(data.get("protected", False)),
            masked=bool(data.get("masked", False)),
        )
