"""
Tests for API payload parsing.
"""

from civars.models import Group, Project, Variable, VariableType


class TestVariableFromApi:
    """Tests for Variable.from_api."""

    def test_full_payload(self):
        variable = Variable.from_api({
            "key": "KUBECONFIG",
            "value": "apiVersion: v1\n",
            "environment_scope": "production",
            "variable_type": "file",
            "protected": True,
            "masked": False,
        })

        assert variable.key == "KUBECONFIG"
        assert variable.value == "apiVersion: v1\n"
        assert variable.variable_type is VariableType.FILE
        assert variable.protected is True

    def test_defaults_match_gitlab(self):
        variable = Variable.from_api({"key": "A", "value": "x"})

        assert variable.environment_scope == "*"
        assert variable.variable_type is VariableType.ENV_VAR

    def test_unknown_type_is_not_file(self):
        variable = Variable.from_api({"key": "A", "value": "x", "variable_type": "something_new"})

        assert variable.variable_type is VariableType.ENV_VAR

    def test_null_value_becomes_empty(self):
        assert Variable.from_api({"key": "A", "value": None}).value == ""

    def test_repr_hides_value(self):
        variable = Variable.from_api({"key": "A", "value": "top-secret"})

        assert "top-secret" not in repr(variable)


class TestProjectAndGroup:
    """Tests for Project and Group parsing."""

    def test_project_namespace(self):
        project = Project.from_api({
            "id": 10,
            "name": "api",
            "path_with_namespace": "acme/api",
            "namespace": {"id": 3, "kind": "group"},
        })

        assert project.namespace_id == 3
        assert project.display_name == "acme/api"

    def test_project_without_namespace(self):
        project = Project.from_api({"id": 10, "name": "api"})

        assert project.namespace_id is None
        assert project.display_name == "api"

    def test_group_full_name_falls_back_to_name(self):
        group = Group.from_api({"id": 3, "name": "acme"})

        assert group.full_name == "acme"
