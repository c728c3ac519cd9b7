"""
GitLab API Tools - the lookups the extraction run performs.

Every call issues exactly one request and converts the JSON payload into
the dataclasses in models.py. Failures raise GitLabAPIError.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from .gitlab_client import GitLabClient, GitLabClientError
from .models import Group, Project, Variable

logger = logging.getLogger(__name__)


class GitLabAPIError(GitLabClientError):
    """A lookup against the GitLab API failed."""


class GitLabTools:
    """
    Collection of GitLab API lookups used by the extraction run.

    Pagination is not followed: each listing returns the first page only,
    with the largest page size GitLab allows.
    """

    PER_PAGE = 100

    def __init__(self, client: GitLabClient):
        """
        Initialize tools with a GitLab client.

        Args:
            client: Configured GitLabClient instance
        """
        self.client = client

    def _encode_path(self, path: str) -> str:
        """URL-encode a path for GitLab API."""
        return quote(path, safe="")

    def _make_project_path(self, project_id: int | str) -> str:
        """Create API path for a project (handles both ID and path)."""
        if isinstance(project_id, int) or project_id.isdigit():
            return f"/api/v4/projects/{project_id}"
        return f"/api/v4/projects/{self._encode_path(str(project_id))}"

    def _fetch(self, path: str, what: str, params: dict[str, Any] | None = None) -> Any:
        try:
            return self.client.get_json(path, params)
        except GitLabClientError as e:
            raise GitLabAPIError(
                f"Failed to get {what}: {e}",
                status_code=e.status_code,
                response=e.response,
            ) from e

    def _fetch_list(self, path: str, what: str) -> list[dict[str, Any]]:
        data = self._fetch(path, what, params={"per_page": self.PER_PAGE})
        if not isinstance(data, list):
            raise GitLabAPIError(f"Failed to get {what}: expected a list, got {type(data).__name__}")
        return data

    def get_project(self, project_id: int | str) -> Project:
        """
        Get a project by numeric ID or full path.

        Args:
            project_id: Numeric ID or path such as "group/project"
        """
        data = self._fetch(self._make_project_path(project_id), f"project {project_id}")
        return Project.from_api(data)

    def get_group(self, group_id: int) -> Group:
        """Get a group by numeric ID."""
        data = self._fetch(f"/api/v4/groups/{group_id}", f"group {group_id}")
        return Group.from_api(data)

    def list_group_projects(self, group_id: int) -> list[Project]:
        """
        List projects owned directly by a group, in API order.

        Args:
            group_id: Group ID
        """
        items = self._fetch_list(f"/api/v4/groups/{group_id}/projects", f"projects in group {group_id}")
        return [Project.from_api(item) for item in items]

    def list_project_variables(self, project_id: int) -> list[Variable]:
        """
        List every CI/CD variable of a project (all scopes, all kinds).

        Args:
            project_id: Project ID
        """
        items = self._fetch_list(
            f"{self._make_project_path(project_id)}/variables",
            f"variables in project {project_id}",
        )
        return [Variable.from_api(item) for item in items]
