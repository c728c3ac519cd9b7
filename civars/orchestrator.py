"""
Orchestrator - Main extraction workflow controller.

Resolves the seed project's group, then fans out one task per project
onto a thread pool: fetch variables, filter by scope and kind, write the
matches to the output directory.
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import ExtractConfig
from .filters import select_file_variables
from .gitlab_client import GitLabClient
from .models import Group, Project
from .output import KeyCollision, OutputError, OutputSink
from .tools import GitLabAPIError, GitLabTools
from .utils import get_token_last4

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """A fatal failure that aborts the run."""
    def __init__(self, message: str, summary: "RunSummary | None" = None):
        super().__init__(message)
        self.summary = summary


@dataclass
class ProjectResult:
    """Outcome of extracting one project."""
    project: Project
    written: list[Path] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunSummary:
    """Everything a run produced."""
    group: Group
    projects: list[Project]
    results: list[ProjectResult] = field(default_factory=list)
    collisions: list[KeyCollision] = field(default_factory=list)

    @property
    def written(self) -> list[Path]:
        return [path for result in self.results for path in result.written]

    @property
    def failures(self) -> list[ProjectResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.failures and len(self.results) == len(self.projects)

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": {"id": self.group.id, "full_name": self.group.full_name},
            "projects": len(self.projects),
            "processed": len(self.results),
            "written": [str(path) for path in self.written],
            "collisions": [c.to_dict() for c in self.collisions],
            "failures": [
                {"project": r.project.display_name, "error": str(r.error)}
                for r in self.failures
            ],
        }


def discover_group(tools: GitLabTools, seed_project: int | str) -> tuple[Group, list[Project]]:
    """
    Resolve a seed project to its parent group and list the group's projects.

    Raises:
        ExtractionError: If any lookup fails or the seed is not in a group
    """
    try:
        project = tools.get_project(seed_project)
        if project.namespace_id is None or project.namespace_kind == "user":
            raise ExtractionError(
                f"Project {project.display_name} does not belong to a group"
            )
        group = tools.get_group(project.namespace_id)
    except GitLabAPIError as e:
        raise ExtractionError(f"Failed to get parent group: {e}") from e
    logger.debug(f"Found group: {group.full_name}")

    try:
        projects = tools.list_group_projects(group.id)
    except GitLabAPIError as e:
        raise ExtractionError(f"Failed to get projects in group: {e}") from e

    if logger.isEnabledFor(logging.DEBUG):
        for project_in_group in projects:
            logger.debug(f"Project: {project_in_group.name}")

    return group, projects


class ExtractionOrchestrator:
    """
    Orchestrates the extraction run.

    With fail_fast (the default) the first failing project aborts the run:
    queued projects are cancelled, in-flight ones finish, and
    ExtractionError is raised. Without it every project is processed and
    failures are reported in the summary.
    """

    def __init__(self, config: ExtractConfig, tools: GitLabTools | None = None):
        """
        Initialize the orchestrator.

        Args:
            config: Extraction configuration
            tools: Pre-built tools, mainly for tests; built from config if omitted
        """
        self.config = config
        self.tools = tools
        self.sink = OutputSink(config.output_dir)
        self._client: GitLabClient | None = None

    def run(self) -> RunSummary:
        """
        Run the extraction.

        Returns:
            RunSummary with per-project results

        Raises:
            ExtractionError: On discovery failure, or any project failure in fail-fast mode
        """
        try:
            self._initialize()
            group, projects = discover_group(self.tools, self.config.project_id)
            summary = RunSummary(group=group, projects=projects)
            logger.info(
                f"Extracting scope '{self.config.scope}' from {len(projects)} projects in {group.full_name}"
            )
            if projects:
                try:
                    self.sink.ensure_directory()
                except OutputError as e:
                    raise ExtractionError(str(e), summary=summary) from e
                self._fan_out(summary)
            summary.collisions = list(self.sink.collisions)
            return summary
        finally:
            self._cleanup()

    def _initialize(self) -> None:
        """Create the GitLab client and tools unless injected."""
        if self.tools is not None:
            return
        logger.debug(f"Using token ending in {get_token_last4(self.config.gitlab_token)}")
        self._client = GitLabClient(
            base_url=self.config.gitlab_base_url,
            token=self.config.gitlab_token,
            timeout=self.config.timeout,
            verify_ssl=self.config.verify_ssl,
        )
        self.tools = GitLabTools(self._client)

    def _cleanup(self) -> None:
        if self._client is not None:
            stats = self._client.stats
            logger.debug(
                f"API calls: {stats.total_calls} total, {stats.successful_calls} ok, {stats.failed_calls} failed"
            )
            self._client.close()
            self._client = None
            self.tools = None

    def _max_workers(self, project_count: int) -> int:
        if self.config.max_workers == 0:
            return project_count
        return min(self.config.max_workers, project_count)

    def _extract_project(self, project: Project) -> ProjectResult:
        """Fetch, filter and write one project's variables (runs in thread)."""
        result = ProjectResult(project=project)
        try:
            variables = self.tools.list_project_variables(project.id)
        except GitLabAPIError as e:
            result.error = e
            return result

        for variable in select_file_variables(variables, self.config.scope):
            logger.debug(
                f"Found variable: {variable.key} with scope: {variable.environment_scope} "
                f"and type: {variable.variable_type.value}"
            )
            try:
                path = self.sink.write(variable.key, variable.value, source=project.display_name)
            except OutputError as e:
                result.error = e
                return result
            result.written.append(path)
            logger.info(f"Wrote key: {variable.key} to: {path}")
        return result

    def _fan_out(self, summary: RunSummary) -> None:
        """Run one task per project on a bounded thread pool."""
        max_workers = self._max_workers(len(summary.projects))
        logger.debug(f"Starting {max_workers} workers for {len(summary.projects)} projects")

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="civars") as executor:
            futures: dict[Future, Project] = {
                executor.submit(self._extract_project, project): project
                for project in summary.projects
            }
            pending = set(futures)
            failed: ProjectResult | None = None

            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    if future.cancelled():
                        continue
                    result = self._collect(future, futures[future])
                    summary.results.append(result)
                    if result.ok:
                        continue
                    if self.config.fail_fast and failed is None:
                        # Reported by the caller through ExtractionError
                        failed = result
                        for queued in pending:
                            queued.cancel()
                    else:
                        logger.error(f"Failed to extract {result.project.display_name}: {result.error}")

        if failed is not None:
            summary.collisions = list(self.sink.collisions)
            raise ExtractionError(
                f"Extraction aborted, project {failed.project.display_name} failed: {failed.error}",
                summary=summary,
            ) from failed.error

    @staticmethod
    def _collect(future: Future, project: Project) -> ProjectResult:
        """Turn a finished future into a ProjectResult, keeping unexpected errors too."""
        try:
            return future.result()
        except Exception as e:
            return ProjectResult(project=project, error=e)


def run_extraction(config: ExtractConfig) -> RunSummary:
    """
    Run an extraction with the given configuration.

    Args:
        config: Extraction configuration

    Returns:
        RunSummary of the run
    """
    orchestrator = ExtractionOrchestrator(config)
    return orchestrator.run()
