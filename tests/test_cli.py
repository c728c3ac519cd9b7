"""
Tests for the command line entry point.
"""

from unittest.mock import patch

import pytest

from civars.__main__ import main, parse_args
from civars.models import Group, Project
from civars.orchestrator import ExtractionError, ProjectResult, RunSummary

ARGS = ["-t", "glpat-test", "-p", "42", "-s", "prod"]


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    for name in ("GITLAB_TOKEN", "GITLAB_PROJECT", "CI_SCOPE", "LOG_LEVEL", "LOG_FORMAT", "FAIL_FAST", "MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    with patch("civars.config.load_dotenv"):
        yield


def summary_with(results=None, projects=None):
    projects = projects or [Project(id=1, name="a", path_with_namespace="acme/a")]
    summary = RunSummary(group=Group(id=7, name="acme"), projects=projects)
    summary.results = results if results is not None else [ProjectResult(project=projects[0])]
    return summary


class TestParseArgs:
    """Tests for argument parsing."""

    def test_short_flags(self):
        args = parse_args(ARGS + ["-o", "/tmp/out", "-d", "debug"])

        assert args.token == "glpat-test"
        assert args.project_id == "42"
        assert args.scope == "prod"
        assert args.output_dir == "/tmp/out"
        assert args.log_level == "DEBUG"

    def test_legacy_project_id_flag(self):
        assert parse_args(["--projectId", "7"]).project_id == "7"

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            parse_args(ARGS + ["-d", "TRACE"])


class TestMain:
    """Tests for exit codes."""

    def test_success(self, tmp_path):
        with patch("civars.__main__.run_extraction", return_value=summary_with()) as run:
            assert main(ARGS + ["-o", str(tmp_path), "--max-workers", "3"]) == 0

        config = run.call_args[0][0]
        assert config.scope == "prod"
        assert config.output_dir == str(tmp_path)
        assert config.max_workers == 3
        assert config.fail_fast is True

    def test_keep_going_flag(self):
        with patch("civars.__main__.run_extraction", return_value=summary_with()) as run:
            main(ARGS + ["--keep-going"])

        assert run.call_args[0][0].fail_fast is False

    def test_missing_scope_is_config_error(self):
        with patch("civars.__main__.run_extraction") as run:
            assert main(["-t", "glpat-test", "-p", "42"]) == 1
        run.assert_not_called()

    def test_fatal_error_exits_non_zero(self):
        with patch("civars.__main__.run_extraction", side_effect=ExtractionError("Failed to get parent group")):
            assert main(ARGS) == 1

    def test_reported_failures_exit_non_zero(self):
        project = Project(id=1, name="a", path_with_namespace="acme/a")
        failed = ProjectResult(project=project, error=RuntimeError("403"))

        with patch("civars.__main__.run_extraction", return_value=summary_with([failed], [project])):
            assert main(ARGS + ["--keep-going"]) == 1

    def test_interrupt(self):
        with patch("civars.__main__.run_extraction", side_effect=KeyboardInterrupt):
            assert main(ARGS) == 130

    def test_debug_logs_run_summary(self, capsys):
        """Test that the summary dict is logged as JSON at DEBUG."""
        with patch("civars.__main__.run_extraction", return_value=summary_with()):
            assert main(ARGS + ["-d", "DEBUG"]) == 0

        out = capsys.readouterr().out
        assert "Run summary: " in out
        assert '"processed": 1' in out
