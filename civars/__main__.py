#!/usr/bin/env python3
"""
CLI entry point for civars.

Usage:
    python -m civars --token TOKEN --project-id 123 --scope production --dir ./secrets

Or with environment variables in .env file:
    python -m civars --scope production
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from . import __version__
from .config import LOG_FORMATS, LOG_LEVELS, ExtractConfig
from .logging_config import parse_log_level, setup_logging
from .orchestrator import ExtractionError, run_extraction


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="civars",
        description="Write file-type GitLab CI/CD variables of an environment scope to disk",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Every project in the seed project's parent group is scanned. Each variable
of type "file" whose environment scope equals --scope is written to
<dir>/<KEY> with its raw value.

Examples:
  # Extract production file variables into ./secrets
  python -m civars -t glpat-xxx -p 1234 -s production -o ./secrets

  # Seed by project path and keep going past failing projects
  python -m civars -t glpat-xxx -p mygroup/deploy -s staging --keep-going

Environment Variables (can be set in .env):
  GITLAB_BASE_URL                 GitLab instance URL (default: https://gitlab.com)
  GITLAB_TOKEN                    Personal Access Token
  GITLAB_PROJECT                  Seed project ID or path
  CI_SCOPE                        Environment scope to extract
  OUTPUT_DIR                      Output directory (default: current directory)
  MAX_WORKERS                     Concurrent projects (default: 8, 0 = one per project)
  FAIL_FAST                       Abort on the first failing project (default: true)
  LOG_LEVEL                       DEBUG, INFO, WARN or ERROR (default: INFO)

Required Token Scopes:
  - read_api, and Maintainer role on the projects (to read variables)
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Connection settings
    parser.add_argument(
        "--base-url",
        metavar="URL",
        help="GitLab instance URL (e.g., https://gitlab.com)",
    )
    parser.add_argument(
        "-t", "--token",
        metavar="TOKEN",
        help="GitLab Token",
    )
    parser.add_argument(
        "-p", "--project-id", "--projectId",
        dest="project_id",
        metavar="PROJECT",
        help="GitLab Project ID or path; its parent group is scanned",
    )
    parser.add_argument(
        "-s", "--scope",
        metavar="SCOPE",
        help="EnvironmentScope for variables",
    )

    # Output settings
    parser.add_argument(
        "-o", "--dir",
        dest="output_dir",
        metavar="DIR",
        help="Output directory, if not set CWD will be used.",
    )

    # Run behavior
    parser.add_argument(
        "--max-workers",
        metavar="N",
        type=int,
        help="Projects processed concurrently (default: 8, 0 = one per project)",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Process every project even if some fail, then report the failures",
    )

    # Logging
    parser.add_argument(
        "-d", "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        help="Log output format (default: text)",
    )

    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Logging is set up before config validation so errors are visible
    setup_logging(
        level=parse_log_level(args.log_level or "INFO"),
        json_format=args.log_format == "json",
    )
    logger = logging.getLogger("civars")

    try:
        config = ExtractConfig.from_env(
            gitlab_base_url=args.base_url,
            gitlab_token=args.token,
            project_id=args.project_id,
            scope=args.scope,
            output_dir=args.output_dir,
            max_workers=args.max_workers,
            fail_fast=False if args.keep_going else None,
            log_level=args.log_level,
            log_format=args.log_format,
        )
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Please provide required settings via CLI arguments or .env file")
        return 1

    # LOG_LEVEL / LOG_FORMAT may have come from the environment
    setup_logging(
        level=parse_log_level(config.log_level),
        json_format=config.log_format == "json",
    )
    logger.debug(
        f"Configuration: base_url={config.gitlab_base_url}, project={config.project_id}, "
        f"scope={config.scope}, dir={config.output_dir}, max_workers={config.max_workers}, "
        f"fail_fast={config.fail_fast}"
    )

    try:
        summary = run_extraction(config)

    except KeyboardInterrupt:
        logger.warning("Extraction interrupted by user")
        return 130

    except ExtractionError as e:
        logger.error(str(e))
        return 1

    except Exception as e:
        logger.exception(f"Extraction failed: {e}")
        return 1

    logger.debug(f"Run summary: {json.dumps(summary.to_dict())}")
    logger.info(
        f"Extraction complete: {len(summary.projects)} projects, "
        f"{len(summary.written)} files written, {len(summary.collisions)} key collisions, "
        f"{len(summary.failures)} failures"
    )
    return 0 if summary.ok else 1


if __name__ == "__main__":
    sys.exit(main())
