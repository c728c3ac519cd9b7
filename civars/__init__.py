"""
civars - Extract file-type GitLab CI/CD variables for an environment scope.

Resolves a seed project to its parent group, scans every project in that
group and writes each matching variable's value to <output_dir>/<key>.
"""

__version__ = "0.1.0"

from .config import ExtractConfig
from .gitlab_client import GitLabClient
from .orchestrator import ExtractionOrchestrator, run_extraction

__all__ = [
    "ExtractConfig",
    "GitLabClient",
    "ExtractionOrchestrator",
    "run_extraction",
    "__version__",
]
