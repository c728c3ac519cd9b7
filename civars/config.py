"""Configuration management for civars."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")
LOG_FORMATS = ("text", "json")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class ExtractConfig:
    """Configuration for a single extraction run."""

    # Required settings
    gitlab_token: str
    project_id: str
    scope: str

    # Optional settings with defaults
    gitlab_base_url: str = "https://gitlab.com"
    output_dir: str = "."
    max_workers: int = 8  # 0 = one worker per project
    fail_fast: bool = True
    timeout: int = 30
    verify_ssl: bool = True
    log_level: str = "INFO"
    log_format: str = "text"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.gitlab_token:
            raise ValueError("gitlab_token is required")
        if not self.project_id:
            raise ValueError("project_id is required")
        if not self.scope:
            raise ValueError("scope is required")
        if not self.gitlab_base_url:
            raise ValueError("gitlab_base_url is required")
        if self.max_workers < 0:
            raise ValueError("max_workers must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        self.project_id = str(self.project_id).strip()

        # Normalize base URL (remove trailing slash)
        self.gitlab_base_url = self.gitlab_base_url.rstrip("/")

        # Empty output dir means the current working directory
        self.output_dir = os.path.expanduser(self.output_dir or ".")

        self.log_level = self.log_level.upper()
        if self.log_level == "WARNING":
            self.log_level = "WARN"
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        self.log_format = self.log_format.lower()
        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")

    @classmethod
    def from_env(cls, **overrides) -> "ExtractConfig":
        """Create configuration from environment variables with optional overrides."""
        load_dotenv()

        config_dict = {
            "gitlab_base_url": os.getenv("GITLAB_BASE_URL", "https://gitlab.com"),
            "gitlab_token": os.getenv("GITLAB_TOKEN", ""),
            "project_id": os.getenv("GITLAB_PROJECT", ""),
            "scope": os.getenv("CI_SCOPE", ""),
            "output_dir": os.getenv("OUTPUT_DIR", "."),
            "max_workers": int(os.getenv("MAX_WORKERS", "8")),
            "fail_fast": _env_bool("FAIL_FAST", "true"),
            "timeout": int(os.getenv("TIMEOUT", "30")),
            "verify_ssl": _env_bool("VERIFY_SSL", "true"),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "log_format": os.getenv("LOG_FORMAT", "text"),
        }

        # Apply overrides (filter out None values from CLI)
        for key, value in overrides.items():
            if value is not None:
                config_dict[key] = value

        return cls(**config_dict)

