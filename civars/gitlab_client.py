"""
GitLab REST API client.

Supports both GitLab SaaS and self-managed instances.
Only performs GET requests. One request per call, no retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any
from urllib.parse import urljoin

import requests
from requests.exceptions import RequestException

from . import __version__
from .utils import mask_sensitive_data

logger = logging.getLogger(__name__)


@dataclass
class APICallStats:
    """Track API call statistics."""
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0


class GitLabClientError(Exception):
    """Base exception for GitLab client errors."""
    def __init__(self, message: str, status_code: int | None = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class GitLabClient:
    """
    Thin GitLab REST API client shared by all worker threads.

    Usage:
        with GitLabClient("https://gitlab.com", "your-token") as client:
            project = client.get_json("/api/v4/projects/123")
    """

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: int = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
    ):
        """
        Initialize GitLab client.

        Args:
            base_url: GitLab instance URL (e.g., "https://gitlab.com")
            token: Personal Access Token for authentication
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.stats = APICallStats()
        self._stats_lock = Lock()

        # Create session for connection pooling
        self._session = requests.Session()
        self._session.headers.update({
            "PRIVATE-TOKEN": token,
            "Accept": "application/json",
            "User-Agent": f"civars/{__version__}",
        })
        self._session.verify = verify_ssl

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return urljoin(self.base_url + "/", path.lstrip("/"))

    def _record(self, success: bool) -> None:
        with self._stats_lock:
            self.stats.total_calls += 1
            if success:
                self.stats.successful_calls += 1
            else:
                self.stats.failed_calls += 1

    def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> tuple[int, Any, dict[str, str]]:
        """
        Perform a single GET request.

        Args:
            path: API endpoint path (e.g., "/api/v4/projects")
            params: Query parameters

        Returns:
            Tuple of (status_code, json_or_text, headers)

        Raises:
            GitLabClientError: On transport errors (connection, timeout, TLS)
        """
        url = self._build_url(path)
        params = params or {}

        logger.debug(f"GET {url} params={params}")
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except RequestException as e:
            self._record(False)
            raise GitLabClientError(f"Request to {url} failed: {mask_sensitive_data(str(e))}") from e

        headers = dict(response.headers)
        try:
            data = response.json()
        except ValueError:
            data = response.text

        self._record(response.status_code < 400)
        return response.status_code, data, headers

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET a path and return the decoded body, raising on any non-2xx status.

        Raises:
            GitLabClientError: On transport errors or error status codes
        """
        status_code, data, _ = self.get(path, params)
        if not 200 <= status_code < 300:
            raise GitLabClientError(
                f"GET {path} returned {status_code}: {_error_message(data)}",
                status_code=status_code,
                response=data,
            )
        return data

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self) -> "GitLabClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _error_message(data: Any) -> str:
    """Pull GitLab's error text out of a response body."""
    if isinstance(data, dict):
        for key in ("message", "error"):
            if data.get(key):
                return str(data[key])
    if isinstance(data, str) and data:
        return data[:200]
    return "no details"
