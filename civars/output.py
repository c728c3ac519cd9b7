"""
Output sink - writes variable values to <directory>/<key>.

Each write lands atomically (temp file + os.replace) so a reader never
sees a partially written file. Writes to the same key are serialized and
a second writer for a key is reported as a collision.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from threading import Lock

logger = logging.getLogger(__name__)


class OutputError(Exception):
    """Raised when the output directory or a value file cannot be written."""


@dataclass(frozen=True)
class KeyCollision:
    """Two sources wrote the same key during one run."""
    key: str
    first_source: str
    second_source: str

    def to_dict(self) -> dict[str, str]:
        return {
            "key": self.key,
            "first_source": self.first_source,
            "second_source": self.second_source,
        }


def validate_key(key: str) -> None:
    """Reject keys that are not a single file name."""
    if not key or key in (".", ".."):
        raise OutputError(f"Invalid variable key for a file name: {key!r}")
    if "/" in key or "\0" in key or (os.sep != "/" and os.sep in key):
        raise OutputError(f"Variable key {key!r} contains a path separator")


class OutputSink:
    """
    Writes extracted values into a shared output directory.

    Safe to call from multiple threads.
    """

    def __init__(self, directory: str | os.PathLike[str]):
        self.directory = Path(directory)
        self.collisions: list[KeyCollision] = []
        self._locks: dict[str, Lock] = {}
        self._owners: dict[str, str] = {}
        self._registry_lock = Lock()

    def ensure_directory(self) -> Path:
        """Create the output directory (and parents) if it does not exist."""
        try:
            self.directory.mkdir(mode=0o777, parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Failed to create output directory {self.directory}: {e}") from e
        return self.directory

    def _lock_for(self, key: str) -> Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = Lock()
            return lock

    def _claim(self, key: str, source: str | None) -> None:
        """Remember who wrote a key first; record later writers as collisions."""
        if source is None:
            return
        with self._registry_lock:
            owner = self._owners.setdefault(key, source)
            if owner != source:
                collision = KeyCollision(key, owner, source)
                self.collisions.append(collision)
                logger.warning(
                    f"Key {key} from {source} overwrites the value written by {owner}"
                )

    def write(self, key: str, value: str | bytes, source: str | None = None) -> Path:
        """
        Write value to <directory>/<key>, replacing any existing file.

        Args:
            key: File name, used verbatim
            value: Content; str is encoded as UTF-8, nothing else is changed
            source: Name of the producer, used for collision reporting

        Returns:
            Path of the written file

        Raises:
            OutputError: On an invalid key or any file-system failure
        """
        validate_key(key)
        payload = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        directory = self.ensure_directory()
        target = directory / key

        with self._lock_for(key):
            tmp_name = None
            try:
                fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".civars-", suffix=".tmp")
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, target)
                tmp_name = None
                self._claim(key, source)
            except OSError as e:
                raise OutputError(f"Failed to write {target}: {e}") from e
            finally:
                if tmp_name is not None and os.path.exists(tmp_name):
                    os.unlink(tmp_name)

        logger.debug(f"Wrote {len(payload)} bytes to {target}")
        return target
