"""
Lock marker used to serialize writers of one JSON document.

The marker is a sibling file (``<document>.lock``) held through
``filelock.SoftFileLock``: it is created with exclusive create semantics, polled
at a fixed interval while someone else holds it and deleted on release. That
works across processes and across threads, since every write builds its own
lock instance.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from filelock import SoftFileLock, Timeout

from hub.repositories.errors import LockTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 50
DEFAULT_RETRY_DELAY = 0.1


class FileLock:
    """Bounded-retry lock on a marker file. Not reentrant, no fairness."""

    def __init__(
        self,
        path: str | os.PathLike,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ) -> None:
        self.path = Path(path)
        self.max_attempts = max(1, int(max_attempts))
        self.retry_delay = max(0.0, float(retry_delay))
        self._lock = SoftFileLock(str(self.path))

    @property
    def budget(self) -> float:
        """Seconds spent polling before giving up; zero means a single attempt."""
        return (self.max_attempts - 1) * self.retry_delay

    def acquire(self) -> str:
        """Create the marker and return its path, or raise LockTimeoutError once attempts run out."""
        try:
            self._lock.acquire(timeout=self.budget, poll_interval=self.retry_delay or 0.001)
        except Timeout:
            logger.warning("Lock %s still held after %d attempts", self.path, self.max_attempts)
            raise LockTimeoutError(str(self.path), self.max_attempts) from None
        return str(self.path)

    def release(self) -> None:
        """Remove the marker. Safe to call more than once; never raises."""
        try:
            self._lock.release(force=True)
        except OSError as exc:
            logger.debug("Ignoring failure to release lock %s: %s", self.path, exc)

    @property
    def locked(self) -> bool:
        return self._lock.is_locked

    def __enter__(self) -> "FileLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
