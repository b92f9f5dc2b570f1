"""Exclusive cross-process lock on a dedicated lock file."""

from __future__ import annotations

import fcntl
import logging
import os
from pathlib import Path
from typing import IO

from autorcc.errors import LockError

logger = logging.getLogger(__name__)


def touch(path: str | os.PathLike, *, create: bool) -> None:
    """Set the mtime of *path* to now, creating it empty if *create* is set.

    Raises OSError on failure (including a missing file when not creating).
    """
    if create:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a"):
            pass
    os.utime(path, None)


class FileLock:
    """Advisory ``flock`` held for the lifetime of a ``with`` block.

    Acquisition blocks without a timeout. The lock file is created empty
    if it does not exist yet; a missing file is not a lock failure.
    Release happens on every exit path, including exceptions.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = str(path)
        self._handle: IO[str] | None = None

    @property
    def locked(self) -> bool:
        return self._handle is not None

    def acquire(self) -> None:
        if self._handle is not None:
            raise RuntimeError(f"Lock already held: {self.path}")

        if not os.path.exists(self.path):
            try:
                touch(self.path, create=True)
            except OSError as e:
                raise LockError(f"Lock file creation failed. {e}", path=self.path) from e

        try:
            handle = open(self.path, "a+")
        except OSError as e:
            raise LockError(f"File lock failed: {e}", path=self.path) from e
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        except OSError as e:
            handle.close()
            raise LockError(f"File lock failed: {e}", path=self.path) from e

        self._handle = handle
        logger.debug("Locked %s", self.path)

    def release(self) -> None:
        if self._handle is None:
            return
        try:
            fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        finally:
            self._handle.close()
            self._handle = None
            logger.debug("Released %s", self.path)

    def __enter__(self) -> FileLock:
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_value, tb) -> None:
        self.release()
