"""Exception taxonomy for the rcc job.

Every failure is terminal for the current invocation. ``AutoRccJob.run``
is the single place where these are turned into diagnostics.
"""

from __future__ import annotations

from collections.abc import Sequence


class AutoRccError(Exception):
    """Base class for all job failures.

    ``path`` names the file the failure concerns, if there is one.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)


class ConfigError(AutoRccError):
    """A required info file value is missing, empty or invalid."""


class FileSystemError(AutoRccError):
    """A required file is missing or could not be created, touched or removed."""


class LockError(AutoRccError):
    """The lock file could not be created or locked."""


class PersistenceError(AutoRccError):
    """The settings ledger could not be cleared or written."""


class ToolError(AutoRccError):
    """The rcc process failed to launch or exited non-zero."""

    def __init__(
        self,
        message: str,
        command: Sequence[str],
        output: str = "",
        path: str | None = None,
    ) -> None:
        self.command = list(command)
        self.output = output
        super().__init__(message, path=path)
