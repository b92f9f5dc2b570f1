"""Persisted settings ledger: the last fingerprint rcc output was built with."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from autorcc.diagnostics import Diagnostics, quoted
from autorcc.errors import FileSystemError, PersistenceError

logger = logging.getLogger(__name__)

LEDGER_TAG = "resource"


def find_setting(content: str, key: str) -> str:
    """Return the value of the first ``<key>:`` entry, up to its newline.

    An unterminated or empty value reads as absent (``""``).
    """
    prefix = f"{key}:"
    pos = content.find(prefix)
    if pos == -1:
        return ""
    pos += len(prefix)
    end = content.find("\n", pos)
    if end == -1 or end == pos:
        return ""
    return content[pos:end]


class SettingsLedger:
    """Compares and records the fingerprint in ``settings_file``.

    ``read`` and ``write`` must be called while the job's lock is held.
    When a change is detected the file is cleared straight away, so an
    interrupted run leaves an empty ledger and the next run regenerates.
    """

    def __init__(
        self,
        settings_file: str | os.PathLike,
        fingerprint: str,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        self.path = Path(settings_file)
        self.fingerprint = fingerprint
        self.diagnostics = diagnostics or Diagnostics()
        self.changed = False

    def ensure_exists(self) -> None:
        """Create the ledger empty if it does not exist."""
        if self.path.is_file():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()
        except OSError as e:
            raise FileSystemError(f"Settings file creation failed. {e}", path=str(self.path)) from e

    def peek(self) -> bool:
        """Whether the persisted fingerprint differs, without touching the file."""
        try:
            content = self.path.read_text(errors="replace")
        except OSError:
            return True
        return find_setting(content, LEDGER_TAG) != self.fingerprint

    def read(self) -> bool:
        """Compare against the persisted fingerprint; clear the file on mismatch."""
        try:
            content = self.path.read_text(errors="replace")
        except OSError as e:
            logger.debug("Settings file %s unreadable: %s", self.path, e)
            self.changed = True
            return self.changed

        self.changed = find_setting(content, LEDGER_TAG) != self.fingerprint
        if self.changed:
            try:
                self.path.write_text("")
            except OSError as e:
                raise PersistenceError(
                    f"Settings file clearing failed. {e}", path=str(self.path)
                ) from e
        return self.changed

    def write(self) -> None:
        """Persist the fingerprint if it changed; otherwise a no-op.

        On failure the file is removed so the next run sees changed settings.
        """
        if not self.changed:
            return
        if self.diagnostics.verbose:
            self.diagnostics.info(f"Writing settings file {quoted(str(self.path))}")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(f"{LEDGER_TAG}:{self.fingerprint}\n")
        except OSError as e:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as unlink_err:
                logger.warning("Could not remove settings file %s: %s", self.path, unlink_err)
            raise PersistenceError(
                f"Settings file writing failed. {e}", path=str(self.path)
            ) from e
