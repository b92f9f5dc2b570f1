"""Diagnostics sink for the rcc job, layered on stdlib logging."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence

logger = logging.getLogger("autorcc")

_HEADING = "AutoRcc"

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}

_TRUTHY = {"1", "ON", "YES", "TRUE", "Y"}


def quoted(text: str) -> str:
    """Wrap *text* in double quotes, escaping quotes, backslashes and control chars."""
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in text) + '"'


def quoted_command(command: Sequence[str]) -> str:
    """Render a command line, quoting only the arguments that need it."""
    parts: list[str] = []
    for item in command:
        escaped = quoted(item)
        if not item or len(escaped) > len(item) + 2 or " " in escaped:
            parts.append(escaped)
        else:
            parts.append(item)
    return " ".join(parts)


def is_truthy(value: object) -> bool:
    """CMake-style truthiness for config values."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip()
    if text.upper() in _TRUTHY:
        return True
    try:
        return int(text) != 0
    except ValueError:
        return False


def _titled(title: str, message: str) -> str:
    underline = "-" * len(title)
    body = message if message.endswith("\n") else message + "\n"
    return f"{title}\n{underline}\n{body}"


class Diagnostics:
    """Categorized info/error output with a verbosity level.

    Verbose output (reasons, composed commands) is only emitted when the
    level is above zero.
    """

    def __init__(self, verbosity: int = 0, info_file: str = "") -> None:
        self._verbosity = max(0, verbosity)
        self.info_file = info_file

    @classmethod
    def from_env(cls) -> Diagnostics:
        """Seed the verbosity from the ``VERBOSE`` environment variable."""
        diag = cls()
        raw = os.environ.get("VERBOSE", "")
        if raw:
            if raw.strip().isdigit():
                diag._verbosity = int(raw)
            else:
                diag._verbosity = 1 if is_truthy(raw) else 0
        return diag

    @property
    def verbosity(self) -> int:
        return self._verbosity

    @property
    def verbose(self) -> bool:
        return self._verbosity > 0

    def raise_verbosity(self, value: str | int) -> None:
        """Raise the level to *value* if it parses and is higher. Never lowers it."""
        try:
            level = int(value)
        except (TypeError, ValueError):
            return
        if level > self._verbosity:
            self._verbosity = level

    # -- output ------------------------------------------------------------

    def info(self, message: str) -> None:
        logger.info(message.rstrip("\n"))

    def error(self, message: str) -> None:
        logger.error(_titled(f"{_HEADING} error", self._in_info(message)).rstrip("\n"))

    def error_file(self, path: str, message: str) -> None:
        logger.error(_titled(f"{_HEADING} error: {quoted(path)}", self._in_info(message)).rstrip("\n"))

    def error_command(self, message: str, command: Sequence[str], output: str) -> None:
        message = self._in_info(message)
        body = message if message.endswith("\n") else message + "\n"
        body += "Command\n-------\n" + quoted_command(command) + "\n"
        body += "\nOutput\n------\n" + output
        logger.error(_titled(f"{_HEADING} error", body).rstrip("\n"))

    def _in_info(self, message: str) -> str:
        """Prefix the info file being processed, unless already named."""
        if not self.info_file or message.startswith("In "):
            return message
        return f"In {quoted(self.info_file)}:\n{message}"
