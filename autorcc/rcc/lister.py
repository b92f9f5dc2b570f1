"""Ask rcc which files a .qrc manifest references."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence

from autorcc.diagnostics import quoted, quoted_command
from autorcc.errors import AutoRccError, FileSystemError, ToolError

logger = logging.getLogger(__name__)

_ERROR_PREFIX = "RCC: Error in"
_MISSING_FILE = "Cannot find file '"


def parse_list_output(stdout: str, stderr: str) -> list[str]:
    """Collect listed files from rcc's list-mode output.

    Files rcc could not find are reported on stderr; they are kept in the
    result so the caller's existence check names them.
    """
    files = [line.rstrip("\r").strip() for line in stdout.splitlines()]
    files = [f for f in files if f]

    for line in stderr.splitlines():
        line = line.rstrip("\r")
        if not line.startswith(_ERROR_PREFIX):
            continue
        pos = line.find(_MISSING_FILE)
        if pos == -1:
            raise AutoRccError(f"rcc lists unparsable output:\n{quoted(line)}\n")
        pos += len(_MISSING_FILE)
        # drop the closing quote
        files.append(line[pos:-1])
    return files


class RccLister:
    """Runs ``<rcc> <list options> <qrc name>`` in the manifest's directory."""

    def __init__(self, executable: str, list_options: Sequence[str]) -> None:
        self.executable = executable
        self.list_options = list(list_options)

    def list(self, qrc_file: str, *, verbose: bool = False) -> list[str]:
        """Return absolute paths of the files *qrc_file* references."""
        if not os.path.isfile(qrc_file):
            raise FileSystemError(
                f"The resource file {quoted(qrc_file)} does not exist.", path=qrc_file
            )
        if not self.list_options:
            raise AutoRccError(
                f"No rcc list options configured, cannot list the inputs of {quoted(qrc_file)}.",
                path=qrc_file,
            )

        qrc_dir = os.path.dirname(os.path.abspath(qrc_file))
        cmd = [self.executable, *self.list_options, os.path.basename(qrc_file)]
        if verbose:
            logger.info("Running command:\n%s", quoted_command(cmd))

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, errors="replace", cwd=qrc_dir
            )
        except OSError as e:
            raise ToolError(
                f"The rcc list process failed for {quoted(qrc_file)}\n{e}\n",
                command=cmd,
                path=qrc_file,
            ) from e

        if result.returncode != 0:
            message = f"The rcc list process failed for {quoted(qrc_file)}\n"
            if result.stdout:
                message += result.stdout + "\n"
            if result.stderr:
                message += result.stderr + "\n"
            raise ToolError(
                message, command=cmd, output=result.stdout + result.stderr, path=qrc_file
            )

        files = parse_list_output(result.stdout, result.stderr)
        return [os.path.normpath(os.path.join(qrc_dir, f)) for f in files]
