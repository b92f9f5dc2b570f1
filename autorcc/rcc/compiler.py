"""Runs rcc to regenerate the output file."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from autorcc.config.models import RccJobSettings
from autorcc.diagnostics import Diagnostics, quoted, quoted_command
from autorcc.errors import FileSystemError, ToolError
from autorcc.freshness.models import RunContext

logger = logging.getLogger(__name__)


class RccCompiler:
    """Compiles the .qrc manifest into the job's output file.

    rcc runs in the build directory and is awaited without a timeout.
    On failure any partially written output is removed.
    """

    def __init__(self, settings: RccJobSettings, diagnostics: Diagnostics | None = None) -> None:
        self.settings = settings
        self.diagnostics = diagnostics or Diagnostics()

    def command(self) -> list[str]:
        s = self.settings
        return [s.rcc_executable, *s.options, "-o", s.output, s.qrc_file]

    def generate(self, ctx: RunContext) -> None:
        s = self.settings
        try:
            Path(s.output).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Could not create parent directory. {e}", path=s.output) from e

        cmd = self.command()
        if self.diagnostics.verbose:
            msg = ctx.reason
            if msg and not msg.endswith("\n"):
                msg += "\n"
            self.diagnostics.info(msg + quoted_command(cmd) + "\n")

        failure = (
            f"The rcc process failed to compile\n  {quoted(s.qrc_file)}\n"
            f"into\n  {quoted(s.output)}"
        )
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, errors="replace", cwd=s.build_dir
            )
        except OSError as e:
            self._remove_output()
            raise ToolError(failure, command=cmd, output=str(e), path=s.qrc_file) from e

        if result.returncode != 0:
            self._remove_output()
            raise ToolError(
                failure, command=cmd, output=result.stdout + result.stderr, path=s.qrc_file
            )

        if result.stdout:
            self.diagnostics.info(result.stdout)
        ctx.build_file_changed = True

    def _remove_output(self) -> None:
        try:
            os.remove(self.settings.output)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove %s after rcc failure: %s", self.settings.output, e)
