"""Configuration independent wrapper for multi-config builds."""

from __future__ import annotations

import logging
from pathlib import Path

from autorcc.config.models import RccJobSettings
from autorcc.diagnostics import Diagnostics
from autorcc.errors import FileSystemError
from autorcc.freshness.models import RunContext
from autorcc.ledger.lock import touch

logger = logging.getLogger(__name__)


def wrapper_content(include_path: str) -> str:
    return (
        "// This is an autogenerated configuration wrapper file.\n"
        "// Changes will be overwritten.\n"
        f"#include <{include_path}>\n"
    )


class WrapperEmitter:
    """Keeps the public output forwarding to the per-config output.

    The file is rewritten only when its content differs. If the content is
    current but the build file changed this run, only its mtime is bumped.
    """

    def __init__(self, settings: RccJobSettings, diagnostics: Diagnostics | None = None) -> None:
        self.settings = settings
        self.diagnostics = diagnostics or Diagnostics()

    @property
    def active(self) -> bool:
        return self.settings.multi_config

    def emit(self, ctx: RunContext) -> str | None:
        """Update the wrapper. Returns ``"written"``, ``"touched"`` or None."""
        if not self.active:
            return None

        path = Path(self.settings.public_output)
        content = wrapper_content(self.settings.multi_config_include)

        try:
            differs = path.read_bytes() != content.encode()
        except OSError:
            differs = True

        if differs:
            if self.diagnostics.verbose:
                self.diagnostics.info(f"Generating RCC wrapper file {path}")
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
            except OSError as e:
                raise FileSystemError(
                    f"RCC wrapper file writing failed. {e}", path=str(path)
                ) from e
            return "written"

        if ctx.build_file_changed:
            if self.diagnostics.verbose:
                self.diagnostics.info(f"Touching RCC wrapper file {path}")
            try:
                touch(path, create=False)
            except OSError as e:
                raise FileSystemError(
                    f"RCC wrapper file touch failed. {e}", path=str(path)
                ) from e
            return "touched"

        return None
