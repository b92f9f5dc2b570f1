"""Staleness detection for the rcc output of a single job."""

from __future__ import annotations

import logging

from autorcc.config.models import RccJobSettings
from autorcc.diagnostics import Diagnostics, quoted
from autorcc.errors import AutoRccError, FileSystemError
from autorcc.freshness.models import Decision, RunContext
from autorcc.freshness.timestamps import FileTime
from autorcc.ledger.lock import touch
from autorcc.rcc.lister import RccLister

logger = logging.getLogger(__name__)


class StalenessChecker:
    """Decides whether the rcc output must be regenerated.

    Checks run in a fixed order and the first one that fires wins:

    1. output missing
    2. settings changed
    3. output older than the .qrc file
    4. output older than the rcc executable
    5. output older than any referenced input (listed via rcc if needed)

    A missing .qrc, executable or declared input is a failure, unlike a
    missing output which just means "generate".
    """

    def __init__(
        self,
        settings: RccJobSettings,
        lister: RccLister | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        self.settings = settings
        self.lister = lister or RccLister(settings.rcc_executable, settings.rcc_list_options)
        self.diagnostics = diagnostics or Diagnostics()

    def _generating(self, because: str) -> str:
        s = self.settings
        return f"Generating {quoted(s.output)}, because {because}, from {quoted(s.qrc_file)}"

    def decide(self, ctx: RunContext) -> Decision:
        s = self.settings

        qrc_time = FileTime()
        if not qrc_time.load(s.qrc_file):
            return Decision.fail(
                f"The resources file {quoted(s.qrc_file)} does not exist", path=s.qrc_file
            )
        exe_time = FileTime()
        if not exe_time.load(s.rcc_executable):
            return Decision.fail(
                f"The rcc executable {quoted(s.rcc_executable)} does not exist.",
                path=s.rcc_executable,
            )

        if not ctx.output_time.load(s.output):
            return Decision.regenerate(self._generating("it doesn't exist"))
        if ctx.settings_changed:
            return Decision.regenerate(self._generating("the rcc settings changed"))
        if ctx.output_time.older(qrc_time):
            return Decision.regenerate(
                self._generating(f"it is older than {quoted(s.qrc_file)}")
            )
        if ctx.output_time.older(exe_time):
            return Decision.regenerate(self._generating("it is older than the rcc executable"))

        return self._check_inputs(ctx)

    def _check_inputs(self, ctx: RunContext) -> Decision:
        s = self.settings
        if not ctx.inputs:
            try:
                ctx.inputs = self.lister.list(s.qrc_file, verbose=self.diagnostics.verbose)
            except AutoRccError as e:
                return Decision.fail(e.message, path=s.qrc_file)

        for res_file in ctx.inputs:
            res_time = FileTime()
            if not res_time.load(res_file):
                return Decision.fail(
                    f"Could not find the resource file\n  {quoted(res_file)}\n", path=s.qrc_file
                )
            if ctx.output_time.older(res_time):
                return Decision.regenerate(
                    self._generating(f"it is older than {quoted(res_file)}")
                )
        return Decision.skip()


def touch_if_info_newer(settings: RccJobSettings, ctx: RunContext, diagnostics: Diagnostics) -> bool:
    """Bump the output's mtime if the info file is newer than it.

    Covers info-only changes that don't affect rcc's output content.
    Returns True if the output was touched.
    """
    info_time = FileTime.of(settings.info_file)
    if not ctx.output_time.older(info_time):
        return False

    if diagnostics.verbose:
        diagnostics.info(
            f"Touching {quoted(settings.output)} because it is older than "
            f"{quoted(settings.info_file)}"
        )
    try:
        touch(settings.output, create=False)
    except OSError as e:
        raise FileSystemError(f"Build file touch failed. {e}", path=settings.output) from e
    ctx.build_file_changed = True
    return True
