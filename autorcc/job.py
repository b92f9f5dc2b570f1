"""The rcc job: decide, regenerate on demand, wrap, and record settings."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from autorcc.config.models import RccJobSettings, load_job_settings
from autorcc.diagnostics import Diagnostics
from autorcc.errors import AutoRccError, ToolError
from autorcc.freshness.checker import StalenessChecker, touch_if_info_newer
from autorcc.freshness.models import Decision, RunContext
from autorcc.ledger.fingerprint import compute_fingerprint
from autorcc.ledger.lock import FileLock
from autorcc.ledger.settings import SettingsLedger
from autorcc.rcc.compiler import RccCompiler
from autorcc.rcc.lister import RccLister
from autorcc.rcc.wrapper import WrapperEmitter

logger = logging.getLogger(__name__)


class JobReport(BaseModel):
    """What a single run decided and did."""

    decision: Decision
    settings_changed: bool = False
    regenerated: bool = False
    output_touched: bool = False
    build_file_changed: bool = False
    wrapper: str | None = None


class AutoRccJob:
    """One rcc output, processed once per build step.

    The settings ledger is read, the decision made, rcc run and the ledger
    written all while the lock file is held. Parallel jobs sharing the
    ledger therefore see each other's persisted state.
    """

    def __init__(
        self,
        settings: RccJobSettings,
        diagnostics: Diagnostics | None = None,
        lister: RccLister | None = None,
    ) -> None:
        self.settings = settings
        self.diagnostics = diagnostics or Diagnostics.from_env()
        self.diagnostics.raise_verbosity(settings.verbosity)
        self.diagnostics.info_file = settings.info_file
        self.fingerprint = compute_fingerprint(settings)
        self.checker = StalenessChecker(settings, lister=lister, diagnostics=self.diagnostics)
        self.compiler = RccCompiler(settings, diagnostics=self.diagnostics)
        self.wrapper = WrapperEmitter(settings, diagnostics=self.diagnostics)

    @classmethod
    def from_info_file(
        cls,
        info_file: str | Path,
        config_name: str = "",
        diagnostics: Diagnostics | None = None,
    ) -> AutoRccJob:
        """Load the info file; raises ConfigError if it is unreadable or incomplete."""
        return cls(load_job_settings(info_file, config_name), diagnostics=diagnostics)

    def ledger(self) -> SettingsLedger:
        return SettingsLedger(self.settings.settings_file, self.fingerprint, self.diagnostics)

    def preview(self) -> JobReport:
        """Make the decision without locking, writing or compiling."""
        ctx = RunContext(
            settings_changed=self.ledger().peek(),
            inputs=list(self.settings.inputs),
        )
        return JobReport(decision=self.checker.decide(ctx), settings_changed=ctx.settings_changed)

    def process(self) -> JobReport:
        """Run the job. Raises AutoRccError on any failure."""
        ctx = RunContext(inputs=list(self.settings.inputs))
        ledger = self.ledger()
        ledger.ensure_exists()

        with FileLock(self.settings.lock_file):
            ctx.settings_changed = ledger.read()

            decision = self.checker.decide(ctx)
            if decision.failed:
                raise AutoRccError(decision.reason, path=decision.path)
            ctx.reason = decision.reason

            report = JobReport(decision=decision, settings_changed=ctx.settings_changed)
            if decision.must_regenerate:
                self.compiler.generate(ctx)
                report.regenerated = True
            else:
                report.output_touched = touch_if_info_newer(self.settings, ctx, self.diagnostics)

            report.wrapper = self.wrapper.emit(ctx)
            report.build_file_changed = ctx.build_file_changed
            ledger.write()

        logger.debug("rcc job %s: %s", self.settings.output, decision.outcome.value)
        return report

    def run(self) -> bool:
        """Process the job, reporting any failure. Returns success."""
        try:
            self.process()
        except ToolError as e:
            self.diagnostics.error_command(e.message, e.command, e.output)
            return False
        except AutoRccError as e:
            if e.path:
                self.diagnostics.error_file(e.path, e.message)
            else:
                self.diagnostics.error(e.message)
            return False
        return True


def run_job(info_file: str | Path, config_name: str = "", diagnostics: Diagnostics | None = None) -> bool:
    """Load and run the job described by *info_file*. Returns success."""
    diagnostics = diagnostics or Diagnostics.from_env()
    try:
        job = AutoRccJob.from_info_file(info_file, config_name, diagnostics=diagnostics)
    except AutoRccError as e:
        diagnostics.error(e.message)
        return False
    return job.run()
