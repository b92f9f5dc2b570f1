"""autorcc - incremental rcc resource compilation for build steps."""

from autorcc.config import RccJobSettings, load_job_settings
from autorcc.diagnostics import Diagnostics
from autorcc.errors import AutoRccError
from autorcc.freshness import Decision, Outcome
from autorcc.job import AutoRccJob, JobReport, run_job

__version__ = "0.1.0"

__all__ = [
    "AutoRccError",
    "AutoRccJob",
    "Decision",
    "Diagnostics",
    "JobReport",
    "Outcome",
    "RccJobSettings",
    "load_job_settings",
    "run_job",
]
