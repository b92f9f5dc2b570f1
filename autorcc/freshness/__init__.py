"""Freshness tracking: timestamps and the staleness decision."""

from autorcc.freshness.checker import StalenessChecker, touch_if_info_newer
from autorcc.freshness.models import Decision, Outcome, RunContext
from autorcc.freshness.timestamps import FileTime

__all__ = [
    "Decision",
    "FileTime",
    "Outcome",
    "RunContext",
    "StalenessChecker",
    "touch_if_info_newer",
]
