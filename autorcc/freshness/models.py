"""Decision and per-run state for the staleness check."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict

from autorcc.freshness.timestamps import FileTime


class Outcome(str, Enum):
    """Terminal states of the staleness check."""

    skip = "skip"
    regenerate = "regenerate"
    fail = "fail"


class Decision(BaseModel):
    """Result of one staleness check. ``reason`` explains regenerate and fail."""

    model_config = ConfigDict(frozen=True)

    outcome: Outcome
    reason: str = ""
    path: str | None = None

    @classmethod
    def skip(cls) -> Decision:
        return cls(outcome=Outcome.skip)

    @classmethod
    def regenerate(cls, reason: str) -> Decision:
        return cls(outcome=Outcome.regenerate, reason=reason)

    @classmethod
    def fail(cls, reason: str, path: str | None = None) -> Decision:
        return cls(outcome=Outcome.fail, reason=reason, path=path)

    @property
    def must_regenerate(self) -> bool:
        return self.outcome is Outcome.regenerate

    @property
    def failed(self) -> bool:
        return self.outcome is Outcome.fail


@dataclass
class RunContext:
    """Mutable state for one job run, threaded through decide/generate/wrap."""

    settings_changed: bool = False
    reason: str = ""
    build_file_changed: bool = False
    inputs: list[str] = field(default_factory=list)
    output_time: FileTime = field(default_factory=FileTime)
