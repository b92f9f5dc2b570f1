"""Modification timestamps with an explicit "missing" state."""

from __future__ import annotations

import os


class FileTime:
    """Nanosecond modification time of a file.

    An unloaded (or failed) FileTime has ``ns is None``; ``older`` treats
    it as infinitely old so a missing file never looks up to date.
    """

    __slots__ = ("ns",)

    def __init__(self, ns: int | None = None) -> None:
        self.ns = ns

    @classmethod
    def of(cls, path: str | os.PathLike) -> FileTime:
        ft = cls()
        ft.load(path)
        return ft

    def load(self, path: str | os.PathLike) -> bool:
        """Stat *path*. Returns False (and clears the time) if it can't be read."""
        try:
            self.ns = os.stat(path).st_mtime_ns
        except OSError:
            self.ns = None
            return False
        return True

    @property
    def exists(self) -> bool:
        return self.ns is not None

    def older(self, other: FileTime) -> bool:
        """True if this time is strictly before *other*."""
        if self.ns is None:
            return True
        if other.ns is None:
            return False
        return self.ns < other.ns

    def __repr__(self) -> str:
        return f"FileTime({self.ns!r})"
