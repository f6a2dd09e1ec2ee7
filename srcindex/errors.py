"""Error taxonomy shared across srcindex components."""

from __future__ import annotations


class SrcIndexError(RuntimeError):
    """Base class for srcindex failures."""


class ToolingUnavailable(SrcIndexError):
    """Raised when git or the debug-info tools cannot be found."""


class MalformedMapping(SrcIndexError, ValueError):
    """Raised when a manual repository mapping does not have the expected shape."""


class RepoUndiscoverable(SrcIndexError):
    """Raised when no public repository can be attributed to a directory."""

    def __init__(self, directory: str, reason: str) -> None:
        super().__init__(f"{directory}: {reason}")
        self.directory = directory
        self.reason = reason


class FileMissing(RepoUndiscoverable):
    """Raised when the directory of a source file is not present locally."""


__all__ = [
    "FileMissing",
    "MalformedMapping",
    "RepoUndiscoverable",
    "SrcIndexError",
    "ToolingUnavailable",
]
