"""Directory exclusions consulted before any repository lookup."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Iterator, List

from .config import ConfigError
from .logging import get_logger
from .paths import containing_directory, normalize_path, path_matches, path_pattern


class ExclusionSet:
    """Minimal set of excluded directory prefixes.

    No stored entry is ever an ancestor or descendant of another: adding a
    directory already covered is a no-op, and adding an ancestor absorbs the
    narrower entries recorded before it.
    """

    def __init__(self, directories: Iterable[str] = ()) -> None:
        # pattern -> normalized directory it was built from
        self._entries: Dict[str, str] = {}
        self.logger = get_logger("exclusions")
        for directory in directories:
            self.add_directory(directory)

    @classmethod
    def from_directories(
        cls, directories: Iterable[str | Path], *, must_exist: bool = True
    ) -> "ExclusionSet":
        """Build a set from user-declared directories, resolving them to absolute paths."""
        resolved: List[str] = []
        for directory in directories:
            path = Path(directory).expanduser()
            if must_exist and not path.is_dir():
                raise ConfigError(f"Excluded directory does not exist: {directory}")
            resolved.append(str(path.resolve()) if path.exists() else str(path))
        return cls(resolved)

    def is_excluded(self, path: str) -> bool:
        return any(path_matches(pattern, path) for pattern in self._entries)

    def add_directory(self, directory: str) -> bool:
        """Record `directory`; returns False when it was already covered."""
        normalized = normalize_path(directory)
        pattern = path_pattern(normalized)
        if pattern in self._entries or self.is_excluded(normalized):
            return False

        absorbed = [
            existing
            for existing, source in self._entries.items()
            if path_matches(pattern, source)
        ]
        for existing in absorbed:
            del self._entries[existing]
        if absorbed:
            self.logger.debug("%s absorbs %d narrower exclusion(s)", normalized, len(absorbed))

        self._entries[pattern] = normalized
        return True

    def add_from_file(self, path: str) -> bool:
        return self.add_directory(containing_directory(path))

    @property
    def entries(self) -> List[str]:
        """Stored patterns in insertion order."""
        return list(self._entries)

    @property
    def directories(self) -> List[str]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.is_excluded(path)


__all__ = ["ExclusionSet"]
