"""Core data models shared across srcindex components."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional


@dataclass
class RepoNode:
    """One repository or submodule checkout attributed to a GitHub project."""

    name: str
    commit: str
    path: str
    submodules: List["RepoNode"] = field(default_factory=list)

    def walk(self) -> Iterator["RepoNode"]:
        """Yield this node and every nested submodule, depth-first."""
        yield self
        for submodule in self.submodules:
            yield from submodule.walk()


@dataclass(frozen=True)
class MappingRecord:
    """Canonical shape of a manual repository mapping."""

    name: str
    path: str
    commit: str
    submodules: tuple["MappingRecord", ...] = ()


@dataclass(frozen=True)
class ResolvedEntry:
    """Source file attributed to a repository, ready for the srcsrv stream."""

    absolute_path: str
    repo_name: str
    commit: str
    repo_root: str
    relative_path: str


@dataclass
class IndexReport:
    """Outcome of indexing a single debug-info file."""

    binary: str
    entries: List[ResolvedEntry] = field(default_factory=list)
    excluded: int = 0
    unresolved: int = 0
    stream: Optional[str] = None
    written: bool = False
