"""Attribute PDB source files to GitHub commits and write srcsrv streams."""

from .errors import (
    FileMissing,
    MalformedMapping,
    RepoUndiscoverable,
    SrcIndexError,
    ToolingUnavailable,
)
from .exclusions import ExclusionSet
from .index import RepositoryIndex
from .models import IndexReport, MappingRecord, RepoNode, ResolvedEntry
from .orchestrator import Decision, Orchestrator
from .srcsrv import StreamBuilder

__version__ = "0.1.0"

__all__ = [
    "Decision",
    "ExclusionSet",
    "FileMissing",
    "IndexReport",
    "MalformedMapping",
    "MappingRecord",
    "Orchestrator",
    "RepoNode",
    "RepoUndiscoverable",
    "RepositoryIndex",
    "ResolvedEntry",
    "SrcIndexError",
    "StreamBuilder",
    "ToolingUnavailable",
]
