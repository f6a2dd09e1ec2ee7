"""Pipeline orchestration: debug-info file -> attributed sources -> srcsrv stream."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .errors import RepoUndiscoverable, SrcIndexError, ToolingUnavailable
from .exclusions import ExclusionSet
from .git import GitClient
from .index import RepositoryIndex
from .logging import get_logger
from .mappings import normalize_mappings
from .models import IndexReport, RepoNode
from .srcsrv import StreamBuilder
from .tools import DebugTools


class Decision(str, Enum):
    """What happened to a single source path."""

    RESOLVED = "resolved"
    EXCLUDED = "excluded"
    UNRESOLVED = "unresolved"


class Orchestrator:
    """Indexes debug-info files against a shared repository index.

    The index and both exclusion sets live as long as the orchestrator, so a
    repository discovered for one binary is reused for every later one, and a
    directory that failed discovery is never queried again.
    """

    def __init__(
        self,
        index: RepositoryIndex | None = None,
        tools: DebugTools | None = None,
        stream_builder: StreamBuilder | None = None,
        user_exclusions: ExclusionSet | None = None,
        run_exclusions: ExclusionSet | None = None,
    ) -> None:
        self.index = index if index is not None else RepositoryIndex()
        self.tools = tools or DebugTools()
        self.stream_builder = stream_builder or StreamBuilder()
        self.user_exclusions = user_exclusions if user_exclusions is not None else ExclusionSet()
        self.run_exclusions = run_exclusions if run_exclusions is not None else ExclusionSet()
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_settings(
        cls,
        *,
        mappings: Sequence[Any] = (),
        exclude_paths: Iterable[str | Path] = (),
        tools_dir: Path | str | None = None,
        git: GitClient | None = None,
        tools: DebugTools | None = None,
        stream_builder: StreamBuilder | None = None,
    ) -> "Orchestrator":
        """Validate user input and build an orchestrator from it.

        Every mapping is validated before any is seeded, and every excluded
        directory must exist. Earlier mappings take precedence over later ones
        registering the same path.
        """
        records = normalize_mappings(list(mappings))
        user_exclusions = ExclusionSet.from_directories(exclude_paths)
        index = RepositoryIndex(git or GitClient())
        index.seed(records)
        return cls(
            index=index,
            tools=tools or DebugTools(tools_dir),
            stream_builder=stream_builder,
            user_exclusions=user_exclusions,
        )

    def check_prerequisites(self, *, debug_tools: bool = True) -> None:
        """Raise ToolingUnavailable unless git (and optionally srctool/pdbstr) can be found."""
        self.index.git.ensure_available()
        if debug_tools:
            self.tools.ensure_available()

    # ------------------------------------------------------------------
    # Pipelines

    def run_index(
        self, binaries: Iterable[Path | str], *, dry_run: bool = False
    ) -> List[IndexReport]:
        """Index every binary in turn; tooling is checked before the first one."""
        self.check_prerequisites()
        return [self.index_binary(binary, dry_run=dry_run) for binary in binaries]

    def index_binary(self, binary: Path | str, *, dry_run: bool = False) -> IndexReport:
        pdb = Path(binary)
        report = IndexReport(binary=str(binary))
        if not pdb.is_file():
            self.logger.warning("Debug-info file not found: %s", binary)
            return report

        sources = self.tools.list_sources(pdb)
        self.logger.info("Indexing %s (%d source file(s))", pdb.name, len(sources))

        attributions: List[Tuple[str, RepoNode]] = []
        for path in sources:
            decision, node = self.attribute(path)
            if decision is Decision.RESOLVED and node is not None:
                attributions.append((path, node))
            elif decision is Decision.EXCLUDED:
                report.excluded += 1
            else:
                report.unresolved += 1

        if not attributions:
            self.logger.info("No attributable sources in %s; stream left untouched", pdb.name)
            return report

        report.entries = self.stream_builder.build_entries(attributions)
        report.stream = self.stream_builder.render(report.entries)
        if dry_run:
            return report

        try:
            self.tools.write_stream(pdb, report.stream)
        except ToolingUnavailable:
            raise
        except SrcIndexError as exc:
            self.logger.error("Could not write srcsrv stream: %s", exc)
            return report
        report.written = True
        self.logger.info(
            "Indexed %d of %d source file(s) in %s", len(report.entries), len(sources), pdb.name
        )
        return report

    def run_resolve(
        self, paths: Iterable[str]
    ) -> List[Tuple[str, Decision, Optional[RepoNode]]]:
        """Report the repository each path maps to without touching any binary."""
        self.check_prerequisites(debug_tools=False)
        results: List[Tuple[str, Decision, Optional[RepoNode]]] = []
        for path in paths:
            decision, node = self.attribute(path)
            results.append((path, decision, node))
        return results

    # ------------------------------------------------------------------
    # Per-file decision

    def attribute(self, path: str) -> Tuple[Decision, Optional[RepoNode]]:
        """Decide the fate of one source path.

        User exclusions win over everything; known repositories are tried
        before the run's failed directories, and git is only asked about
        paths outside both.
        """
        if self.user_exclusions.is_excluded(path):
            self.logger.debug("Excluded by user: %s", path)
            return Decision.EXCLUDED, None

        node = self.index.resolve(path)
        if node is not None:
            return Decision.RESOLVED, node

        if self.run_exclusions.is_excluded(path):
            return Decision.UNRESOLVED, None

        try:
            node = self.index.discover(path)
        except RepoUndiscoverable as exc:
            if self.run_exclusions.add_directory(exc.directory):
                self.logger.warning("Skipping sources under %s: %s", exc.directory, exc.reason)
            return Decision.UNRESOLVED, None
        return Decision.RESOLVED, self.index.resolve(path) or node


__all__ = ["Decision", "Orchestrator"]
