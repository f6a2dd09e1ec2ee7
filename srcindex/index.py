"""Repository forest used to attribute source files to GitHub repositories."""

from __future__ import annotations

import os
import posixpath
from typing import Any, Iterator, List, Optional, Set

from .errors import FileMissing, RepoUndiscoverable
from .git import GitClient, github_repo_name
from .logging import get_logger
from .mappings import normalize_mappings
from .models import MappingRecord, RepoNode
from .paths import containing_directory, normalize_path, path_key, path_matches, path_pattern


class RepositoryIndex:
    """Forest of repositories and their submodules.

    Nodes come from two sources: manual mappings passed to :meth:`seed` and
    repositories found by :meth:`discover`. A root path is registered at most
    once across the whole forest, submodules included; the first registration
    wins.
    """

    def __init__(self, git: GitClient | None = None, mappings: Any = None) -> None:
        self.git = git or GitClient()
        self.logger = get_logger("index")
        self._nodes: List[RepoNode] = []
        self._paths: Set[str] = set()
        if mappings is not None:
            self.seed(mappings)

    @property
    def nodes(self) -> List[RepoNode]:
        """Top-level nodes in registration order."""
        return list(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[RepoNode]:
        for node in self._nodes:
            yield from node.walk()

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and path_key(path) in self._paths

    def find(self, path: str) -> Optional[RepoNode]:
        """Return the node registered exactly at `path`, if any."""
        key = path_key(path)
        for node in self:
            if path_key(node.path) == key:
                return node
        return None

    # ------------------------------------------------------------------
    # Seeding

    def seed(self, mappings: Any) -> int:
        """Register manual mappings and return how many top-level nodes were added.

        The whole input is validated before anything is registered, so a
        malformed record leaves the index untouched.
        """
        records = normalize_mappings(mappings)
        added = 0
        for record in records:
            node = self._node_from_record(record, pending=set())
            if node is None:
                continue
            self._register(node)
            added += 1
            self.logger.debug("Seeded %s@%s at %s", node.name, node.commit, node.path)
        return added

    def _node_from_record(self, record: MappingRecord, *, pending: Set[str]) -> Optional[RepoNode]:
        # Submodules first: a duplicate submodule path is dropped even when its parent is new.
        submodules: List[RepoNode] = []
        for child in record.submodules:
            node = self._node_from_record(child, pending=pending)
            if node is not None:
                submodules.append(node)

        key = path_key(record.path)
        if key in self._paths or key in pending:
            self.logger.debug("Skipping mapping for %s: path already registered", record.path)
            return None
        pending.add(key)
        return RepoNode(
            name=record.name,
            commit=record.commit,
            path=normalize_path(record.path),
            submodules=submodules,
        )

    # ------------------------------------------------------------------
    # Lookup

    def resolve(self, path: str) -> Optional[RepoNode]:
        """Return the innermost registered repository containing `path`."""
        normalized = normalize_path(path)
        for node in self._nodes:
            if path_matches(path_pattern(node.path), normalized):
                return self._deepest(node, normalized)
        return None

    def locate(self, path: str) -> RepoNode:
        """Resolve `path`, falling back to discovery. Raises RepoUndiscoverable."""
        node = self.resolve(path)
        if node is not None:
            return node
        return self.discover(path)

    def _deepest(self, node: RepoNode, path: str) -> RepoNode:
        for submodule in node.submodules:
            if path_matches(path_pattern(submodule.path), path):
                return self._deepest(submodule, path)
        return node

    # ------------------------------------------------------------------
    # Discovery

    def discover(self, path: str) -> RepoNode:
        """Attribute the directory of `path` through git and register the result.

        Raises :class:`FileMissing` when the directory is absent and
        :class:`RepoUndiscoverable` when git cannot tie it to a public
        GitHub repository.
        """
        directory = containing_directory(path)
        if not os.path.isdir(directory):
            raise FileMissing(directory, "directory does not exist")

        node = self._discover_directory(directory)
        existing = self.find(node.path)
        if existing is not None:
            return existing
        self._register(node)
        self.logger.info(
            "Discovered %s@%s at %s (%d submodule(s))",
            node.name,
            node.commit,
            node.path,
            len(node.submodules),
        )
        return node

    def _discover_directory(self, directory: str, *, expected_root: str | None = None) -> RepoNode:
        commit = self.git.head_commit(directory)
        if not commit:
            raise RepoUndiscoverable(directory, "not under version control")

        branches = self.git.remote_branches_containing(directory, commit)
        remote_names = {branch.split("/", 1)[0] for branch in branches}
        if not remote_names:
            raise RepoUndiscoverable(directory, f"commit {commit} is not on any remote branch")

        name = self._canonical_name(directory, remote_names)
        if name is None:
            raise RepoUndiscoverable(directory, f"no GitHub remote contains commit {commit}")

        toplevel = self.git.toplevel(directory)
        if not toplevel:
            raise RepoUndiscoverable(directory, "cannot determine repository root")
        root = normalize_path(toplevel)
        if expected_root is not None and path_key(root) != path_key(expected_root):
            # An uninitialized submodule answers with its superproject's root.
            raise RepoUndiscoverable(directory, "submodule is not checked out")

        submodules: List[RepoNode] = []
        for submodule_name, relative in self.git.submodules(root):
            submodule_dir = normalize_path(posixpath.join(root, relative))
            if not os.path.isdir(submodule_dir):
                self.logger.debug("Submodule %s missing at %s", submodule_name, submodule_dir)
                continue
            try:
                submodules.append(
                    self._discover_directory(submodule_dir, expected_root=submodule_dir)
                )
            except RepoUndiscoverable as exc:
                self.logger.debug("Omitting submodule %s: %s", submodule_name, exc)

        return RepoNode(name=name, commit=commit, path=root, submodules=submodules)

    def _canonical_name(self, directory: str, remote_names: Set[str]) -> Optional[str]:
        # First matching remote wins; git lists remotes alphabetically.
        for remote, url in self.git.remotes(directory):
            if remote not in remote_names:
                continue
            name = github_repo_name(url)
            if name is not None:
                return name
        return None

    # ------------------------------------------------------------------
    # Helpers

    def _register(self, node: RepoNode) -> None:
        self._prune_known(node)
        self._nodes.append(node)
        for member in node.walk():
            self._paths.add(path_key(member.path))

    def _prune_known(self, node: RepoNode) -> None:
        kept: List[RepoNode] = []
        for submodule in node.submodules:
            if path_key(submodule.path) in self._paths:
                self.logger.debug("Submodule %s already registered", submodule.path)
                continue
            self._prune_known(submodule)
            kept.append(submodule)
        node.submodules = kept


__all__ = ["RepositoryIndex"]
