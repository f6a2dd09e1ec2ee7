"""Git queries used to attribute directories to GitHub repositories."""

from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from ..errors import ToolingUnavailable
from ..logging import get_logger

_GITHUB_URL = re.compile(
    r"github\.com[:/]+(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$",
    re.IGNORECASE,
)
_SUBMODULE_KEY = re.compile(r"^submodule\.(?P<name>.+)\.path$")


def github_repo_name(url: str) -> Optional[str]:
    """Return ``owner/repo`` for a GitHub remote URL, or None for other hosts."""
    match = _GITHUB_URL.search(url.strip())
    if not match:
        return None
    return f"{match.group('owner')}/{match.group('repo')}"


class GitClient:
    """Issues read-only git queries against a working-tree directory.

    Every query answers ``None`` (or an empty list) when git reports an
    error, e.g. because the directory is not under version control.
    """

    def __init__(
        self,
        runner: Callable[..., str] | None = None,
        *,
        executable: str = "git",
    ) -> None:
        self._runner = runner or self._default_runner
        self.executable = executable
        self.logger = get_logger("git")

    def ensure_available(self) -> str:
        """Return the path of the git executable or raise ToolingUnavailable."""
        located = shutil.which(self.executable)
        if located is None:
            raise ToolingUnavailable(f"git executable not found: {self.executable}")
        return located

    def head_commit(self, directory: str) -> Optional[str]:
        output = self._query(directory, ["rev-parse", "--short", "HEAD"])
        if output is None:
            return None
        return output.strip() or None

    def remote_branches_containing(self, directory: str, commit: str) -> List[str]:
        output = self._query(directory, ["branch", "-r", "--contains", commit])
        if output is None:
            return []
        branches: List[str] = []
        for line in output.splitlines():
            # "origin/HEAD -> origin/main" names the same remote twice
            branch = line.strip().split(" -> ", 1)[0]
            if branch:
                branches.append(branch)
        return branches

    def remotes(self, directory: str) -> List[Tuple[str, str]]:
        """Return ``(name, url)`` pairs in the order git lists them."""
        output = self._query(directory, ["remote", "-v"])
        if output is None:
            return []
        remotes: List[Tuple[str, str]] = []
        for line in output.splitlines():
            parts = line.split()
            if len(parts) < 2:
                continue
            remote = (parts[0], parts[1])
            if remote not in remotes:
                remotes.append(remote)
        return remotes

    def toplevel(self, directory: str) -> Optional[str]:
        output = self._query(directory, ["rev-parse", "--show-toplevel"])
        if output is None:
            return None
        return output.strip() or None

    def submodules(self, root: str) -> List[Tuple[str, str]]:
        """Return ``(name, relative path)`` for the direct submodules declared in `root`."""
        output = self._query(
            root,
            ["config", "--file", ".gitmodules", "--get-regexp", r"^submodule\..*\.path$"],
        )
        if output is None:
            return []
        submodules: List[Tuple[str, str]] = []
        for line in output.splitlines():
            key, _, value = line.strip().partition(" ")
            match = _SUBMODULE_KEY.match(key)
            if match and value.strip():
                submodules.append((match.group("name"), value.strip()))
        return submodules

    # ------------------------------------------------------------------
    # Internals

    def _query(self, directory: str, args: Iterable[str]) -> Optional[str]:
        command = [self.executable, *args]
        try:
            return self._runner(command, cwd=Path(directory), capture_output=True)
        except (subprocess.CalledProcessError, OSError) as exc:
            self.logger.debug("%s failed in %s: %s", " ".join(command), directory, exc)
            return None

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


__all__ = ["GitClient", "github_repo_name"]
