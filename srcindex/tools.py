"""Wrappers around the Debugging Tools for Windows source-server utilities."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .errors import SrcIndexError, ToolingUnavailable
from .logging import get_logger
from .srcsrv import STREAM_NAME

SRCTOOL = "srctool"
PDBSTR = "pdbstr"

DEFAULT_TOOL_DIRS: Sequence[str] = (
    r"C:\Program Files (x86)\Windows Kits\10\Debuggers\x64\srcsrv",
    r"C:\Program Files\Windows Kits\10\Debuggers\x64\srcsrv",
    r"C:\Program Files (x86)\Windows Kits\10\Debuggers\x86\srcsrv",
)


class DebugTools:
    """Lists the sources of a PDB and writes its srcsrv stream."""

    def __init__(
        self,
        tools_dir: Path | str | None = None,
        runner: Callable[..., str] | None = None,
        *,
        search_dirs: Sequence[str] = DEFAULT_TOOL_DIRS,
    ) -> None:
        self.tools_dir = Path(tools_dir).expanduser() if tools_dir else None
        self.search_dirs = tuple(search_dirs)
        self._runner = runner or self._default_runner
        self._located: dict[str, Path] = {}
        self.logger = get_logger("tools")

    def ensure_available(self) -> None:
        """Locate every tool up front; raises ToolingUnavailable if one is missing."""
        for name in (SRCTOOL, PDBSTR):
            self.locate(name)

    def locate(self, name: str) -> Path:
        if name in self._located:
            return self._located[name]

        if self.tools_dir is not None:
            found = _find_in(self.tools_dir, name)
            if found is None:
                raise ToolingUnavailable(f"{name} not found in {self.tools_dir}")
        else:
            which = shutil.which(name)
            found = Path(which) if which else None
            if found is None:
                for directory in self.search_dirs:
                    found = _find_in(Path(directory), name)
                    if found is not None:
                        break
            if found is None:
                raise ToolingUnavailable(
                    f"{name} not found on PATH or in the Windows Kits debugger directories; "
                    "pass --tools-dir"
                )

        self.logger.debug("Using %s at %s", name, found)
        self._located[name] = found
        return found

    def list_sources(self, pdb: Path | str) -> List[str]:
        """Return the source paths recorded in `pdb`, in the order srctool prints them."""
        # srctool exits with the number of files it found, so the status is not checked.
        output = self._run([str(self.locate(SRCTOOL)), "-r", str(pdb)], check=False)
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        # The final line is srctool's summary, not a source path.
        return lines[:-1]

    def write_stream(self, pdb: Path | str, stream: str) -> None:
        """Replace the srcsrv stream of `pdb` with `stream`."""
        handle = tempfile.NamedTemporaryFile(
            "w", suffix=".srcsrv", delete=False, encoding="utf-8"
        )
        try:
            with handle:
                handle.write(stream)
            args = [
                str(self.locate(PDBSTR)),
                "-w",
                f"-p:{pdb}",
                f"-i:{handle.name}",
                f"-s:{STREAM_NAME}",
            ]
            try:
                self._run(args, check=True)
            except subprocess.CalledProcessError as exc:
                raise SrcIndexError(
                    f"pdbstr failed for {pdb}: exit status {exc.returncode}"
                ) from exc
        finally:
            os.unlink(handle.name)

    # ------------------------------------------------------------------
    # Internals

    def _run(self, args: Iterable[str], *, check: bool) -> str:
        return self._runner(args, check=check)

    @staticmethod
    def _default_runner(args: Iterable[str], *, check: bool = True) -> str:
        completed = subprocess.run(
            list(args),
            check=check,
            text=True,
            capture_output=True,
        )
        return completed.stdout


def _find_in(directory: Path, name: str) -> Optional[Path]:
    for candidate in (directory / f"{name}.exe", directory / name):
        if candidate.is_file():
            return candidate
    return None


__all__ = ["DEFAULT_TOOL_DIRS", "DebugTools", "PDBSTR", "SRCTOOL"]
