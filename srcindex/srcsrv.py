"""Rendering of the srcsrv stream read by debuggers to fetch sources over HTTP."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import RepoNode, ResolvedEntry
from .paths import normalize_path, path_key, strip_root

# %var2%, %var3% and %var4% are the name, commit and relative path fields of each entry line.
RAW_URL_TEMPLATE = "https://raw.githubusercontent.com/%var2%/%var3%/%var4%"
STREAM_NAME = "srcsrv"
TEMPLATE_NAME = "srcsrv.ini.j2"
DATETIME_FORMAT = "%a %b %d %H:%M:%S %Y"


class StreamBuilder:
    """Turns attributed source files into srcsrv stream text."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        url_template: str = RAW_URL_TEMPLATE,
    ) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self.url_template = url_template
        self._clock = clock or datetime.now
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def build_entries(self, attributions: Iterable[Tuple[str, RepoNode]]) -> List[ResolvedEntry]:
        """Group `(file, repository)` pairs by repository root and compute relative paths.

        Groups keep the order in which their root first appeared. Roots that
        still exist locally are resolved through the filesystem; roots that
        are gone (manual mappings of old build trees) are stripped textually.
        """
        groups: Dict[str, Tuple[RepoNode, List[str]]] = {}
        for path, node in attributions:
            key = path_key(node.path)
            if key not in groups:
                groups[key] = (node, [])
            groups[key][1].append(path)

        entries: List[ResolvedEntry] = []
        for node, paths in groups.values():
            root_exists = os.path.isdir(node.path)
            for path in paths:
                if root_exists:
                    relative = _filesystem_relative(path, node.path)
                else:
                    relative = strip_root(path, node.path)
                entries.append(
                    ResolvedEntry(
                        absolute_path=path,
                        repo_name=node.name,
                        commit=node.commit,
                        repo_root=node.path,
                        relative_path=relative,
                    )
                )
        return entries

    def render(self, entries: Sequence[ResolvedEntry]) -> str:
        template = self._env.get_template(TEMPLATE_NAME)
        return template.render(
            timestamp=self._clock().strftime(DATETIME_FORMAT),
            url_template=self.url_template,
            entries=entries,
        )

    def build(self, attributions: Iterable[Tuple[str, RepoNode]]) -> str:
        return self.render(self.build_entries(attributions))


def _filesystem_relative(path: str, root: str) -> str:
    relative = os.path.relpath(normalize_path(path), normalize_path(root))
    relative = relative.replace("\\", "/")
    while relative.startswith("./"):
        relative = relative[2:]
    return relative


__all__ = ["DATETIME_FORMAT", "RAW_URL_TEMPLATE", "STREAM_NAME", "StreamBuilder"]
