"""CLI entrypoints for srcindex commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, List

from .config import ConfigError, SrcIndexConfig, load_config
from .errors import MalformedMapping, ToolingUnavailable
from .logging import configure_logging
from .orchestrator import Decision, Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_mapping_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="DIR",
        help="Directory whose sources are never indexed (repeatable, must exist).",
    )
    parser.add_argument(
        "--map",
        action="append",
        default=[],
        metavar="JSON",
        help=(
            'Manual repository mapping as JSON, e.g. {"Name": "owner/repo", '
            '"Path": "C:/build/repo", "Commit": "abc123"}. A list is accepted too (repeatable).'
        ),
    )
    parser.add_argument(
        "--map-file",
        action="append",
        default=[],
        metavar="FILE",
        help="File holding a JSON mapping record or list of records (repeatable).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="srcindex",
        description="Index PDB source files against GitHub so debuggers can fetch them.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .srcindex.yml (defaults to the current directory).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write the log to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser(
        "index",
        help="Write a srcsrv stream into each PDB.",
    )
    _add_verbose_option(index_parser, suppress_default=True)
    _add_mapping_options(index_parser)
    index_parser.add_argument(
        "pdbs",
        nargs="+",
        metavar="PDB",
        help="Debug-info files to index.",
    )
    index_parser.add_argument(
        "--tools-dir",
        default=None,
        help="Directory containing srctool and pdbstr.",
    )
    index_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the streams instead of writing them into the PDBs.",
    )

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Show which repository and commit each source file maps to.",
    )
    _add_verbose_option(resolve_parser, suppress_default=True)
    _add_mapping_options(resolve_parser)
    resolve_parser.add_argument(
        "files",
        nargs="+",
        metavar="FILE",
        help="Source file paths to attribute.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for srcindex commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        config = load_config(Path(args.config) if args.config else Path.cwd())
        orchestrator = _build_orchestrator(args, config)
        if args.command == "index":
            _run_index(orchestrator, args)
        elif args.command == "resolve":
            _run_resolve(orchestrator, args)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except (ConfigError, MalformedMapping) as exc:
        parser.exit(1, f"srcindex: invalid input: {exc}\n")
    except ToolingUnavailable as exc:
        parser.exit(1, f"srcindex: {exc}\n")
    except OSError as exc:
        parser.exit(
            1, f"srcindex {args.command} failed: {exc}\nRun with --verbose for more details.\n"
        )


def _build_orchestrator(args: argparse.Namespace, config: SrcIndexConfig) -> Orchestrator:
    # Command-line mappings come first so they win over the config file.
    mappings: List[Any] = list(args.map)
    for map_file in args.map_file:
        mappings.append(Path(map_file).read_text(encoding="utf-8"))
    mappings.extend(config.mappings)

    tools_dir = getattr(args, "tools_dir", None) or config.tools_dir
    return Orchestrator.from_settings(
        mappings=mappings,
        exclude_paths=[*config.exclude_paths, *args.exclude],
        tools_dir=tools_dir,
    )


def _run_index(orchestrator: Orchestrator, args: argparse.Namespace) -> None:
    dry_run = bool(getattr(args, "dry_run", False))
    reports = orchestrator.run_index(args.pdbs, dry_run=dry_run)
    for report in reports:
        if dry_run and report.stream:
            print(f"# {report.binary}")
            print(report.stream, end="")
        status = "written" if report.written else ("dry-run" if dry_run else "not written")
        print(
            f"{_relativize(Path(report.binary))}: {len(report.entries)} indexed, "
            f"{report.excluded} excluded, {report.unresolved} unresolved ({status})"
        )


def _run_resolve(orchestrator: Orchestrator, args: argparse.Namespace) -> None:
    for path, decision, node in orchestrator.run_resolve(args.files):
        if decision is Decision.RESOLVED and node is not None:
            print(f"{path} -> {node.name}@{node.commit} ({node.path})")
        else:
            print(f"{path} -> {decision.value}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
