"""Configuration loading for srcindex (.srcindex.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .mappings import normalize_mappings
from .models import MappingRecord

CONFIG_FILENAME = ".srcindex.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file or command-line settings are invalid."""


@dataclass
class SrcIndexConfig:
    """Represents the settings defined in .srcindex.yml."""

    root: Path
    tools_dir: Optional[Path] = None
    exclude_paths: List[Path] = field(default_factory=list)
    mappings: List[MappingRecord] = field(default_factory=list)


def load_config(config_path: Path) -> SrcIndexConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SrcIndexConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    tools_dir_value = data.get("tools_dir")
    tools_dir = None
    if tools_dir_value is not None:
        if not isinstance(tools_dir_value, str):
            raise ConfigError("tools_dir must be a string")
        tools_dir = _anchor(root, tools_dir_value)

    exclude_paths = [
        _anchor(root, item) for item in _as_str_list(data.get("exclude_paths"), "exclude_paths")
    ]

    # MalformedMapping propagates: a bad mapping rejects the whole run.
    mappings = normalize_mappings(data.get("mappings"))

    return SrcIndexConfig(
        root=root,
        tools_dir=tools_dir,
        exclude_paths=exclude_paths,
        mappings=mappings,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _anchor(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


def _as_str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        items = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigError(f"{key} entries must be strings, got {item!r}")
            items.append(item)
        return items
    raise ConfigError(f"{key} must be a string or a list of strings")


__all__ = ["CONFIG_FILENAME", "ConfigError", "SrcIndexConfig", "load_config"]
