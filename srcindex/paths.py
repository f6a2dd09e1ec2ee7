"""Path normalization and containment matching shared by the index and exclusions."""

from __future__ import annotations

import posixpath
import re
from functools import lru_cache

_REPEATED_SLASHES = re.compile(r"/{2,}")
_DRIVE_ROOT = re.compile(r"^[A-Za-z]:/$")


def normalize_path(path: str) -> str:
    """Return `path` with forward slashes and no trailing separator.

    Windows and POSIX spellings of the same location normalize to the same
    text, e.g. ``C:\\src\\proj\\`` becomes ``C:/src/proj``. A leading double
    slash (UNC share) is kept.
    """
    text = str(path).strip().replace("\\", "/")
    unc = text.startswith("//")
    text = _REPEATED_SLASHES.sub("/", text)
    if unc:
        text = "/" + text
    if len(text) > 1 and text.endswith("/") and not _DRIVE_ROOT.match(text):
        text = text.rstrip("/") or "/"
    return text


def path_key(path: str) -> str:
    """Case-folded key used to compare paths for uniqueness."""
    return normalize_path(path).casefold()


def containing_directory(path: str) -> str:
    return posixpath.dirname(normalize_path(path))


def path_pattern(path: str) -> str:
    """Pattern text for `path`; parentheses are the only escaped characters."""
    return normalize_path(path).replace("(", r"\(").replace(")", r"\)")


def path_matches(pattern: str, path: str) -> bool:
    """True when `pattern` is found anywhere in the normalized `path`, ignoring case."""
    compiled = _compile(pattern)
    target = normalize_path(path)
    if compiled is None:
        literal = pattern.replace(r"\(", "(").replace(r"\)", ")")
        return literal.casefold() in target.casefold()
    return compiled.search(target) is not None


def strip_root(path: str, root: str) -> str:
    """Textually remove `root` from the front of `path` without touching the filesystem."""
    normalized = normalize_path(path)
    prefix = normalize_path(root)
    if normalized.casefold().startswith(prefix.casefold()):
        normalized = normalized[len(prefix):]
    return normalized.lstrip("/")


@lru_cache(maxsize=1024)
def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error:
        return None


__all__ = [
    "containing_directory",
    "normalize_path",
    "path_key",
    "path_matches",
    "path_pattern",
    "strip_root",
]
