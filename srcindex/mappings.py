"""Normalization of user-supplied repository mappings.

Mappings arrive from the command line and from ``.srcindex.yml`` in several
shapes: a single record, a list of records, or JSON text encoding either one,
nested to any depth. :func:`normalize_mappings` flattens all of them into
:class:`~srcindex.models.MappingRecord` values in one validation pass, so a
single bad record rejects the whole input before anything is seeded.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Mapping, Sequence

from .errors import MalformedMapping
from .models import MappingRecord
from .paths import normalize_path

_REPO_NAME = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
_KEYS = ("name", "path", "commit", "submodules")


def normalize_mappings(value: Any) -> List[MappingRecord]:
    """Return the canonical records described by `value`.

    Raises :class:`MalformedMapping` when any part of the input is not a
    valid record.
    """
    records: List[MappingRecord] = []
    _collect(value, records, location="mappings")
    return records


def _collect(value: Any, records: List[MappingRecord], *, location: str) -> None:
    if value is None:
        return
    if isinstance(value, MappingRecord):
        records.append(value)
        return
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedMapping(f"{location}: invalid JSON ({exc.msg})") from exc
        _collect(decoded, records, location=location)
        return
    if isinstance(value, Mapping):
        records.append(_record_from_mapping(value, location=location))
        return
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        for index, item in enumerate(value):
            _collect(item, records, location=f"{location}[{index}]")
        return
    raise MalformedMapping(f"{location}: unsupported mapping type {type(value).__name__}")


def _record_from_mapping(data: Mapping[Any, Any], *, location: str) -> MappingRecord:
    fields: dict[str, Any] = {}
    for key, item in data.items():
        lowered = str(key).lower()
        if lowered not in _KEYS:
            raise MalformedMapping(f"{location}: unknown key {key!r}")
        fields[lowered] = item

    name = fields.get("name")
    if not isinstance(name, str) or not _REPO_NAME.match(name.strip()):
        raise MalformedMapping(f"{location}: Name must look like 'owner/repo', got {name!r}")

    commit = fields.get("commit")
    if not isinstance(commit, str) or not commit.strip():
        raise MalformedMapping(f"{location}: Commit must be a non-empty string")

    path = fields.get("path")
    if not isinstance(path, str) or not path.strip():
        raise MalformedMapping(f"{location}: Path must be a non-empty string")

    submodules: List[MappingRecord] = []
    _collect(fields.get("submodules"), submodules, location=f"{location}.Submodules")

    return MappingRecord(
        name=name.strip(),
        path=normalize_path(path),
        commit=commit.strip(),
        submodules=tuple(submodules),
    )


__all__ = ["normalize_mappings"]
