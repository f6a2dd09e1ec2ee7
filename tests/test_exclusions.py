"""Tests for srcindex.exclusions."""

from __future__ import annotations

from pathlib import Path

import pytest

from srcindex.config import ConfigError
from srcindex.exclusions import ExclusionSet


def test_parent_absorbs_previously_added_children() -> None:
    exclusions = ExclusionSet()

    assert exclusions.add_directory("/work/proj/third_party/zlib") is True
    assert exclusions.add_directory("/work/proj/third_party/png") is True
    assert exclusions.add_directory("/work/proj/third_party") is True

    assert exclusions.directories == ["/work/proj/third_party"]


def test_child_of_existing_entry_is_a_noop() -> None:
    exclusions = ExclusionSet()

    assert exclusions.add_directory("/work/proj/third_party") is True
    assert exclusions.add_directory("/work/proj/third_party/zlib") is False

    assert exclusions.directories == ["/work/proj/third_party"]


def test_verbatim_duplicate_returns_false() -> None:
    exclusions = ExclusionSet()

    assert exclusions.add_directory("C:\\sdk\\include\\") is True
    assert exclusions.add_directory("C:/sdk/include") is False
    assert len(exclusions) == 1


def test_is_excluded_matches_descendants_case_insensitively() -> None:
    exclusions = ExclusionSet(["C:/Program Files (x86)/Windows Kits"])

    assert exclusions.entries == [r"C:/Program Files \(x86\)/Windows Kits"]
    assert exclusions.is_excluded("c:\\program files (x86)\\windows kits\\10\\ucrt\\stdio.h")
    assert not exclusions.is_excluded("C:/src/app/main.cpp")


def test_add_from_file_uses_containing_directory() -> None:
    exclusions = ExclusionSet()

    assert exclusions.add_from_file("/build/gen/out.cpp") is True
    assert exclusions.is_excluded("/build/gen/other.cpp")
    assert exclusions.add_from_file("/build/gen/again.cpp") is False


def test_from_directories_requires_existing_paths(tmp_path: Path) -> None:
    existing = tmp_path / "vendor"
    existing.mkdir()

    exclusions = ExclusionSet.from_directories([existing])
    assert exclusions.is_excluded(str(existing.resolve() / "lib.c"))

    with pytest.raises(ConfigError):
        ExclusionSet.from_directories([tmp_path / "missing"])
