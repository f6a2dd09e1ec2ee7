"""Tests for srcindex.index."""

from __future__ import annotations

from pathlib import Path

import pytest

from srcindex.errors import FileMissing, MalformedMapping, RepoUndiscoverable
from srcindex.git import GitClient
from srcindex.index import RepositoryIndex
from tests._fixtures.fake_git import FakeGit


def _mapping(name, path, commit, submodules=None):  # type: ignore[no-untyped-def]
    record = {"Name": name, "Path": path, "Commit": commit}
    if submodules is not None:
        record["Submodules"] = submodules
    return record


def _touch(path: Path) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("// source\n", encoding="utf-8")
    return str(path)


# ----------------------------------------------------------------------
# Seeding and resolution


def test_resolve_prefers_deepest_submodule() -> None:
    index = RepositoryIndex(
        GitClient(runner=FakeGit()),
        mappings=_mapping(
            "org/proj",
            "C:\\repos\\proj",
            "def456",
            [
                _mapping(
                    "org/sub",
                    "C:/repos/proj/sub",
                    "abc123",
                    [_mapping("org/leaf", "C:/repos/proj/sub/leaf", "777")],
                )
            ],
        ),
    )

    assert index.resolve("C:\\repos\\proj\\src\\a.cpp").name == "org/proj"
    assert index.resolve("C:\\repos\\proj\\sub\\b.cpp").name == "org/sub"
    assert index.resolve("c:/REPOS/proj/sub/leaf/c.cpp").commit == "777"
    assert index.resolve("D:/elsewhere/x.cpp") is None


def test_files_under_same_root_share_identity() -> None:
    index = RepositoryIndex(
        GitClient(runner=FakeGit()), mappings=_mapping("org/proj", "/repos/proj", "def456")
    )

    first = index.resolve("/repos/proj/src/a.cpp")
    second = index.resolve("/repos/proj/include/deep/b.h")

    assert first is second
    assert (first.name, first.commit) == ("org/proj", "def456")


def test_seed_first_registration_wins() -> None:
    index = RepositoryIndex(GitClient(runner=FakeGit()))

    assert index.seed(_mapping("org/first", "C:/build/proj", "1")) == 1
    assert index.seed(_mapping("org/second", "c:\\BUILD\\proj\\", "2")) == 0

    assert [node.name for node in index.nodes] == ["org/first"]
    assert index.resolve("C:/build/proj/a.cpp").name == "org/first"


def test_seed_rejects_duplicate_submodule_even_for_new_parent() -> None:
    index = RepositoryIndex(GitClient(runner=FakeGit()))
    index.seed(_mapping("org/vendored", "/repos/app/vendor/lib", "aaa"))

    index.seed(
        _mapping(
            "org/app", "/repos/app", "bbb", [_mapping("org/lib", "/repos/app/vendor/lib", "ccc")]
        )
    )

    (app,) = [node for node in index.nodes if node.name == "org/app"]
    assert app.submodules == []
    assert index.resolve("/repos/app/vendor/lib/x.c").name == "org/vendored"


def test_seed_rejected_parent_drops_its_subtree() -> None:
    index = RepositoryIndex(GitClient(runner=FakeGit()))
    index.seed(_mapping("org/app", "/repos/app", "1"))

    index.seed(
        _mapping("org/app-copy", "/repos/app", "2", [_mapping("org/lib", "/repos/app/lib", "3")])
    )

    assert len(list(index)) == 1
    assert "/repos/app/lib" not in index


def test_seed_validates_everything_before_registering() -> None:
    index = RepositoryIndex(GitClient(runner=FakeGit()))

    with pytest.raises(MalformedMapping):
        index.seed([_mapping("org/good", "/good", "1"), _mapping("bad", "/bad", "2")])

    assert index.nodes == []


# ----------------------------------------------------------------------
# Discovery


def test_discover_builds_repository_with_submodules(tmp_path: Path, fake_git: FakeGit) -> None:
    proj = tmp_path / "proj"
    fake_git.add(proj, name="org/proj", commit="def456", submodules=[("sub", "sub")])
    fake_git.add(proj / "sub", name="org/sub", commit="abc123")
    source = _touch(proj / "src" / "a.cpp")
    _touch(proj / "sub" / "b.cpp")
    index = RepositoryIndex(GitClient(runner=fake_git))

    node = index.discover(source)

    assert (node.name, node.commit, node.path) == ("org/proj", "def456", proj.as_posix())
    assert [(sub.name, sub.commit) for sub in node.submodules] == [("org/sub", "abc123")]
    assert index.resolve(str(proj / "sub" / "b.cpp")).name == "org/sub"


def test_discover_omits_submodules_that_fail(tmp_path: Path, fake_git: FakeGit) -> None:
    proj = tmp_path / "proj"
    fake_git.add(
        proj,
        submodules=[("private", "private"), ("empty", "empty"), ("gone", "gone")],
    )
    fake_git.add(
        proj / "private", name="corp/private", remotes={"origin": "https://git.corp/p.git"}
    )
    (proj / "empty").mkdir()
    source = _touch(proj / "main.cpp")
    index = RepositoryIndex(GitClient(runner=fake_git))

    node = index.discover(source)

    assert node.submodules == []
    assert index.resolve(str(proj / "empty" / "x.cpp")) is node


def test_discover_uses_remote_that_contains_the_commit(tmp_path: Path, fake_git: FakeGit) -> None:
    proj = tmp_path / "proj"
    fake_git.add(
        proj,
        commit="f00d",
        remotes={
            "fork": "git@github.com:me/proj.git",
            "mirror": "https://gitlab.com/org/proj.git",
            "upstream": "https://github.com/org/proj.git",
        },
        branches=["mirror/main", "upstream/main"],
    )
    source = _touch(proj / "a.cpp")

    node = RepositoryIndex(GitClient(runner=fake_git)).discover(source)

    assert node.name == "org/proj"


def test_discover_fails_outside_version_control(tmp_path: Path, fake_git: FakeGit) -> None:
    source = _touch(tmp_path / "loose" / "a.cpp")

    with pytest.raises(RepoUndiscoverable) as excinfo:
        RepositoryIndex(GitClient(runner=fake_git)).discover(source)

    assert excinfo.value.directory == (tmp_path / "loose").as_posix()


def test_discover_fails_without_public_remote(tmp_path: Path, fake_git: FakeGit) -> None:
    proj = tmp_path / "proj"
    fake_git.add(proj, remotes={"origin": "https://dev.azure.com/org/_git/proj"})
    source = _touch(proj / "a.cpp")

    with pytest.raises(RepoUndiscoverable):
        RepositoryIndex(GitClient(runner=fake_git)).discover(source)


def test_discover_fails_for_unpushed_commit(tmp_path: Path, fake_git: FakeGit) -> None:
    proj = tmp_path / "proj"
    fake_git.add(proj, branches=[])
    source = _touch(proj / "a.cpp")

    with pytest.raises(RepoUndiscoverable):
        RepositoryIndex(GitClient(runner=fake_git)).discover(source)


def test_discover_missing_directory_raises_file_missing(tmp_path: Path, fake_git: FakeGit) -> None:
    with pytest.raises(FileMissing):
        RepositoryIndex(GitClient(runner=fake_git)).discover(str(tmp_path / "gone" / "a.cpp"))

    assert fake_git.calls == []


def test_discover_does_not_register_a_root_twice(tmp_path: Path, fake_git: FakeGit) -> None:
    proj = tmp_path / "proj"
    fake_git.add(proj)
    index = RepositoryIndex(GitClient(runner=fake_git))

    first = index.discover(_touch(proj / "a" / "one.cpp"))
    second = index.discover(_touch(proj / "b" / "two.cpp"))

    assert first is second
    assert len(index) == 1


def test_discovered_parent_skips_known_submodule(tmp_path: Path, fake_git: FakeGit) -> None:
    proj = tmp_path / "proj"
    fake_git.add(proj, name="org/proj", submodules=[("sub", "sub")])
    fake_git.add(proj / "sub", name="org/sub", commit="abc123")
    index = RepositoryIndex(GitClient(runner=fake_git))

    sub = index.discover(_touch(proj / "sub" / "b.cpp"))
    parent = index.discover(_touch(proj / "src" / "a.cpp"))

    assert parent.submodules == []
    assert len(index) == 2
    assert index.resolve(str(proj / "sub" / "b.cpp")) is sub


def test_locate_resolves_before_discovering(tmp_path: Path, fake_git: FakeGit) -> None:
    proj = tmp_path / "proj"
    fake_git.add(proj, name="org/auto")
    source = _touch(proj / "a.cpp")
    index = RepositoryIndex(
        GitClient(runner=fake_git), mappings=_mapping("org/manual", proj.as_posix(), "seeded")
    )

    node = index.locate(source)

    assert node.name == "org/manual"
    assert fake_git.calls == []
