from __future__ import annotations

import os
from pathlib import Path

import pytest

from folderdiff.core.cancellation import CancellationToken
from folderdiff.core.errors import (
    ComparisonCancelled,
    PathNotFoundError,
    RootNotDirectoryError,
)
from folderdiff.core.folder.scanner import FolderScanner, IgnoreMatcher, ScanOptions, ScanResult
from folderdiff.core.models import EntryKind, FailureKind, PartialFailure, Side

from conftest import requires_permissions


def test_recursive_scan_reports_files_and_elides_directories(make_tree):
    root = make_tree("root", {
        "a.txt": "a",
        "sub/b.txt": "bb",
        "sub/deeper/c.txt": "ccc",
        "empty": None,
    })

    result = FolderScanner(ScanOptions(recursive=True)).scan(root)

    assert result.get_all_paths() == {"a.txt", "sub/b.txt", "sub/deeper/c.txt"}
    assert result.get_entry("sub/b.txt").kind == EntryKind.FILE
    assert result.get_entry("sub/deeper/c.txt").size == 3
    assert result.errors == []


def test_single_level_scan_reports_children_only(make_tree):
    root = make_tree("root", {
        "a.txt": "a",
        "sub/deep.txt": "deep",
    })

    result = FolderScanner(ScanOptions(recursive=False)).scan(root)

    assert result.get_all_paths() == {"a.txt", "sub"}
    assert result.get_entry("sub").kind == EntryKind.DIRECTORY


def test_ignore_patterns_exclude_names_and_skip_ignored_directories(make_tree):
    root = make_tree("root", {
        ".DS_Store": "junk",
        "keep.py": "code",
        "keep.pyc": "bytecode",
        "build/out.txt": "artifact",
        "src/.DS_Store": "junk",
        "src/main.py": "code",
    })

    options = ScanOptions(ignore_patterns=frozenset({".DS_Store", "*.pyc", "build"}))
    result = FolderScanner(options).scan(root)

    assert result.get_all_paths() == {"keep.py", "src/main.py"}


def test_relative_paths_use_forward_slashes(make_tree):
    root = make_tree("root", {"a/b/c.txt": "x"})

    result = FolderScanner().scan(root)

    assert list(result.get_all_paths()) == ["a/b/c.txt"]


def test_symlinks_are_leaves_and_never_followed(make_tree, symlinks_supported):
    root = make_tree("root", {"real/file.txt": "x"})
    os.symlink("real", root / "link_to_dir")
    os.symlink("missing-target", root / "broken")
    os.symlink(".", root / "real" / "loop")

    result = FolderScanner(ScanOptions(recursive=True)).scan(root)

    assert result.get_all_paths() == {"real/file.txt", "link_to_dir", "broken", "real/loop"}
    link = result.get_entry("link_to_dir")
    assert link.kind == EntryKind.SYMLINK
    assert link.link_target == "real"
    assert result.get_entry("broken").link_target == "missing-target"


def test_missing_root_raises(tmp_path: Path):
    with pytest.raises(PathNotFoundError) as info:
        FolderScanner().scan(tmp_path / "nope", Side.RIGHT)

    assert info.value.side is Side.RIGHT
    assert "nope" in str(info.value)


def test_file_root_raises(make_tree):
    root = make_tree("root", {"file.txt": "x"})

    with pytest.raises(RootNotDirectoryError):
        FolderScanner().scan(root / "file.txt")


def test_cancelled_token_stops_scan(make_tree):
    root = make_tree("root", {"a.txt": "a"})
    token = CancellationToken()
    token.cancel()

    with pytest.raises(ComparisonCancelled):
        FolderScanner(cancel_token=token).scan(root)


def test_progress_reported_per_directory(make_tree):
    root = make_tree("root", {"a.txt": "a", "sub/b.txt": "b"})
    seen = []

    FolderScanner().scan(root, Side.LEFT, seen.append)

    assert [p.current_path for p in seen] == ["", "sub"]
    assert seen[-1].entries_found == 2
    assert all(p.side is Side.LEFT for p in seen)


@requires_permissions
def test_unreadable_directory_is_recorded_and_scan_continues(make_tree):
    root = make_tree("root", {"ok.txt": "x", "locked/secret.txt": "y"})
    locked = root / "locked"
    locked.chmod(0)
    try:
        result = FolderScanner().scan(root)
    finally:
        locked.chmod(0o755)

    assert result.get_all_paths() == {"ok.txt"}
    assert [f.path for f in result.errors] == ["locked"]
    assert result.errors[0].kind == FailureKind.PERMISSION_DENIED
    assert result.is_undetermined("locked/secret.txt")


def test_is_undetermined_matches_path_and_descendants_only():
    result = ScanResult(
        root_path=Path("/tmp"),
        side=Side.LEFT,
        entries={},
        errors=[PartialFailure("a/b", Side.LEFT, FailureKind.IO_ERROR, "boom")],
        undetermined={"a/b"},
        scan_time=0.0,
    )

    assert result.is_undetermined("a/b")
    assert result.is_undetermined("a/b/c.txt")
    assert not result.is_undetermined("a/bc")
    assert not result.is_undetermined("a")


def test_is_undetermined_with_many_failed_directories():
    result = ScanResult(
        root_path=Path("/tmp"),
        side=Side.LEFT,
        entries={},
        errors=[],
        undetermined={f"locked{i}" for i in range(1000)} | {"x/y/z"},
        scan_time=0.0,
    )

    assert result.is_undetermined("locked999/deep/file.txt")
    assert result.is_undetermined("x/y/z/w")
    assert not result.is_undetermined("x/y")
    assert not result.is_undetermined("locked1000")


def test_unreadable_root_marks_everything_undetermined():
    result = ScanResult(
        root_path=Path("/tmp"),
        side=Side.RIGHT,
        entries={},
        errors=[],
        undetermined={""},
        scan_time=0.0,
    )

    assert result.is_undetermined("anything/at/all.txt")


class TestIgnoreMatcher:

    def test_literal_and_glob(self):
        matcher = IgnoreMatcher([".DS_Store", "*.tmp", "cache?"])

        assert matcher.matches(".DS_Store")
        assert matcher.matches("x.tmp")
        assert matcher.matches("cache1")
        assert not matcher.matches("DS_Store")
        assert not matcher.matches("cache12")

    def test_blank_patterns_ignored(self):
        matcher = IgnoreMatcher(["", "  "])

        assert not matcher
        assert not matcher.matches("")
