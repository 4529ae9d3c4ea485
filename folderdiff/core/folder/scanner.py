"""
Directory scanner for folder comparison.

Provides configurable directory traversal with:
- Recursive or single-level scanning
- Name-based ignore patterns (literal or glob)
- Symlink handling (links are leaves, never followed)
- Progress reporting
- Error resilience (per-path failures are recorded, not raised)
"""

from __future__ import annotations

import fnmatch
import logging
import os
import stat
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from folderdiff.core.cancellation import CancellationToken
from folderdiff.core.errors import (
    PathNotFoundError,
    RootNotDirectoryError,
    RootPermissionError,
)
from folderdiff.core.models import (
    EntryKind,
    FailureKind,
    PartialFailure,
    ScanEntry,
    Side,
)


@dataclass
class ScanOptions:
    """Options for directory scanning."""
    recursive: bool = True
    ignore_patterns: frozenset[str] = field(default_factory=frozenset)


@dataclass
class ScanProgress:
    """Progress information for scanning."""
    side: Side
    current_path: str
    entries_found: int
    errors: int


@dataclass
class ScanResult:
    """Result of scanning one root."""
    root_path: Path
    side: Side
    entries: dict[str, ScanEntry]       # Relative path -> entry
    errors: list[PartialFailure]
    undetermined: set[str]              # Paths whose contents could not be listed or stat'ed
    scan_time: float

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    def get_all_paths(self) -> set[str]:
        """Get all reported relative paths."""
        return set(self.entries.keys())

    def get_entry(self, relative_path: str) -> Optional[ScanEntry]:
        return self.entries.get(relative_path)

    def is_undetermined(self, relative_path: str) -> bool:
        """
        Check if a path lies at or beneath a location that failed.

        Presence of such a path on this side is unknown, so the
        comparer must not report it as missing here.
        """
        if not self.undetermined:
            return False
        if '' in self.undetermined:
            return True
        parts = relative_path.split('/')
        for depth in range(1, len(parts) + 1):
            if '/'.join(parts[:depth]) in self.undetermined:
                return True
        return False

    def iter_entries(self) -> Iterator[ScanEntry]:
        """Iterate over entries sorted by relative path."""
        for rel_path in sorted(self.entries):
            yield self.entries[rel_path]


class IgnoreMatcher:
    """
    Matches entry names against ignore patterns.

    A pattern is either a literal name (".DS_Store") or an fnmatch
    glob ("*.pyc"). Only the final path component is matched.
    """

    def __init__(self, patterns: Iterable[str]):
        self._literals: set[str] = set()
        self._globs: list[str] = []

        for pattern in patterns:
            pattern = pattern.strip()
            if not pattern:
                continue
            if any(c in pattern for c in '*?['):
                self._globs.append(pattern)
            else:
                self._literals.add(pattern)

    def __bool__(self) -> bool:
        return bool(self._literals or self._globs)

    def matches(self, name: str) -> bool:
        """Return True if the entry name should be excluded."""
        if name in self._literals:
            return True
        for pattern in self._globs:
            if fnmatch.fnmatch(name, pattern):
                return True
        return False


def validate_root(root_path: Path | str, side: Side) -> Path:
    """
    Resolve a root and check that it can be scanned.

    Raises:
        PathNotFoundError: root does not exist
        RootNotDirectoryError: root is not a directory
        RootPermissionError: root cannot be listed
    """
    root_path = Path(root_path)

    if not root_path.exists():
        logging.error(f"FolderScanner - {side.value} root not found: {root_path}")
        raise PathNotFoundError(root_path, side)

    if not root_path.is_dir():
        logging.error(f"FolderScanner - {side.value} root is not a directory: {root_path}")
        raise RootNotDirectoryError(root_path, side)

    root_path = root_path.resolve()

    try:
        with os.scandir(root_path) as it:
            next(it, None)
    except OSError as e:
        logging.error(f"FolderScanner - {side.value} root cannot be listed: {root_path}: {e}")
        raise RootPermissionError(root_path, side, e.strerror or str(e)) from e

    return root_path


class FolderScanner:
    """
    Scans a directory to build the set of entries to compare.

    In recursive mode only non-directory leaves are reported;
    directories are traversed but elided. In single-level mode the
    immediate children are reported, directories included.

    A scanner holds no per-scan state, so one instance can scan
    both roots concurrently.
    """

    def __init__(
        self,
        options: Optional[ScanOptions] = None,
        cancel_token: Optional[CancellationToken] = None
    ):
        self.options = options or ScanOptions()
        self._cancel_token = cancel_token or CancellationToken()
        self._matcher = IgnoreMatcher(self.options.ignore_patterns)

    def scan(
        self,
        root_path: Path | str,
        side: Side = Side.LEFT,
        progress_callback: Optional[Callable[[ScanProgress], None]] = None
    ) -> ScanResult:
        """
        Scan a directory tree.

        Args:
            root_path: Root directory to scan
            side: Which side of the comparison this root is
            progress_callback: Called once per directory visited

        Returns:
            ScanResult with all found entries and per-path failures

        Raises:
            ComparisonError: if the root is missing, not a directory or unreadable
            ComparisonCancelled: if the cancel token was set
        """
        start_time = time.time()
        root_path = validate_root(root_path, side)

        entries: dict[str, ScanEntry] = {}
        errors: list[PartialFailure] = []
        undetermined: set[str] = set()

        def record_failure(rel_path: str, error: OSError) -> None:
            cause = error.strerror or str(error)
            errors.append(PartialFailure(
                path=rel_path,
                side=side,
                kind=FailureKind.from_exception(error),
                cause=cause,
            ))
            undetermined.add(rel_path)
            logging.warning(f"FolderScanner - Could not read {side.value} entry '{rel_path}': {cause}")

        def on_walk_error(error: OSError) -> None:
            if error.filename:
                rel_path = self._relative(Path(error.filename), root_path)
            else:
                rel_path = ""
            record_failure(rel_path, error)

        for dirpath, dirnames, filenames in os.walk(
            root_path,
            topdown=True,
            followlinks=False,
            onerror=on_walk_error
        ):
            self._cancel_token.raise_if_cancelled()

            current_path = Path(dirpath)
            rel_dir = self._relative(current_path, root_path)

            # Sort for consistent ordering
            dirnames.sort()
            filenames.sort()

            descend: list[str] = []
            for dirname in dirnames:
                if self._matcher and self._matcher.matches(dirname):
                    continue

                dir_full_path = current_path / dirname
                rel_path = self._join(rel_dir, dirname)

                if os.path.islink(dir_full_path):
                    # Symlinked directory: leaf entry, never traversed
                    entry = self._make_entry(dir_full_path, rel_path, record_failure)
                    if entry is not None:
                        entries[rel_path] = entry
                elif self.options.recursive:
                    descend.append(dirname)
                else:
                    entries[rel_path] = ScanEntry(relative_path=rel_path, kind=EntryKind.DIRECTORY)

            # Filter in place to control recursion
            dirnames[:] = descend

            for filename in filenames:
                if self._matcher and self._matcher.matches(filename):
                    continue

                rel_path = self._join(rel_dir, filename)
                entry = self._make_entry(current_path / filename, rel_path, record_failure)
                if entry is not None:
                    entries[rel_path] = entry

            if progress_callback:
                progress_callback(ScanProgress(
                    side=side,
                    current_path=rel_dir,
                    entries_found=len(entries),
                    errors=len(errors),
                ))

            if not self.options.recursive:
                break

        scan_time = time.time() - start_time
        logging.debug(
            f"FolderScanner - Scanned {side.value} root {root_path}: "
            f"{len(entries)} entries, {len(errors)} errors in {scan_time:.3f}s"
        )

        return ScanResult(
            root_path=root_path,
            side=side,
            entries=entries,
            errors=errors,
            undetermined=undetermined,
            scan_time=scan_time,
        )

    def _make_entry(
        self,
        path: Path,
        rel_path: str,
        record_failure: Callable[[str, OSError], None]
    ) -> Optional[ScanEntry]:
        """Build an entry from lstat, recording a failure if that is not possible."""
        try:
            stat_result = path.lstat()
        except OSError as e:
            record_failure(rel_path, e)
            return None

        mode = stat_result.st_mode

        if stat.S_ISLNK(mode):
            try:
                target = os.readlink(path)
            except OSError as e:
                record_failure(rel_path, e)
                return None
            return ScanEntry(relative_path=rel_path, kind=EntryKind.SYMLINK, link_target=target)

        if stat.S_ISREG(mode):
            return ScanEntry(relative_path=rel_path, kind=EntryKind.FILE, size=stat_result.st_size)

        if stat.S_ISDIR(mode):
            # Replaced by a directory between listing and lstat
            return ScanEntry(relative_path=rel_path, kind=EntryKind.DIRECTORY)

        logging.debug(f"FolderScanner - Special file {rel_path} (mode {oct(mode)})")
        return ScanEntry(relative_path=rel_path, kind=EntryKind.SPECIAL)

    @staticmethod
    def _relative(path: Path, root_path: Path) -> str:
        try:
            rel = path.relative_to(root_path).as_posix()
        except ValueError:
            return path.as_posix()
        return "" if rel == "." else rel

    @staticmethod
    def _join(rel_dir: str, name: str) -> str:
        return f"{rel_dir}/{name}" if rel_dir else name
