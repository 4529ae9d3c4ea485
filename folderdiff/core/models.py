"""
Core data models for folder comparison.

This module defines the data structures shared by the scanner,
the comparer, the report writer and the workers:
- Comparison requests (immutable, one per "Compare" action)
- Comparison results (immutable, handed to the caller)
- Per-path partial failures
- Scanner entries

All models are designed to be:
- UI-agnostic (can be used with any frontend)
- Immutable, so they can be passed between threads freely
- Deterministic, so equal inputs give equal results
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, Iterator, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from folderdiff.services.settings import ComparisonSettings


# =============================================================================
# Enumerations
# =============================================================================

class EntryKind(Enum):
    """Type of filesystem entry."""
    FILE = auto()
    DIRECTORY = auto()
    SYMLINK = auto()
    SPECIAL = auto()    # FIFO, socket, device node


class Side(Enum):
    """Which root an entry or failure belongs to."""
    LEFT = "left"
    RIGHT = "right"

    @property
    def other(self) -> 'Side':
        return Side.RIGHT if self is Side.LEFT else Side.LEFT


class FailureKind(Enum):
    """Category of a per-path failure."""
    PERMISSION_DENIED = auto()
    IO_ERROR = auto()

    @classmethod
    def from_exception(cls, error: BaseException) -> 'FailureKind':
        if isinstance(error, PermissionError):
            return cls.PERMISSION_DENIED
        return cls.IO_ERROR


class DiffCategory(Enum):
    """Category a relative path is reported under."""
    LEFT_ONLY = "<"
    RIGHT_ONLY = ">"
    DIFFERING = "!"

    @property
    def prefix(self) -> str:
        """Prefix used in the plain-text report."""
        return f"{self.value} "


# =============================================================================
# Scanner Models
# =============================================================================

@dataclass(frozen=True)
class ScanEntry:
    """A single entry found under a root."""
    relative_path: str          # POSIX separators, relative to the root
    kind: EntryKind
    size: int = 0
    link_target: Optional[str] = None

    @property
    def name(self) -> str:
        return self.relative_path.rsplit('/', 1)[-1]

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.kind == EntryKind.SYMLINK


@dataclass(frozen=True)
class PartialFailure:
    """
    A path that could not be fully inspected.

    The comparison still completes; the failure is attached to the
    result so the caller can show which parts are undetermined.
    """
    path: str                   # Relative path, "" for the root itself
    side: Side
    kind: FailureKind
    cause: str

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.path, self.side.value)

    def describe(self) -> str:
        """Human-readable one-line description."""
        label = self.path or "."
        return f"[{self.side.value}] {label}: {self.cause}"


# =============================================================================
# Request / Result
# =============================================================================

@dataclass(frozen=True)
class ComparisonRequest:
    """
    One comparison to perform.

    Built once per user action and never mutated; the engine keeps
    no state between requests.
    """
    left: Path
    right: Path
    recursive: bool = True
    ignore_patterns: frozenset[str] = field(default_factory=frozenset)
    compare_contents: bool = True

    def __post_init__(self) -> None:
        # Accept plain strings and any iterable of patterns
        object.__setattr__(self, 'left', Path(self.left))
        object.__setattr__(self, 'right', Path(self.right))
        object.__setattr__(self, 'ignore_patterns', frozenset(self.ignore_patterns))

    def swapped(self) -> 'ComparisonRequest':
        """Return the same request with left and right exchanged."""
        return replace(self, left=self.right, right=self.left)

    def root(self, side: Side) -> Path:
        return self.left if side is Side.LEFT else self.right

    @classmethod
    def from_settings(
        cls,
        left: Path | str,
        right: Path | str,
        settings: 'ComparisonSettings',
        extra_ignore_patterns: Iterable[str] = (),
    ) -> 'ComparisonRequest':
        """Build a request using persisted comparison defaults."""
        patterns = set(settings.ignore_patterns) | set(extra_ignore_patterns)
        return cls(
            left=Path(left),
            right=Path(right),
            recursive=settings.recursive,
            ignore_patterns=frozenset(patterns),
            compare_contents=settings.compare_contents,
        )


@dataclass(frozen=True)
class ComparisonResult:
    """
    Complete result of a folder comparison.

    Every relative path appears in at most one of `only_in_left`,
    `only_in_right` and `differing`. Paths that are identical (or were
    not inspected) are only counted in `identical_count`.
    """
    left_root: str
    right_root: str
    only_in_left: tuple[str, ...] = ()
    only_in_right: tuple[str, ...] = ()
    differing: tuple[str, ...] = ()
    identical_count: int = 0
    failures: tuple[PartialFailure, ...] = ()

    @property
    def has_differences(self) -> bool:
        """Check if there are any differences."""
        return bool(self.only_in_left or self.only_in_right or self.differing)

    @property
    def is_complete(self) -> bool:
        """True when every path could be inspected."""
        return not self.failures

    @property
    def difference_count(self) -> int:
        return len(self.only_in_left) + len(self.only_in_right) + len(self.differing)

    def failure_for(self, path: str) -> Optional[PartialFailure]:
        """Get the first failure recorded for a relative path."""
        for failure in self.failures:
            if failure.path == path:
                return failure
        return None

    def failures_for(self, path: str) -> tuple[PartialFailure, ...]:
        """Get every failure recorded for a relative path, in (path, side) order."""
        return tuple(f for f in self.failures if f.path == path)

    def iter_entries(self) -> Iterator[tuple[DiffCategory, str]]:
        """Iterate over all reported paths with their category."""
        for path in self.only_in_left:
            yield DiffCategory.LEFT_ONLY, path
        for path in self.only_in_right:
            yield DiffCategory.RIGHT_ONLY, path
        for path in self.differing:
            yield DiffCategory.DIFFERING, path

    def get_summary(self) -> str:
        """Get a one-line summary of the counts."""
        return (f"{len(self.only_in_left)} only in left, "
                f"{len(self.only_in_right)} only in right, "
                f"{len(self.differing)} differing, "
                f"{self.identical_count} identical")


@dataclass
class CompareProgress:
    """Progress of a comparison operation."""
    phase: str  # 'scanning_left', 'scanning_right', 'comparing'
    current_path: str
    items_processed: int
    total_items: int

    @property
    def percent(self) -> float:
        if self.total_items == 0:
            return 0.0
        return self.items_processed / self.total_items * 100
