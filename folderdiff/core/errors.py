"""
Exceptions raised by the comparison engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from folderdiff.core.models import Side


class ComparisonError(Exception):
    """Base class for errors that fail a whole comparison."""

    def __init__(self, message: str, path: Optional[Path | str] = None, side: Optional[Side] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.side = side


class PathNotFoundError(ComparisonError):
    """A root does not exist."""

    def __init__(self, path: Path | str, side: Optional[Side] = None):
        label = f"{side.value.capitalize()} path" if side else "Path"
        super().__init__(f"{label} not found: {path}", path, side)


class RootNotDirectoryError(ComparisonError):
    """A root exists but is not a directory."""

    def __init__(self, path: Path | str, side: Optional[Side] = None):
        label = f"{side.value.capitalize()} path" if side else "Path"
        super().__init__(f"{label} is not a directory: {path}", path, side)


class RootPermissionError(ComparisonError):
    """A root cannot be listed at all."""

    def __init__(self, path: Path | str, side: Optional[Side] = None, cause: str = ""):
        label = f"{side.value.capitalize()} path" if side else "Path"
        message = f"{label} cannot be read: {path}"
        if cause:
            message = f"{message} ({cause})"
        super().__init__(message, path, side)


class ComparisonCancelled(Exception):
    """
    Raised when a comparison is cancelled through its token.

    Not a ComparisonError: cancellation is a requested outcome,
    not a failure.
    """
    pass
