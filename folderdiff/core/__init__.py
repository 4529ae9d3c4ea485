"""
Comparison engine core.

UI-agnostic models, errors, cancellation and the folder comparer.
"""

from folderdiff.core.cancellation import CancellationToken
from folderdiff.core.errors import (
    ComparisonCancelled,
    ComparisonError,
    PathNotFoundError,
    RootNotDirectoryError,
    RootPermissionError,
)
from folderdiff.core.models import (
    CompareProgress,
    ComparisonRequest,
    ComparisonResult,
    DiffCategory,
    EntryKind,
    FailureKind,
    PartialFailure,
    ScanEntry,
    Side,
)

__all__ = [
    'CancellationToken',
    # Errors
    'ComparisonCancelled',
    'ComparisonError',
    'PathNotFoundError',
    'RootNotDirectoryError',
    'RootPermissionError',
    # Models
    'CompareProgress',
    'ComparisonRequest',
    'ComparisonResult',
    'DiffCategory',
    'EntryKind',
    'FailureKind',
    'PartialFailure',
    'ScanEntry',
    'Side',
]
