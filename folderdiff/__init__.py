"""
Folder comparison tool.

Compares two directory trees and reports entries found on only one
side and entries whose contents differ.
"""

from folderdiff.core import (
    CancellationToken,
    ComparisonCancelled,
    ComparisonError,
    ComparisonRequest,
    ComparisonResult,
    PartialFailure,
)
from folderdiff.core.folder import CompareOptions, CompareTask, FolderComparer, compare

__version__ = "1.0.0"

__all__ = [
    'CancellationToken',
    'ComparisonCancelled',
    'ComparisonError',
    'ComparisonRequest',
    'ComparisonResult',
    'PartialFailure',
    'CompareOptions',
    'CompareTask',
    'FolderComparer',
    'compare',
]
