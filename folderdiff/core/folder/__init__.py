"""
Folder comparison module.

Provides functionality for:
- Recursive and single-level directory scanning
- Name-based ignore patterns
- Folder-to-folder comparison with parallel content checks
"""

from folderdiff.core.folder.scanner import (
    FolderScanner,
    IgnoreMatcher,
    ScanOptions,
    ScanProgress,
    ScanResult,
    validate_root,
)
from folderdiff.core.folder.comparer import (
    CompareOptions,
    CompareTask,
    FolderComparer,
    compare,
)

__all__ = [
    # Scanner
    'FolderScanner',
    'IgnoreMatcher',
    'ScanOptions',
    'ScanProgress',
    'ScanResult',
    'validate_root',
    # Comparer
    'CompareOptions',
    'CompareTask',
    'FolderComparer',
    'compare',
]
