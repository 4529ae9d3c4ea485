"""
Background workers for non-blocking operations.

Provides QThread-based workers so an interactive caller can run a
folder comparison off its UI thread. All workers use Qt signals for
thread-safe communication with the UI thread.
"""

from folderdiff.workers.base_worker import (
    BaseWorker,
    ProgressInfo,
    WorkerSignals,
    WorkerState,
    WorkerThread,
)
from folderdiff.workers.compare_worker import (
    FolderCompareWorker,
)

__all__ = [
    # Base
    'BaseWorker',
    'ProgressInfo',
    'WorkerSignals',
    'WorkerState',
    'WorkerThread',
    # Compare
    'FolderCompareWorker',
]
