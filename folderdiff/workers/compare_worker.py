"""
Worker for folder comparison.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QObject

from folderdiff.core.folder.comparer import CompareOptions, FolderComparer
from folderdiff.core.models import ComparisonRequest, ComparisonResult, CompareProgress
from folderdiff.workers.base_worker import BaseWorker, ProgressInfo


class FolderCompareWorker(BaseWorker):
    """
    Worker for comparing folders.

    Runs one comparison request without blocking the UI thread and
    delivers exactly one of `finished`, `cancelled` or `error`.
    """

    def __init__(
        self,
        request: ComparisonRequest,
        options: Optional[CompareOptions] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.request = request
        self.options = options or CompareOptions()

    def do_work(self) -> ComparisonResult:
        self.report_status(f"Comparing {self.request.left} with {self.request.right}...")

        comparer = FolderComparer(self.options)
        result = comparer.compare(self.request, self.cancel_token, self._on_progress)

        self.report_status(result.get_summary())
        return result

    def _on_progress(self, progress: CompareProgress) -> None:
        self.report_progress_detail(ProgressInfo(
            current=progress.items_processed,
            total=progress.total_items,
            message=progress.phase,
            detail=progress.current_path,
        ))
