"""
Folder comparison engine.

Compares two directory trees and identifies:
- Entries only in left
- Entries only in right
- Entries in both whose contents differ
- The number of identical entries
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from folderdiff.core.cancellation import CancellationToken
from folderdiff.core.errors import ComparisonCancelled
from folderdiff.core.folder.scanner import (
    FolderScanner,
    ScanOptions,
    ScanProgress,
    ScanResult,
    validate_root,
)
from folderdiff.core.models import (
    ComparisonRequest,
    ComparisonResult,
    CompareProgress,
    EntryKind,
    FailureKind,
    PartialFailure,
    ScanEntry,
    Side,
)


ProgressCallback = Callable[[CompareProgress], None]


@dataclass
class CompareOptions:
    """Tuning options for the comparer (not part of the request)."""
    parallel_workers: int = 8
    chunk_size: int = 65536

    def __post_init__(self) -> None:
        if self.parallel_workers < 1:
            raise ValueError(f"parallel_workers must be at least 1, got {self.parallel_workers}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {self.chunk_size}")


class FolderComparer:
    """
    Compares two folder trees.

    Both roots are scanned concurrently, the entry sets are diffed,
    and files present on both sides are compared byte by byte in a
    thread pool when the request asks for content comparison.

    The comparer keeps no state between calls; the same instance can
    serve several comparisons at once.
    """

    def __init__(self, options: Optional[CompareOptions] = None):
        self.options = options or CompareOptions()

    def compare(
        self,
        request: ComparisonRequest,
        cancel_token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> ComparisonResult:
        """
        Compare two directories.

        Args:
            request: What to compare and how
            cancel_token: Checked periodically; set it to abort
            progress_callback: Called with progress updates, possibly
                from worker threads

        Returns:
            ComparisonResult with sorted, disjoint path sequences

        Raises:
            ComparisonError: if a root is missing, not a directory or unreadable
            ComparisonCancelled: if the token was set before completion
        """
        start_time = time.time()
        token = cancel_token or CancellationToken()

        left_root = validate_root(request.left, Side.LEFT)
        right_root = validate_root(request.right, Side.RIGHT)

        logging.info(
            f"FolderComparer - Comparing {left_root} with {right_root} "
            f"(recursive={request.recursive}, contents={request.compare_contents}, "
            f"ignore={sorted(request.ignore_patterns)})"
        )

        scanner = FolderScanner(
            ScanOptions(
                recursive=request.recursive,
                ignore_patterns=request.ignore_patterns,
            ),
            token
        )

        def on_scan_progress(progress: ScanProgress) -> None:
            if progress_callback:
                progress_callback(CompareProgress(
                    phase=f"scanning_{progress.side.value}",
                    current_path=progress.current_path,
                    items_processed=progress.entries_found,
                    total_items=0,
                ))

        with ThreadPoolExecutor(max_workers=2) as executor:
            left_future = executor.submit(scanner.scan, left_root, Side.LEFT, on_scan_progress)
            right_future = executor.submit(scanner.scan, right_root, Side.RIGHT, on_scan_progress)

            left_scan = left_future.result()
            right_scan = right_future.result()

        token.raise_if_cancelled()

        result = self._compare_scans(request, left_scan, right_scan, token, progress_callback)

        logging.info(
            f"FolderComparer - Finished in {time.time() - start_time:.2f}s: {result.get_summary()}"
        )
        if result.failures:
            logging.warning(f"FolderComparer - {len(result.failures)} path(s) could not be fully compared")

        return result

    def _compare_scans(
        self,
        request: ComparisonRequest,
        left_scan: ScanResult,
        right_scan: ScanResult,
        token: CancellationToken,
        progress_callback: Optional[ProgressCallback]
    ) -> ComparisonResult:
        """Compare two scan results."""
        left_paths = left_scan.get_all_paths()
        right_paths = right_scan.get_all_paths()

        # A path under an unreadable directory on the other side is undetermined, not missing
        only_in_left = sorted(
            p for p in left_paths - right_paths
            if not right_scan.is_undetermined(p)
        )
        only_in_right = sorted(
            p for p in right_paths - left_paths
            if not left_scan.is_undetermined(p)
        )
        common = sorted(left_paths & right_paths)

        failures: list[PartialFailure] = list(left_scan.errors) + list(right_scan.errors)

        if request.compare_contents:
            differing, content_failures = self._compare_common(
                common, left_scan, right_scan, token, progress_callback
            )
            failures.extend(content_failures)
        else:
            differing = []

        return ComparisonResult(
            left_root=str(left_scan.root_path),
            right_root=str(right_scan.root_path),
            only_in_left=tuple(only_in_left),
            only_in_right=tuple(only_in_right),
            differing=tuple(sorted(differing)),
            identical_count=len(common) - len(differing),
            failures=tuple(sorted(failures, key=lambda f: f.sort_key)),
        )

    def _compare_common(
        self,
        common: list[str],
        left_scan: ScanResult,
        right_scan: ScanResult,
        token: CancellationToken,
        progress_callback: Optional[ProgressCallback]
    ) -> tuple[list[str], list[PartialFailure]]:
        """Determine which common paths differ."""
        differing: list[str] = []
        failures: list[PartialFailure] = []
        file_comparisons: list[tuple[str, Path, Path]] = []
        total_items = len(common)
        processed = 0

        for rel_path in common:
            token.raise_if_cancelled()

            left_entry = left_scan.entries[rel_path]
            right_entry = right_scan.entries[rel_path]

            if left_entry.kind == EntryKind.FILE and right_entry.kind == EntryKind.FILE:
                if left_entry.size != right_entry.size:
                    differing.append(rel_path)
                else:
                    file_comparisons.append((
                        rel_path,
                        left_scan.root_path / rel_path,
                        right_scan.root_path / rel_path,
                    ))
                    continue
            elif not self._entries_match(left_entry, right_entry):
                differing.append(rel_path)

            processed += 1
            self._report_progress(progress_callback, rel_path, processed, total_items)

        if file_comparisons:
            changed, read_failures = self._compare_files_parallel(
                file_comparisons, token, progress_callback, processed, total_items
            )
            differing.extend(changed)
            failures.extend(read_failures)

        return differing, failures

    @staticmethod
    def _entries_match(left_entry: ScanEntry, right_entry: ScanEntry) -> bool:
        """Compare two non-regular-file entries without reading anything."""
        if left_entry.kind != right_entry.kind:
            return False
        if left_entry.kind == EntryKind.SYMLINK:
            return left_entry.link_target == right_entry.link_target
        # Directories by presence, special files by kind
        return True

    def _compare_files_parallel(
        self,
        comparisons: list[tuple[str, Path, Path]],
        token: CancellationToken,
        progress_callback: Optional[ProgressCallback],
        base_processed: int,
        total_items: int
    ) -> tuple[list[str], list[PartialFailure]]:
        """Compare same-sized file pairs using parallel workers."""
        differing: list[str] = []
        failures: list[PartialFailure] = []
        processed = base_processed

        with ThreadPoolExecutor(max_workers=self.options.parallel_workers) as executor:
            futures: dict[Future, tuple[str, Path, Path]] = {}

            for rel_path, left_file, right_file in comparisons:
                if token.is_cancelled:
                    break
                future = executor.submit(self._files_equal, left_file, right_file, token)
                futures[future] = (rel_path, left_file, right_file)

            try:
                for future in as_completed(futures):
                    token.raise_if_cancelled()

                    rel_path, left_file, right_file = futures[future]
                    try:
                        if not future.result():
                            differing.append(rel_path)
                    except OSError as e:
                        side = Side.RIGHT if e.filename and Path(e.filename) == right_file else Side.LEFT
                        cause = e.strerror or str(e)
                        logging.warning(f"FolderComparer - Could not compare '{rel_path}' ({side.value}): {cause}")
                        differing.append(rel_path)
                        failures.append(PartialFailure(
                            path=rel_path,
                            side=side,
                            kind=FailureKind.from_exception(e),
                            cause=cause,
                        ))

                    processed += 1
                    self._report_progress(progress_callback, rel_path, processed, total_items)
            except ComparisonCancelled:
                for future in futures:
                    future.cancel()
                logging.info("FolderComparer - Parallel file comparison cancelled.")
                raise

        token.raise_if_cancelled()
        return differing, failures

    def _files_equal(self, left_file: Path, right_file: Path, token: CancellationToken) -> bool:
        """Compare two files byte by byte in bounded chunks."""
        chunk_size = self.options.chunk_size

        with open(left_file, 'rb') as f1, open(right_file, 'rb') as f2:
            while True:
                token.raise_if_cancelled()

                chunk1 = f1.read(chunk_size)
                chunk2 = f2.read(chunk_size)

                if chunk1 != chunk2:
                    return False

                if not chunk1:  # EOF
                    return True

    @staticmethod
    def _report_progress(
        progress_callback: Optional[ProgressCallback],
        current_path: str,
        processed: int,
        total: int
    ) -> None:
        if progress_callback:
            progress_callback(CompareProgress(
                phase='comparing',
                current_path=current_path,
                items_processed=processed,
                total_items=total,
            ))


def compare(
    request: ComparisonRequest,
    cancel_token: Optional[CancellationToken] = None,
    options: Optional[CompareOptions] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> ComparisonResult:
    """Compare the two roots of a request with a one-off comparer."""
    return FolderComparer(options).compare(request, cancel_token, progress_callback)


class CompareTask:
    """
    Comparison task wrapper.

    Owns a cancellation token so a caller on another thread can
    monitor and cancel one comparison.
    """

    def __init__(
        self,
        request: ComparisonRequest,
        comparer: Optional[FolderComparer] = None
    ):
        self._comparer = comparer or FolderComparer()
        self._request = request
        self._token = CancellationToken()
        self._result: Optional[ComparisonResult] = None
        self._error: Optional[Exception] = None
        self._progress: Optional[CompareProgress] = None
        self._done = False

    @property
    def request(self) -> ComparisonRequest:
        return self._request

    @property
    def is_done(self) -> bool:
        return self._done

    @property
    def is_cancelled(self) -> bool:
        return self._token.is_cancelled

    @property
    def result(self) -> Optional[ComparisonResult]:
        return self._result

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def progress(self) -> Optional[CompareProgress]:
        return self._progress

    def cancel(self) -> None:
        """Cancel the comparison."""
        self._token.cancel()

    def run(self) -> ComparisonResult:
        """Run the comparison synchronously."""
        try:
            self._result = self._comparer.compare(self._request, self._token, self._on_progress)
            return self._result
        except Exception as e:
            self._error = e
            raise
        finally:
            self._done = True

    def _on_progress(self, progress: CompareProgress) -> None:
        self._progress = progress
