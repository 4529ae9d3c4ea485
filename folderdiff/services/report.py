"""
Plain-text rendering and export of comparison results.

Report format:
    Comparing <left> with <right>: <counts>
    < path        only in left
    > path        only in right
    ! path        present in both, contents differ
    ? [side] path: cause    could not be inspected
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from folderdiff.core.models import ComparisonResult, DiffCategory


DEFAULT_EXPORT_FILENAME = "diff_results.txt"
FAILURE_PREFIX = "? "


@dataclass
class ReportOptions:
    """Which sections of the report to include."""
    show_left_only: bool = True
    show_right_only: bool = True
    show_differing: bool = True
    show_failures: bool = True

    def shows(self, category: DiffCategory) -> bool:
        if category == DiffCategory.LEFT_ONLY:
            return self.show_left_only
        if category == DiffCategory.RIGHT_ONLY:
            return self.show_right_only
        return self.show_differing


def render_header(result: ComparisonResult) -> str:
    """Header line; always reports the full counts."""
    return f"Comparing {result.left_root} with {result.right_root}: {result.get_summary()}"


def iter_report_lines(
    result: ComparisonResult,
    options: Optional[ReportOptions] = None
) -> Iterator[str]:
    """Generate report lines, header first."""
    options = options or ReportOptions()

    yield render_header(result)

    for category, path in result.iter_entries():
        if not options.shows(category):
            continue

        line = f"{category.prefix}{path}"
        if category == DiffCategory.DIFFERING:
            failures = result.failures_for(path)
            if len(failures) == 1:
                line += f" (error: {failures[0].cause})"
            elif failures:
                causes = "; ".join(f"{f.side.value}: {f.cause}" for f in failures)
                line += f" (errors: {causes})"
        yield line

    if options.show_failures:
        differing = set(result.differing)
        for failure in result.failures:
            if failure.path in differing:
                continue
            yield f"{FAILURE_PREFIX}{failure.describe()}"


def render_report(
    result: ComparisonResult,
    options: Optional[ReportOptions] = None
) -> str:
    """Render the full report as text with a trailing newline."""
    return "\n".join(iter_report_lines(result, options)) + "\n"


def export_report(
    result: ComparisonResult,
    path: Path | str,
    options: Optional[ReportOptions] = None,
    encoding: str = 'utf-8'
) -> int:
    """
    Write the report to a file.

    The text goes to a temporary file in the target directory which
    then replaces the target, so a failed export never leaves a
    truncated report behind.

    Args:
        result: Result to export
        path: Destination file
        options: Section filters
        encoding: Text encoding

    Returns:
        Number of bytes written
    """
    path = Path(path)
    encoded = render_report(result, options).encode(encoding)

    dir_path = path.parent
    dir_path.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(dir=dir_path, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(encoded)
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        logging.exception(f"ReportWriter - Failed to export report to {path}")
        raise

    logging.info(f"ReportWriter - Exported {len(encoded)} bytes to {path}")
    return len(encoded)
