from __future__ import annotations

from pathlib import Path

from folderdiff.core.models import ComparisonResult, FailureKind, PartialFailure, Side
from folderdiff.services.report import (
    ReportOptions,
    export_report,
    iter_report_lines,
    render_header,
    render_report,
)


def _result(**kwargs) -> ComparisonResult:
    defaults = dict(
        left_root="/data/left",
        right_root="/data/right",
        only_in_left=("b.txt", "sub/old.txt"),
        only_in_right=("c.txt",),
        differing=("a.txt",),
        identical_count=4,
    )
    defaults.update(kwargs)
    return ComparisonResult(**defaults)


def test_header_reports_roots_and_counts():
    header = render_header(_result())

    assert header == (
        "Comparing /data/left with /data/right: "
        "2 only in left, 1 only in right, 1 differing, 4 identical"
    )


def test_full_report_lines():
    lines = list(iter_report_lines(_result()))

    assert lines[1:] == [
        "< b.txt",
        "< sub/old.txt",
        "> c.txt",
        "! a.txt",
    ]


def test_render_report_ends_with_newline():
    text = render_report(_result())

    assert text.endswith("! a.txt\n")
    assert text.count("\n") == 5


def test_side_filters_keep_full_header():
    options = ReportOptions(show_right_only=False, show_differing=False)

    lines = list(iter_report_lines(_result(), options))

    assert lines[0] == render_header(_result())
    assert lines[1:] == ["< b.txt", "< sub/old.txt"]


def test_failures_annotate_differing_and_are_listed_otherwise():
    result = _result(
        differing=("a.txt",),
        failures=(
            PartialFailure("a.txt", Side.LEFT, FailureKind.PERMISSION_DENIED, "Permission denied"),
            PartialFailure("locked", Side.RIGHT, FailureKind.PERMISSION_DENIED, "Permission denied"),
        ),
    )

    lines = list(iter_report_lines(result))

    assert "! a.txt (error: Permission denied)" in lines
    assert lines[-1] == "? [right] locked: Permission denied"


def test_failures_can_be_hidden():
    result = _result(
        failures=(PartialFailure("locked", Side.LEFT, FailureKind.IO_ERROR, "I/O error"),),
    )

    lines = list(iter_report_lines(result, ReportOptions(show_failures=False)))

    assert not any(line.startswith("? ") for line in lines)


def test_empty_result_is_header_only():
    result = ComparisonResult(left_root="/l", right_root="/r")

    assert render_report(result) == (
        "Comparing /l with /r: 0 only in left, 0 only in right, 0 differing, 0 identical\n"
    )


def test_export_writes_report(tmp_path: Path):
    target = tmp_path / "out" / "diff_results.txt"

    written = export_report(_result(), target)

    assert target.read_text(encoding='utf-8') == render_report(_result())
    assert written == len(render_report(_result()).encode('utf-8'))
    assert [p.name for p in target.parent.iterdir()] == ["diff_results.txt"]


def test_export_replaces_existing_file(tmp_path: Path):
    target = tmp_path / "diff_results.txt"
    target.write_text("stale content that is much longer than the new report\n" * 10, encoding='utf-8')

    export_report(_result(only_in_left=(), only_in_right=(), differing=()), target)

    assert target.read_text(encoding='utf-8').count("\n") == 1


def test_differing_path_failing_on_both_sides_lists_every_cause():
    result = _result(
        differing=("a.txt",),
        failures=(
            PartialFailure("a.txt", Side.LEFT, FailureKind.PERMISSION_DENIED, "Permission denied"),
            PartialFailure("a.txt", Side.RIGHT, FailureKind.IO_ERROR, "Input/output error"),
        ),
    )

    lines = list(iter_report_lines(result))

    assert "! a.txt (errors: left: Permission denied; right: Input/output error)" in lines
    assert not any(line.startswith("? ") for line in lines)
