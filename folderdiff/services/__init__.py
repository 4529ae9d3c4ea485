"""
Services used around the comparison engine:
- Report rendering and export
- Settings persistence
"""

from folderdiff.services.report import (
    DEFAULT_EXPORT_FILENAME,
    ReportOptions,
    export_report,
    iter_report_lines,
    render_report,
)
from folderdiff.services.settings import (
    ApplicationSettings,
    ComparisonSettings,
    ReportSettings,
    SettingsManager,
)

__all__ = [
    # Report
    'DEFAULT_EXPORT_FILENAME',
    'ReportOptions',
    'export_report',
    'iter_report_lines',
    'render_report',
    # Settings
    'ApplicationSettings',
    'ComparisonSettings',
    'ReportSettings',
    'SettingsManager',
]
