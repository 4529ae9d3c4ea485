"""
Application settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Callable, Optional

from folderdiff.services.report import DEFAULT_EXPORT_FILENAME, ReportOptions


@dataclass
class ComparisonSettings:
    """Defaults for new comparison requests."""
    recursive: bool = True
    compare_contents: bool = True
    ignore_patterns: list[str] = field(default_factory=lambda: ['.DS_Store'])

    # Performance
    parallel_workers: int = 8
    chunk_size: int = 65536


@dataclass
class ReportSettings:
    """Settings for the text report."""
    show_left_only: bool = True
    show_right_only: bool = True
    show_differing: bool = True
    show_failures: bool = True
    export_filename: str = DEFAULT_EXPORT_FILENAME

    def to_options(self) -> ReportOptions:
        return ReportOptions(
            show_left_only=self.show_left_only,
            show_right_only=self.show_right_only,
            show_differing=self.show_differing,
            show_failures=self.show_failures,
        )


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    comparison: ComparisonSettings = field(default_factory=ComparisonSettings)
    report: ReportSettings = field(default_factory=ReportSettings)

    recent_left_paths: list[str] = field(default_factory=list)
    recent_right_paths: list[str] = field(default_factory=list)
    recent_paths_limit: int = 10


SettingsObserver = Callable[[ApplicationSettings], None]


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None
        self._observers: list[SettingsObserver] = []

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'FolderDiff' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'folderdiff' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk; defaults if missing or unreadable."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning(f"SettingsManager - Could not load {self.settings_path}, using defaults: {e}")
            return ApplicationSettings()

        if not isinstance(data, dict):
            logging.warning(f"SettingsManager - Unexpected settings format in {self.settings_path}, using defaults")
            return ApplicationSettings()

        try:
            return self._from_dict(data)
        except (TypeError, ValueError, AttributeError) as e:
            logging.warning(f"SettingsManager - Invalid values in {self.settings_path}, using defaults: {e}")
            return ApplicationSettings()

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(settings), f, indent=2)
        except OSError as e:
            logging.error(f"SettingsManager - Could not save {self.settings_path}: {e}")
            return False

        self._settings = settings
        self._notify_observers()
        return True

    def reset(self) -> ApplicationSettings:
        """Reset to default settings."""
        self._settings = ApplicationSettings()
        self.save()
        return self._settings

    def add_observer(self, callback: SettingsObserver) -> None:
        """Add a callback to be notified of settings changes."""
        self._observers.append(callback)

    def remove_observer(self, callback: SettingsObserver) -> None:
        """Remove a settings change observer."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        """Notify all observers of settings change."""
        for callback in self._observers:
            try:
                callback(self._settings)
            except Exception:
                logging.exception(f"SettingsManager - Settings observer {callback!r} failed")

    def add_recent_pair(self, left: str, right: str) -> None:
        """Record a compared folder pair at the front of the recent lists."""
        settings = self.settings
        limit = settings.recent_paths_limit

        settings.recent_left_paths = self._push_recent(settings.recent_left_paths, left, limit)
        settings.recent_right_paths = self._push_recent(settings.recent_right_paths, right, limit)

        self.save()

    @staticmethod
    def _push_recent(recent: list[str], path: str, limit: int) -> list[str]:
        recent = [p for p in recent if p != path]
        recent.insert(0, path)
        return recent[:limit]

    def _from_dict(self, data: dict[str, Any]) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        comparison_data = data.get('comparison', {})
        defaults = ComparisonSettings()
        ignore_patterns = comparison_data.get('ignore_patterns', defaults.ignore_patterns)
        if isinstance(ignore_patterns, str):
            raise TypeError(f"ignore_patterns must be a list, got {ignore_patterns!r}")
        comparison = ComparisonSettings(
            recursive=bool(comparison_data.get('recursive', defaults.recursive)),
            compare_contents=bool(comparison_data.get('compare_contents', defaults.compare_contents)),
            ignore_patterns=list(ignore_patterns),
            parallel_workers=int(comparison_data.get('parallel_workers', defaults.parallel_workers)),
            chunk_size=int(comparison_data.get('chunk_size', defaults.chunk_size)),
        )

        report_data = data.get('report', {})
        report_defaults = ReportSettings()
        report = ReportSettings(
            show_left_only=bool(report_data.get('show_left_only', report_defaults.show_left_only)),
            show_right_only=bool(report_data.get('show_right_only', report_defaults.show_right_only)),
            show_differing=bool(report_data.get('show_differing', report_defaults.show_differing)),
            show_failures=bool(report_data.get('show_failures', report_defaults.show_failures)),
            export_filename=str(report_data.get('export_filename', report_defaults.export_filename)),
        )

        return ApplicationSettings(
            comparison=comparison,
            report=report,
            recent_left_paths=list(data.get('recent_left_paths', [])),
            recent_right_paths=list(data.get('recent_right_paths', [])),
            recent_paths_limit=int(data.get('recent_paths_limit', 10)),
        )
