from __future__ import annotations

import json
from pathlib import Path

from folderdiff.core.models import ComparisonRequest
from folderdiff.services.settings import (
    ApplicationSettings,
    ComparisonSettings,
    SettingsManager,
)


def test_missing_file_gives_defaults(tmp_path: Path):
    manager = SettingsManager(tmp_path / "settings.json")

    settings = manager.settings

    assert settings == ApplicationSettings()
    assert settings.comparison.ignore_patterns == ['.DS_Store']
    assert settings.comparison.recursive is True
    assert settings.report.export_filename == "diff_results.txt"


def test_save_and_reload(tmp_path: Path):
    path = tmp_path / "nested" / "settings.json"
    manager = SettingsManager(path)
    settings = manager.settings
    settings.comparison.recursive = False
    settings.comparison.ignore_patterns = ['*.pyc', 'build']
    settings.report.show_differing = False

    assert manager.save()

    reloaded = SettingsManager(path).settings
    assert reloaded == settings


def test_corrupt_file_gives_defaults(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding='utf-8')

    assert SettingsManager(path).settings == ApplicationSettings()


def test_invalid_values_give_defaults(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"comparison": {"parallel_workers": "many"}}), encoding='utf-8')

    assert SettingsManager(path).settings == ApplicationSettings()


def test_partial_file_fills_in_defaults(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"comparison": {"compare_contents": False}}), encoding='utf-8')

    settings = SettingsManager(path).settings

    assert settings.comparison.compare_contents is False
    assert settings.comparison.ignore_patterns == ['.DS_Store']


def test_recent_pairs_are_deduplicated_and_bounded(tmp_path: Path):
    manager = SettingsManager(tmp_path / "settings.json")
    manager.settings.recent_paths_limit = 3

    for i in range(5):
        manager.add_recent_pair(f"/l{i}", f"/r{i}")
    manager.add_recent_pair("/l3", "/r3")

    assert manager.settings.recent_left_paths == ["/l3", "/l4", "/l2"]
    assert manager.settings.recent_right_paths == ["/r3", "/r4", "/r2"]


def test_observers_notified_and_failures_contained(tmp_path: Path):
    manager = SettingsManager(tmp_path / "settings.json")
    seen = []

    def broken(_settings):
        raise RuntimeError("observer bug")

    manager.add_observer(broken)
    manager.add_observer(seen.append)

    assert manager.save(ApplicationSettings())
    assert len(seen) == 1

    manager.remove_observer(seen.append)
    manager.save()
    assert len(seen) == 1


def test_reset_restores_defaults(tmp_path: Path):
    manager = SettingsManager(tmp_path / "settings.json")
    manager.settings.comparison.compare_contents = False
    manager.save()

    assert manager.reset() == ApplicationSettings()
    assert SettingsManager(tmp_path / "settings.json").settings == ApplicationSettings()


def test_request_from_settings():
    settings = ComparisonSettings(recursive=False, compare_contents=False, ignore_patterns=['.DS_Store'])

    request = ComparisonRequest.from_settings("/a", "/b", settings, extra_ignore_patterns=['*.tmp'])

    assert request.left == Path("/a")
    assert request.recursive is False
    assert request.compare_contents is False
    assert request.ignore_patterns == frozenset({'.DS_Store', '*.tmp'})
    assert request.swapped().left == Path("/b")


def test_string_ignore_patterns_give_defaults(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"comparison": {"ignore_patterns": ".DS_Store"}}), encoding='utf-8')

    settings = SettingsManager(path).settings

    assert settings == ApplicationSettings()
    assert settings.comparison.ignore_patterns == ['.DS_Store']
