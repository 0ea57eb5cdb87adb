"""Tests for themeselector.config.settings."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QSettings

from themeselector import runtime_paths
from themeselector.config.settings import AppSettings, SettingsRecord


def test_defaults_point_at_install_root(settings: AppSettings) -> None:
    assert settings.applier_path == str(runtime_paths.default_applier_path())
    assert settings.themes_root == str(runtime_paths.default_themes_root())
    assert settings.asset_root == ""


def test_record_leaves_unset_applier_empty(settings: AppSettings) -> None:
    assert settings.load_record() == SettingsRecord()


def test_save_record_overwrites_whole_record(settings: AppSettings, tmp_path: Path) -> None:
    settings.save_record(SettingsRecord("C:/a/theme.ps1", "C:/assets", "C:/we/wallpaper64.exe"))
    settings.save_record(SettingsRecord(applier_path="C:/b/theme.ps1"))

    record = settings.load_record()
    assert record == SettingsRecord(applier_path="C:/b/theme.ps1")


def test_record_persists_across_instances(tmp_path: Path) -> None:
    path = str(tmp_path / "settings.ini")
    first = AppSettings(QSettings(path, QSettings.Format.IniFormat))
    first.save_record(SettingsRecord("", str(tmp_path), ""))

    second = AppSettings(QSettings(path, QSettings.Format.IniFormat))
    assert second.asset_root == str(tmp_path)


def test_values_are_trimmed(settings: AppSettings) -> None:
    settings.applier_path = "  C:/x/theme.ps1  "
    settings.asset_root = " C:/assets "
    assert settings.applier_path == "C:/x/theme.ps1"
    assert settings.asset_root == "C:/assets"


def test_has_asset_root_requires_existing_dir(tmp_path: Path) -> None:
    assert SettingsRecord(asset_root=str(tmp_path)).has_asset_root() is True
    assert SettingsRecord(asset_root=str(tmp_path / "missing")).has_asset_root() is False
    assert SettingsRecord().has_asset_root() is False


def test_app_data_dir_uses_appdata(monkeypatch, tmp_path: Path, settings: AppSettings) -> None:
    monkeypatch.setenv("APPDATA", str(tmp_path))
    assert settings.app_data_dir == tmp_path / "themeselector"
    assert settings.app_data_dir.is_dir()
