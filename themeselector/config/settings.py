"""Application settings via QSettings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings

from themeselector.runtime_paths import default_applier_path, default_themes_root


@dataclass
class SettingsRecord:
    """The applier/asset configuration, read and written as one document."""

    applier_path: str = ""
    asset_root: str = ""
    wallpaper_engine_path: str = ""

    def has_asset_root(self) -> bool:
        return bool(self.asset_root) and Path(self.asset_root).is_dir()


class AppSettings:
    """Wraps QSettings for persistent app configuration."""

    def __init__(self, qsettings: QSettings | None = None) -> None:
        self._qs = qsettings if qsettings is not None else QSettings("ThemeSelector", "ThemeSelector")

    # -- applier --

    @property
    def applier_path(self) -> str:
        raw = self._qs.value("applier/path", "", type=str)
        value = (raw or "").strip()
        return value or str(default_applier_path())

    @applier_path.setter
    def applier_path(self, value: str) -> None:
        self._qs.setValue("applier/path", (value or "").strip())

    # -- workshop assets --

    @property
    def asset_root(self) -> str:
        return (self._qs.value("assets/root", "", type=str) or "").strip()

    @asset_root.setter
    def asset_root(self, value: str) -> None:
        self._qs.setValue("assets/root", (value or "").strip())

    @property
    def wallpaper_engine_path(self) -> str:
        return (self._qs.value("assets/wallpaper_engine_path", "", type=str) or "").strip()

    @wallpaper_engine_path.setter
    def wallpaper_engine_path(self, value: str) -> None:
        self._qs.setValue("assets/wallpaper_engine_path", (value or "").strip())

    # -- whole record --

    def load_record(self) -> SettingsRecord:
        return SettingsRecord(
            applier_path=(self._qs.value("applier/path", "", type=str) or "").strip(),
            asset_root=self.asset_root,
            wallpaper_engine_path=self.wallpaper_engine_path,
        )

    def save_record(self, record: SettingsRecord) -> None:
        """Overwrite the stored record. Last write wins."""
        self.applier_path = record.applier_path
        self.asset_root = record.asset_root
        self.wallpaper_engine_path = record.wallpaper_engine_path
        self._qs.sync()

    # -- themes --

    @property
    def themes_root(self) -> str:
        raw = self._qs.value("themes/root", "", type=str)
        value = (raw or "").strip()
        return value or str(default_themes_root())

    @themes_root.setter
    def themes_root(self, value: str) -> None:
        self._qs.setValue("themes/root", (value or "").strip())

    # -- window geometry --

    @property
    def window_geometry(self) -> bytes | None:
        return self._qs.value("ui/window_geometry")

    @window_geometry.setter
    def window_geometry(self, value: bytes) -> None:
        self._qs.setValue("ui/window_geometry", value)

    # -- helpers --

    @property
    def app_data_dir(self) -> Path:
        path = self._app_data_dir()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def _app_data_dir() -> Path:
        base = Path(os.environ.get("APPDATA", Path.home() / ".config"))
        return base / "themeselector"
