"""Preferences dialog for the applier and workshop folders."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtWidgets import (
    QDialog, QDialogButtonBox, QFormLayout, QLabel, QMessageBox, QPushButton,
    QVBoxLayout,
)

from themeselector.config.settings import SettingsRecord
from themeselector.ui.widgets.path_picker import PathPicker

if TYPE_CHECKING:
    from themeselector.config.settings import AppSettings
    from themeselector.core.asset_locator import AssetLocator


class SettingsDialog(QDialog):
    """Dialog for editing the applier path and Wallpaper Engine folders."""

    def __init__(
        self,
        settings: AppSettings,
        locator: AssetLocator | None = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings
        self._locator = locator
        self.setWindowTitle("Settings")
        self.setMinimumWidth(560)
        self._setup_ui()
        self._load()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self._applier_picker = PathPicker(
            pick_file=True, file_filter="Applier (*.ps1 *.exe *.bat *.cmd);;All files (*)"
        )
        self._themes_picker = PathPicker()
        self._asset_root_picker = PathPicker()
        self._wallpaper_engine_picker = PathPicker(
            pick_file=True, file_filter="wallpaper64.exe (wallpaper64.exe);;All files (*)"
        )
        self._detect_btn = QPushButton("Auto-detect")
        self._detect_btn.setEnabled(self._locator is not None)
        self._detect_btn.clicked.connect(self._auto_detect)

        form.addRow("Theme Applier:", self._applier_picker)
        form.addRow("Themes Folder:", self._themes_picker)
        form.addRow("Workshop Folder:", self._asset_root_picker)
        form.addRow("Wallpaper Engine:", self._wallpaper_engine_picker)
        form.addRow("", self._detect_btn)
        layout.addLayout(form)

        hint = QLabel("The workshop folder is usually steamapps/workshop/content/431960.")
        hint.setObjectName("StatusMuted")
        hint.setWordWrap(True)
        layout.addWidget(hint)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._save)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _load(self) -> None:
        self._applier_picker.set_path(self._settings.applier_path)
        self._themes_picker.set_path(self._settings.themes_root)
        record = self._settings.load_record()
        self._asset_root_picker.set_path(record.asset_root)
        self._wallpaper_engine_picker.set_path(record.wallpaper_engine_path)

    def _save(self) -> None:
        self._settings.save_record(
            SettingsRecord(
                applier_path=self._applier_picker.path(),
                asset_root=self._asset_root_picker.path(),
                wallpaper_engine_path=self._wallpaper_engine_picker.path(),
            )
        )
        self._settings.themes_root = self._themes_picker.path()
        self.accept()

    def _auto_detect(self) -> None:
        if self._locator is None:
            return
        detected = self._locator.auto_detect()
        if detected is None:
            roots = "\n".join(f"- {root}" for root in self._locator.candidate_roots)
            QMessageBox.warning(
                self,
                "Auto-detect",
                f"Wallpaper Engine was not found in any of:\n{roots}",
            )
            return
        self._asset_root_picker.set_path(str(detected.asset_root))
        self._wallpaper_engine_picker.set_path(str(detected.wallpaper_engine_path))
