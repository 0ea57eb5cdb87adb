"""Main window: theme list, sub-themes, apply log."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from PySide6.QtCore import Qt, QUrl
from PySide6.QtGui import QAction, QCloseEvent, QDesktopServices, QKeySequence, QPixmap
from PySide6.QtWidgets import (
    QHBoxLayout, QInputDialog, QLabel, QListWidget, QListWidgetItem, QMainWindow,
    QMessageBox, QPlainTextEdit, QPushButton, QSplitter, QVBoxLayout, QWidget,
)

from themeselector.core.handshake import NeedsSub, NeedsWorkshop
from themeselector.core.selector import ThemeSelector
from themeselector.errors import ErrorCode, ThemeSelectorError, format_error_for_user
from themeselector.ui.settings_dialog import SettingsDialog
from themeselector.ui.widgets.status_strip import StatusStrip

if TYPE_CHECKING:
    from themeselector.config.settings import AppSettings
    from themeselector.core.asset_locator import AssetLocator
    from themeselector.core.catalog import ThemeCatalog
    from themeselector.core.orchestrator import ApplyAttempt, ApplyOrchestrator, ApplyOutcome
    from themeselector.ui.events import SignalSink
    from themeselector.workers.workshop_watcher import WorkshopWatcher

_MAX_LOG_LINES = 2000
_PREVIEW_WIDTH = 360
_CLOSE_WAIT_MS = 3000


class MainWindow(QMainWindow):
    """Browse themes and drive the apply handshake."""

    def __init__(
        self,
        settings: AppSettings,
        catalog: ThemeCatalog,
        orchestrator: ApplyOrchestrator,
        watcher: WorkshopWatcher,
        sink: SignalSink,
        locator: AssetLocator,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._catalog = catalog
        self._orchestrator = orchestrator
        self._watcher = watcher
        self._sink = sink
        self._locator = locator

        self.setWindowTitle("Theme Selector")
        self.setMinimumSize(720, 520)
        self.resize(900, 640)
        self.setObjectName("MainWindow")

        self._setup_layout()
        self._setup_menu()
        self._connect_core()
        self._restore_state()
        self.reload_themes()

    def _setup_layout(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        outer = QVBoxLayout(central)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(0)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        self._theme_list = QListWidget()
        self._theme_list.currentItemChanged.connect(self._on_theme_changed)
        self._theme_list.itemDoubleClicked.connect(lambda _item: self._apply_selected())
        splitter.addWidget(self._theme_list)

        detail = QWidget()
        detail_layout = QVBoxLayout(detail)
        self._title_label = QLabel("")
        self._title_label.setObjectName("ThemeTitle")
        self._desc_label = QLabel("")
        self._desc_label.setWordWrap(True)
        self._preview_label = QLabel()
        self._preview_label.setObjectName("ThemePreview")
        self._preview_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._preview_label.hide()
        self._sub_list = QListWidget()
        self._sub_list.itemDoubleClicked.connect(lambda _item: self._apply_selected())
        detail_layout.addWidget(self._title_label)
        detail_layout.addWidget(self._desc_label)
        detail_layout.addWidget(self._preview_label)
        detail_layout.addWidget(QLabel("Sub-themes:"))
        detail_layout.addWidget(self._sub_list, 1)

        btn_row = QHBoxLayout()
        self._apply_btn = QPushButton("Apply")
        self._apply_btn.setProperty("role", "accent")
        self._apply_btn.clicked.connect(self._apply_selected)
        self._cycle_btn = QPushButton("Cycle")
        self._cycle_btn.clicked.connect(self._cycle)
        self._page_btn = QPushButton("Theme Page")
        self._page_btn.clicked.connect(self._open_theme_page)
        self._cancel_watch_btn = QPushButton("Stop Waiting")
        self._cancel_watch_btn.setEnabled(False)
        self._cancel_watch_btn.clicked.connect(self._cancel_watches)
        btn_row.addWidget(self._apply_btn)
        btn_row.addWidget(self._cycle_btn)
        btn_row.addWidget(self._page_btn)
        btn_row.addStretch()
        btn_row.addWidget(self._cancel_watch_btn)
        detail_layout.addLayout(btn_row)
        splitter.addWidget(detail)
        splitter.setStretchFactor(1, 1)

        self._log = QPlainTextEdit()
        self._log.setReadOnly(True)
        self._log.setMaximumBlockCount(_MAX_LOG_LINES)
        self._log.setPlaceholderText("Applier output appears here.")

        outer.addWidget(splitter, 3)
        outer.addWidget(self._log, 1)
        self._status_strip = StatusStrip()
        outer.addWidget(self._status_strip)

    def _setup_menu(self) -> None:
        menu = self.menuBar().addMenu("&File")
        reload_action = QAction("&Reload Themes", self)
        reload_action.setShortcut(QKeySequence.StandardKey.Refresh)
        reload_action.triggered.connect(self.reload_themes)
        settings_action = QAction("&Settings...", self)
        settings_action.setShortcut(QKeySequence("Ctrl+,"))
        settings_action.triggered.connect(self._open_settings)
        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence("Ctrl+Q"))
        exit_action.triggered.connect(self.close)
        menu.addAction(reload_action)
        menu.addAction(settings_action)
        menu.addSeparator()
        menu.addAction(exit_action)

    def _connect_core(self) -> None:
        self._sink.status_line.connect(self._on_status_line)
        self._sink.handshake_received.connect(self._on_handshake)
        self._sink.workshop_found.connect(self._on_workshop_found)
        self._sink.settings_needed.connect(self._on_settings_needed)
        self._orchestrator.attempt_started.connect(self._on_attempt_started)
        self._watcher.watch_started.connect(lambda _watch_id: self._refresh_watch_state())
        self._watcher.watch_finished.connect(lambda _watch_id, _state: self._refresh_watch_state())
        self._watcher.reapply_started.connect(self._on_reapply_started)

    def _restore_state(self) -> None:
        geometry = self._settings.window_geometry
        if geometry:
            self.restoreGeometry(geometry)

    # -- theme list --

    def reload_themes(self) -> None:
        errors = self._catalog.reload()
        self._theme_list.clear()
        for entry in self._catalog.list_themes():
            item = QListWidgetItem(entry.meta.name)
            item.setData(Qt.ItemDataRole.UserRole, entry.theme_id)
            tooltip = entry.meta.description
            if entry.error:
                tooltip = f"{tooltip}\n\nmanifest error: {entry.error}".strip()
            item.setToolTip(tooltip)
            self._theme_list.addItem(item)
        if self._theme_list.count():
            self._theme_list.setCurrentRow(0)
        if errors:
            preview = "\n".join(f"- {item}" for item in errors[:6])
            if len(errors) > 6:
                preview += f"\n... and {len(errors) - 6} more"
            self._append_log(f"Theme load warnings:\n{preview}")
        self._status_strip.show_message(f"{self._theme_list.count()} themes", 4000)

    def _on_theme_changed(self, current: QListWidgetItem | None, _previous=None) -> None:
        self._sub_list.clear()
        if current is None:
            self._title_label.setText("")
            self._desc_label.setText("")
            self._show_preview(None)
            return
        entry = self._catalog.get_theme(current.data(Qt.ItemDataRole.UserRole))
        if entry is None:
            return
        version = f"  v{entry.meta.version}" if entry.meta.version else ""
        self._title_label.setText(f"{entry.meta.name}{version}")
        self._desc_label.setText(entry.meta.description)
        self._show_preview(entry.preview_paths[0] if entry.preview_paths else None)
        for sub in entry.sub_themes:
            item = QListWidgetItem(sub.name)
            if sub.error:
                item.setToolTip(sub.error)
            self._sub_list.addItem(item)

    def _show_preview(self, path: Path | None) -> None:
        pixmap = QPixmap(str(path)) if path is not None else QPixmap()
        if pixmap.isNull():
            self._preview_label.clear()
            self._preview_label.hide()
            return
        self._preview_label.setPixmap(
            pixmap.scaledToWidth(_PREVIEW_WIDTH, Qt.TransformationMode.SmoothTransformation)
        )
        self._preview_label.show()

    def _open_theme_page(self) -> None:
        selector = self._selected_selector()
        if selector is None:
            QMessageBox.information(self, "No Theme", "Select a theme first.")
            return
        page = self._catalog.find_page(selector)
        if page is None:
            QMessageBox.information(self, "Theme Page", f"page.html not found for {selector}.")
            return
        url = QUrl.fromLocalFile(str(page.path))
        url.setQuery(f"theme={page.selector}")
        QDesktopServices.openUrl(url)

    def _selected_selector(self) -> ThemeSelector | None:
        theme_item = self._theme_list.currentItem()
        if theme_item is None:
            return None
        theme_id = theme_item.data(Qt.ItemDataRole.UserRole)
        sub_item = self._sub_list.currentItem()
        return ThemeSelector(theme_id, sub_item.text() if sub_item is not None else None)

    # -- apply --

    def _apply_selected(self) -> None:
        selector = self._selected_selector()
        if selector is None:
            QMessageBox.information(self, "No Theme", "Select a theme first.")
            return
        self.apply(selector)

    def apply(self, selector: ThemeSelector) -> None:
        self._append_log(f"> apply {selector}")
        self._orchestrator.apply(selector)

    def _cycle(self) -> None:
        self._append_log("> cycle")
        self._orchestrator.cycle()

    def _on_attempt_started(self, attempt: ApplyAttempt) -> None:
        self._status_strip.set_busy(True)
        attempt.resolved.connect(
            lambda outcome, attempt=attempt: self._on_outcome(attempt, outcome)
        )
        attempt.finished.connect(self._refresh_busy)

    def _refresh_busy(self) -> None:
        self._status_strip.set_busy(bool(self._orchestrator.active_attempts))

    def _on_outcome(self, attempt: ApplyAttempt, outcome: ApplyOutcome) -> None:
        label = str(attempt.selector) if attempt.selector is not None else "next theme"
        if outcome.handshake_sent:
            return
        if outcome.needs_reapply:
            text = f"Wallpaper for {label} is already downloaded; apply again to finish."
            self._append_log(text)
            self._status_strip.show_message(text, 8000)
            return
        if outcome.ok:
            self._status_strip.show_message(f"Theme applied: {label}", 6000)
            return
        code = outcome.error_code or ErrorCode.APPLIER_EXIT_NONZERO
        error = ThemeSelectorError(code, details={"output": outcome.error})
        self._append_log(f"Failed to apply {label}: {outcome.error}")
        QMessageBox.warning(
            self,
            "Apply Failed",
            f"{format_error_for_user(outcome.error)}\n\n{error.suggestion}".strip(),
        )

    # -- core notifications --

    def _on_status_line(self, theme: str, sub: str | None, line: str) -> None:
        self._append_log(line)
        self._status_strip.show_message(line)

    def _on_handshake(self, message: object) -> None:
        if isinstance(message, NeedsSub):
            self._prompt_sub_theme(message)
        elif isinstance(message, NeedsWorkshop):
            self._prompt_workshop(message)

    def _prompt_sub_theme(self, message: NeedsSub) -> None:
        subs = [sub.name for sub in self._catalog.list_sub_themes(message.theme)]
        if not subs:
            QMessageBox.information(
                self,
                "Pick a Sub-theme",
                f"{message.theme} needs a sub-theme, but none were found in its folder.",
            )
            return
        choice, ok = QInputDialog.getItem(
            self, "Pick a Sub-theme", f"{message.theme} has several variants:", subs, 0, False
        )
        if ok and choice:
            self.apply(ThemeSelector(message.theme, choice))

    def _prompt_workshop(self, message: NeedsWorkshop) -> None:
        answer = QMessageBox.question(
            self,
            "Wallpaper Needed",
            f"{message.theme}/{message.sub or ''} uses workshop item {message.asset_id}, "
            "which is not downloaded yet.\n\n"
            "Open its Workshop page and apply the theme once the download finishes?",
        )
        if answer != QMessageBox.StandardButton.Yes:
            return
        QDesktopServices.openUrl(QUrl(message.workshop_url))
        try:
            watch_id = self._watcher.start(message.asset_id, message.theme, message.sub)
        except ValueError as exc:
            self._append_log(f"Not waiting for workshop item {message.asset_id}: {exc}")
            return
        self._append_log(f"Waiting for workshop item {message.asset_id} ({watch_id[:8]})")

    def _on_workshop_found(self, asset_id: str, theme: str, sub: str | None, path: str) -> None:
        self._append_log(f"Workshop item {asset_id} is ready: {path}")

    def _on_settings_needed(self, reason: str) -> None:
        self._status_strip.show_message(reason, 8000)
        self._append_log(format_error_for_user(ThemeSelectorError(ErrorCode.ASSET_ROOT_MISSING)))

    # -- watches --

    def _refresh_watch_state(self) -> None:
        count = len(self._watcher.active_watch_ids())
        self._status_strip.set_watch_count(count)
        self._cancel_watch_btn.setEnabled(count > 0)

    def _on_reapply_started(self, watch_id: str, attempt: ApplyAttempt) -> None:
        self._append_log(f"> apply {attempt.selector} (download {watch_id[:8]} finished)")

    def _cancel_watches(self) -> None:
        cancelled = self._watcher.cancel_all()
        if cancelled:
            self._append_log(f"Stopped waiting for {cancelled} download(s)")

    # -- misc --

    def _open_settings(self) -> None:
        dialog = SettingsDialog(self._settings, locator=self._locator, parent=self)
        if dialog.exec():
            self._catalog.set_root(self._settings.themes_root)
            self.reload_themes()

    def _append_log(self, text: str) -> None:
        self._log.appendPlainText(text)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._settings.window_geometry = self.saveGeometry()
        self._watcher.cancel_all()
        self._orchestrator.wait_for_attempts(_CLOSE_WAIT_MS)
        super().closeEvent(event)
