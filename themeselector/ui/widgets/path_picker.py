"""Path picker widget: line edit + browse button, for folders or files."""

from __future__ import annotations

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QFileDialog, QHBoxLayout, QLineEdit, QPushButton, QWidget


class PathPicker(QWidget):
    """A line edit with a browse button that picks a directory or a file."""

    path_changed = Signal(str)

    def __init__(
        self,
        label: str = "Browse...",
        *,
        pick_file: bool = False,
        file_filter: str = "",
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._pick_file = pick_file
        self._file_filter = file_filter
        self._line_edit = QLineEdit()
        self._line_edit.setPlaceholderText("Select a file..." if pick_file else "Select a directory...")
        self._browse_btn = QPushButton(label)
        self._browse_btn.setMinimumWidth(92)
        self._browse_btn.setMaximumWidth(132)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._line_edit, 1)
        layout.addWidget(self._browse_btn)

        self._browse_btn.clicked.connect(self._browse)
        self._line_edit.textChanged.connect(self.path_changed.emit)

    def path(self) -> str:
        return self._line_edit.text().strip()

    def set_path(self, path: str) -> None:
        self._line_edit.setText(path)

    def _browse(self) -> None:
        if self._pick_file:
            chosen, _ = QFileDialog.getOpenFileName(
                self, "Select File", self._line_edit.text(), self._file_filter
            )
        else:
            chosen = QFileDialog.getExistingDirectory(
                self, "Select Directory", self._line_edit.text()
            )
        if chosen:
            self._line_edit.setText(chosen)
