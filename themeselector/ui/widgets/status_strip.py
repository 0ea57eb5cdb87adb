"""Bottom status strip: last applier message, watch count, version."""

from __future__ import annotations

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QProgressBar, QWidget

from themeselector import __version__


class StatusStrip(QFrame):
    """Compact bottom status bar with message, busy indicator, and watch count."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("StatusStrip")
        self.setFixedHeight(32)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 0, 12, 0)
        layout.setSpacing(12)

        self._message_label = QLabel("Ready")
        self._message_label.setObjectName("StatusMessage")
        layout.addWidget(self._message_label, 1)

        self._busy_bar = QProgressBar()
        self._busy_bar.setFixedWidth(120)
        self._busy_bar.setFixedHeight(14)
        self._busy_bar.setTextVisible(False)
        self._busy_bar.setRange(0, 0)
        self._busy_bar.hide()
        layout.addWidget(self._busy_bar)

        self._watch_label = QLabel("")
        self._watch_label.setObjectName("StatusDetail")
        layout.addWidget(self._watch_label)

        self._version_label = QLabel(f"v{__version__}")
        self._version_label.setObjectName("StatusMuted")
        layout.addWidget(self._version_label)

        self._clear_timer = QTimer(self)
        self._clear_timer.setSingleShot(True)
        self._clear_timer.timeout.connect(lambda: self._message_label.setText("Ready"))

    def show_message(self, text: str, timeout_ms: int = 0) -> None:
        self._message_label.setText(text)
        if timeout_ms > 0:
            self._clear_timer.start(timeout_ms)

    def set_busy(self, busy: bool) -> None:
        self._busy_bar.setVisible(busy)

    def set_watch_count(self, count: int) -> None:
        if count == 1:
            self._watch_label.setText("Waiting for 1 download")
        elif count:
            self._watch_label.setText(f"Waiting for {count} downloads")
        else:
            self._watch_label.setText("")
