"""Notifications from the apply core to the UI."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from PySide6.QtCore import QObject, Signal

from themeselector.core.handshake import HandshakeMessage


class NotificationSink(Protocol):
    """Fire-and-forget UI notifications; nothing is acknowledged."""

    def status(self, theme: str, sub: str | None, line: str) -> None: ...

    def handshake(self, message: HandshakeMessage) -> None: ...

    def asset_found(self, asset_id: str, theme: str, sub: str | None, path: Path) -> None: ...

    def settings_missing(self, reason: str) -> None: ...


class SignalSink(QObject):
    """NotificationSink that forwards every notification as a Qt signal."""

    status_line = Signal(str, object, str)          # theme, sub, line
    handshake_received = Signal(object)             # HandshakeMessage
    workshop_found = Signal(str, str, object, str)  # asset id, theme, sub, path
    settings_needed = Signal(str)                   # reason

    def status(self, theme: str, sub: str | None, line: str) -> None:
        self.status_line.emit(theme, sub, line)

    def handshake(self, message: HandshakeMessage) -> None:
        self.handshake_received.emit(message)

    def asset_found(self, asset_id: str, theme: str, sub: str | None, path: Path) -> None:
        self.workshop_found.emit(asset_id, theme, sub, str(path))

    def settings_missing(self, reason: str) -> None:
        self.settings_needed.emit(reason)
