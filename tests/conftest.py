"""Shared fixtures: a Qt core application, fake runners and a recording sink."""

from __future__ import annotations

from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication, QObject, QSettings, Signal

from themeselector.config.settings import AppSettings


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class FakeRunner(QObject):
    """Stands in for ProcessRunner; tests drive its signals by hand."""

    stdout_chunk = Signal(str)
    stderr_chunk = Signal(str)
    exited = Signal(int, str)

    def __init__(self, program: str, args) -> None:
        super().__init__()
        self.program = program
        self.args = list(args)
        self.started = False
        self.waited: list[int] = []

    def start(self) -> None:
        self.started = True

    def wait(self, msecs: int = -1) -> bool:
        self.waited.append(msecs)
        return True

    def emit_stdout(self, *chunks: str) -> None:
        for chunk in chunks:
            self.stdout_chunk.emit(chunk)


class RunnerFactory:
    def __init__(self) -> None:
        self.runners: list[FakeRunner] = []

    def __call__(self, program: str, args) -> FakeRunner:
        runner = FakeRunner(program, args)
        self.runners.append(runner)
        return runner

    @property
    def last(self) -> FakeRunner:
        return self.runners[-1]


class RecordingSink:
    """Records every notification as (kind, payload) in arrival order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, tuple]] = []

    def status(self, theme, sub, line) -> None:
        self.events.append(("status", (theme, sub, line)))

    def handshake(self, message) -> None:
        self.events.append(("handshake", (message,)))

    def asset_found(self, asset_id, theme, sub, path) -> None:
        self.events.append(("asset_found", (asset_id, theme, sub, Path(path))))

    def settings_missing(self, reason) -> None:
        self.events.append(("settings_missing", (reason,)))

    def of_kind(self, kind: str) -> list[tuple]:
        return [payload for event_kind, payload in self.events if event_kind == kind]

    def kinds(self) -> list[str]:
        return [kind for kind, _payload in self.events]


@pytest.fixture
def runner_factory() -> RunnerFactory:
    return RunnerFactory()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    qs = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
    return AppSettings(qs)


@pytest.fixture
def asset_root(tmp_path: Path, settings: AppSettings) -> Path:
    root = tmp_path / "steam" / "steamapps" / "workshop" / "content" / "431960"
    root.mkdir(parents=True)
    settings.asset_root = str(root)
    return root
