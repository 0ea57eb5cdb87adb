"""Run the theme applier in a background thread and stream its output."""

from __future__ import annotations

import logging
import subprocess
import sys
import threading
from pathlib import Path
from typing import IO, Sequence

from PySide6.QtCore import QObject, QThread, Qt, Signal

logger = logging.getLogger(__name__)

# Reported as the exit code when the process could not be started at all.
SPAWN_FAILED_EXIT_CODE = -1
# Reported when the process started but its output could not be read.
READ_FAILED_EXIT_CODE = -2


def build_applier_command(applier_path: str | Path, args: Sequence[str]) -> tuple[str, list[str]]:
    """Return (program, arguments) for invoking the applier.

    PowerShell scripts are run through powershell.exe with the execution
    policy bypassed; anything else is executed directly.
    """
    path = str(applier_path)
    if Path(path).suffix.lower() == ".ps1":
        return "powershell", ["-NoProfile", "-ExecutionPolicy", "Bypass", "-File", path, *args]
    return path, list(args)


class ProcessWorker(QObject):
    """Spawns one process and reports its output chunks and exit.

    `exited` is emitted exactly once, also when the process cannot be
    spawned (code SPAWN_FAILED_EXIT_CODE, detail = OS error text) or its
    output cannot be read (READ_FAILED_EXIT_CODE). The detail is empty for
    a normal exit. No timeout is imposed; the caller owns any kill policy.
    """

    stdout_chunk = Signal(str)
    stderr_chunk = Signal(str)
    exited = Signal(int, str)           # exit code, error detail

    def __init__(self, program: str, args: Sequence[str], cwd: str | None = None) -> None:
        super().__init__()
        self._program = program
        self._args = list(args)
        self._cwd = cwd
        self._exit_status: tuple[int, str] | None = None

    def run(self) -> None:
        try:
            proc = subprocess.Popen(
                [self._program, *self._args],
                cwd=self._cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                creationflags=_no_window_flags(),
            )
        except OSError as exc:
            logger.warning("could not start %s: %s", self._program, exc)
            self._emit_exit(SPAWN_FAILED_EXIT_CODE, str(exc))
            return

        assert proc.stdout is not None and proc.stderr is not None
        drain = threading.Thread(target=self._drain_stderr, args=(proc.stderr,), daemon=True)
        drain.start()
        failure = ""
        try:
            for line in iter(proc.stdout.readline, ""):
                self.stdout_chunk.emit(line)
        except Exception as exc:
            logger.exception("reading output of %s failed", self._program)
            failure = str(exc) or type(exc).__name__
        finally:
            # A closed pipe lets a still-writing child fail and exit.
            proc.stdout.close()
            code = proc.wait()
            drain.join()
        if failure:
            self._emit_exit(READ_FAILED_EXIT_CODE, failure)
        else:
            self._emit_exit(code, "")

    def _drain_stderr(self, stream: IO[str]) -> None:
        for line in iter(stream.readline, ""):
            self.stderr_chunk.emit(line)

    @property
    def exit_status(self) -> tuple[int, str] | None:
        return self._exit_status

    def _emit_exit(self, code: int, detail: str) -> None:
        if self._exit_status is not None:
            return
        self._exit_status = (code, detail)
        self.exited.emit(code, detail)


class ProcessRunner(QObject):
    """Owns a ProcessWorker and its QThread; re-emits on the owner's thread.

    `exited` is only re-emitted once the thread has stopped, so receivers
    may drop the runner from their slot.
    """

    stdout_chunk = Signal(str)
    stderr_chunk = Signal(str)
    exited = Signal(int, str)

    def __init__(self, program: str, args: Sequence[str], parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._program = program
        self._args = list(args)
        self._worker: ProcessWorker | None = None
        self._thread: QThread | None = None

    @property
    def command_line(self) -> list[str]:
        return [self._program, *self._args]

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("ProcessRunner can only be started once")
        self._worker = ProcessWorker(self._program, self._args)
        self._thread = QThread()
        self._worker.moveToThread(self._thread)
        self._thread.started.connect(self._worker.run)
        queued = Qt.ConnectionType.QueuedConnection
        self._worker.stdout_chunk.connect(self.stdout_chunk, queued)
        self._worker.stderr_chunk.connect(self.stderr_chunk, queued)
        # Direct, so the thread can stop while the owner's thread is blocked in wait().
        self._worker.exited.connect(self._thread.quit, Qt.ConnectionType.DirectConnection)
        self._thread.finished.connect(self._on_thread_finished, queued)
        self._thread.start()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.isRunning()

    def wait(self, msecs: int = -1) -> bool:
        """Block until the worker thread has stopped. False on timeout."""
        if self._thread is None:
            return True
        if msecs < 0:
            return self._thread.wait()
        return self._thread.wait(msecs)

    def _on_thread_finished(self) -> None:
        assert self._thread is not None and self._worker is not None
        self._thread.wait()
        status = self._worker.exit_status
        if status is None:
            status = (SPAWN_FAILED_EXIT_CODE, "worker thread stopped before the process exited")
        self.exited.emit(*status)


def _no_window_flags() -> int:
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0
