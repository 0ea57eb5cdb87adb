"""Drive one theme-apply attempt from selection to outcome."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence

from PySide6.QtCore import QObject, Signal, SignalInstance

from themeselector.core.handshake import (
    HandshakeMessage,
    HandshakeParser,
    NeedsSub,
    NeedsWorkshop,
    split_lines,
)
from themeselector.core.selector import ThemeSelector
from themeselector.errors import ErrorCode
from themeselector.workers.process_worker import (
    READ_FAILED_EXIT_CODE,
    SPAWN_FAILED_EXIT_CODE,
    ProcessRunner,
    build_applier_command,
)

if TYPE_CHECKING:
    from themeselector.config.settings import AppSettings
    from themeselector.core.asset_locator import AssetLocator
    from themeselector.ui.events import NotificationSink

logger = logging.getLogger(__name__)

SELECT_FLAG = "--select"
CYCLE_FLAG = "--cycle"


class Runner(Protocol):
    """What an attempt needs from a process runner."""

    stdout_chunk: SignalInstance
    stderr_chunk: SignalInstance
    exited: SignalInstance

    def start(self) -> None: ...

    def wait(self, msecs: int = -1) -> bool: ...


RunnerFactory = Callable[[str, Sequence[str]], Runner]


@dataclass(frozen=True, slots=True)
class ApplyOutcome:
    """How one apply attempt ended."""

    ok: bool
    output: str = ""
    error: str = ""
    handshake_sent: bool = False
    kind: str | None = None
    message: HandshakeMessage | None = None
    error_code: ErrorCode | None = None

    @classmethod
    def handshake(cls, message: NeedsSub | NeedsWorkshop) -> ApplyOutcome:
        return cls(ok=True, handshake_sent=True, kind=message.kind, message=message)

    @classmethod
    def asset_present(cls, message: NeedsWorkshop) -> ApplyOutcome:
        return cls(ok=True, kind=message.kind, message=message)

    @classmethod
    def success(cls, output: str) -> ApplyOutcome:
        return cls(ok=True, output=output)

    @classmethod
    def failure(cls, error: str, code: ErrorCode = ErrorCode.APPLIER_EXIT_NONZERO) -> ApplyOutcome:
        return cls(ok=False, error=error, error_code=code)

    @property
    def needs_reapply(self) -> bool:
        """The wallpaper was already on disk but the applier stopped short."""
        return self.ok and not self.handshake_sent and isinstance(self.message, NeedsWorkshop)

    def to_dict(self) -> dict[str, Any]:
        if self.handshake_sent:
            return {"handshake_sent": True, "type": self.kind}
        if self.ok and isinstance(self.message, NeedsWorkshop):
            return self.message.to_dict()
        if self.ok:
            return {"ok": True, "output": self.output}
        return {"ok": False, "error": self.error}


class ApplyAttempt(QObject):
    """One applier invocation. Resolves exactly once.

    Output chunks keep being forwarded as status lines after resolution,
    but are never classified again.
    """

    resolved = Signal(object)   # ApplyOutcome
    finished = Signal()         # process exited, outcome delivered

    def __init__(
        self,
        selector: ThemeSelector | None,
        runner: Runner,
        sink: NotificationSink,
        locator: AssetLocator,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._selector = selector
        self._runner = runner
        self._sink = sink
        self._locator = locator
        self._parser = HandshakeParser()
        self._stdout = ""
        self._stderr = ""
        self._outcome: ApplyOutcome | None = None
        self._exited = False

    @property
    def selector(self) -> ThemeSelector | None:
        return self._selector

    @property
    def outcome(self) -> ApplyOutcome | None:
        return self._outcome

    @property
    def is_resolved(self) -> bool:
        return self._outcome is not None

    @property
    def stdout(self) -> str:
        return self._stdout

    @property
    def stderr(self) -> str:
        return self._stderr

    def start(self) -> None:
        self._runner.stdout_chunk.connect(self._on_stdout)
        self._runner.stderr_chunk.connect(self._on_stderr)
        self._runner.exited.connect(self._on_exited)
        self._runner.start()

    # -- runner events --

    def _on_stdout(self, chunk: str) -> None:
        self._stdout += chunk
        theme, sub = self._theme_and_sub()
        for line in split_lines(chunk):
            logger.debug("applier: %s", line)
            self._sink.status(theme, sub, line)
        if self._parser.resolved:
            return
        message = self._parser.feed(self.stdout)
        if message is not None:
            self._handle(message)

    def _on_stderr(self, chunk: str) -> None:
        self._stderr += chunk

    def _on_exited(self, code: int, detail: str) -> None:
        if self._exited:
            return
        self._exited = True
        logger.info("applier exited with %s for %s", code, self._selector or "cycle")
        if self._outcome is None:
            self._resolve_on_exit(code, detail)
        self.finished.emit()

    def _resolve_on_exit(self, code: int, detail: str) -> None:
        # A detail only accompanies runner failures, never a real exit code.
        if code == SPAWN_FAILED_EXIT_CODE and detail:
            self._resolve(ApplyOutcome.failure(detail, ErrorCode.APPLIER_SPAWN_FAILED))
            return
        if code == READ_FAILED_EXIT_CODE and detail:
            self._resolve(ApplyOutcome.failure(detail, ErrorCode.APPLIER_OUTPUT_FAILED))
            return
        # Single-shot tools may print their JSON only at the very end.
        message = self._parser.feed(self.stdout)
        if message is not None:
            self._handle(message)
            return
        terminal = self._parser.finish(code, self.stdout, self.stderr)
        if terminal is None:
            return
        if terminal.success:
            self._resolve(ApplyOutcome.success(terminal.output))
        else:
            self._resolve(ApplyOutcome.failure(terminal.output))

    # -- classification --

    def _handle(self, message: NeedsSub | NeedsWorkshop) -> None:
        message = self._fill_from_selector(message)
        logger.info("applier handshake %s", message.to_dict())
        if isinstance(message, NeedsSub):
            self._sink.handshake(message)
            self._resolve(ApplyOutcome.handshake(message))
            return

        root = self._locator.asset_root()
        if root is None:
            self._sink.settings_missing("Wallpaper Engine workshop folder is not configured")
            path = None
        else:
            path = self._locator.locate(message.asset_id, root=root)
        if path is not None:
            self._sink.asset_found(message.asset_id, message.theme, message.sub, path)
            self._sink.status(
                message.theme,
                message.sub,
                f"Workshop item {message.asset_id} found at {path}",
            )
            self._resolve(ApplyOutcome.asset_present(message))
            return
        self._sink.handshake(message)
        self._resolve(ApplyOutcome.handshake(message))

    def _resolve(self, outcome: ApplyOutcome) -> None:
        if self._outcome is not None:
            logger.debug("ignoring second resolution %s", outcome.to_dict())
            return
        self._outcome = outcome
        self.resolved.emit(outcome)

    def _fill_from_selector(self, message: NeedsSub | NeedsWorkshop) -> NeedsSub | NeedsWorkshop:
        """Take a theme or sub the applier left out from what was requested."""
        if self._selector is None:
            return message
        changes: dict[str, str] = {}
        if not message.theme:
            changes["theme"] = self._selector.theme
        if isinstance(message, NeedsWorkshop) and not message.sub and self._selector.sub:
            changes["sub"] = self._selector.sub
        return replace(message, **changes) if changes else message

    def wait(self, msecs: int = -1) -> bool:
        return self._runner.wait(msecs)

    def _theme_and_sub(self) -> tuple[str, str | None]:
        if self._selector is None:
            return "", None
        return self._selector.theme, self._selector.sub


class ApplyOrchestrator(QObject):
    """Starts apply attempts against the configured applier.

    Attempts are not serialized; overlapping calls each run to their own
    outcome. Running processes cannot be cancelled or timed out.
    """

    attempt_started = Signal(object)    # ApplyAttempt

    def __init__(
        self,
        settings: AppSettings,
        locator: AssetLocator,
        sink: NotificationSink,
        runner_factory: RunnerFactory | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings
        self._locator = locator
        self._sink = sink
        self._runner_factory = runner_factory or ProcessRunner
        self._attempts: list[ApplyAttempt] = []

    @property
    def active_attempts(self) -> tuple[ApplyAttempt, ...]:
        return tuple(self._attempts)

    def wait_for_attempts(self, msecs: int) -> bool:
        """Block until every running applier has exited, up to `msecs` each."""
        done = True
        for attempt in self.active_attempts:
            if not attempt.wait(msecs):
                logger.warning("applier for %s still running", attempt.selector or "cycle")
                done = False
        return done

    def apply(self, selector: ThemeSelector | str) -> ApplyAttempt:
        """Run `<applier> --select <theme[/sub]>`."""
        selector = ThemeSelector.coerce(selector)
        return self._start([SELECT_FLAG, str(selector)], selector)

    def cycle(self) -> ApplyAttempt:
        """Run `<applier> --cycle` to advance to the next theme."""
        return self._start([CYCLE_FLAG], None)

    def _start(self, args: list[str], selector: ThemeSelector | None) -> ApplyAttempt:
        program, full_args = build_applier_command(self._settings.applier_path, args)
        logger.info("running %s %s", program, " ".join(full_args))
        runner = self._runner_factory(program, full_args)
        attempt = ApplyAttempt(selector, runner, self._sink, self._locator, parent=self)
        self._attempts.append(attempt)
        attempt.finished.connect(lambda: self._forget(attempt))
        self.attempt_started.emit(attempt)
        attempt.start()
        return attempt

    def _forget(self, attempt: ApplyAttempt) -> None:
        if attempt in self._attempts:
            self._attempts.remove(attempt)
        attempt.deleteLater()
