"""Wait for a workshop item to finish downloading, then re-apply the theme."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QTimer, Signal

from themeselector.core.selector import ThemeSelector

if TYPE_CHECKING:
    from themeselector.core.asset_locator import AssetLocator
    from themeselector.core.orchestrator import ApplyAttempt, ApplyOrchestrator
    from themeselector.ui.events import NotificationSink

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 2000


class WatchState(Enum):
    POLLING = "polling"
    FOUND = "found"
    CANCELLED = "cancelled"


@dataclass
class WatchTask:
    """One pending workshop download."""

    watch_id: str
    asset_id: str
    theme: str
    sub: str | None
    interval_ms: int = POLL_INTERVAL_MS
    state: WatchState = WatchState.POLLING
    ticks: int = 0
    timer: QTimer | None = field(default=None, repr=False)

    @property
    def selector(self) -> ThemeSelector:
        return ThemeSelector(self.theme, self.sub)


class WorkshopWatcher(QObject):
    """Registry of watch tasks, each polling the asset locator on a timer.

    A task ends when the item appears (one follow-up apply is started) or
    when it is cancelled. There is no upper bound on how long a task polls.
    """

    watch_started = Signal(str)             # watch id
    watch_finished = Signal(str, str)       # watch id, final state value
    reapply_started = Signal(str, object)   # watch id, ApplyAttempt

    def __init__(
        self,
        locator: AssetLocator,
        orchestrator: ApplyOrchestrator,
        sink: NotificationSink,
        interval_ms: int = POLL_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._locator = locator
        self._orchestrator = orchestrator
        self._sink = sink
        self._interval_ms = interval_ms
        self._tasks: dict[str, WatchTask] = {}

    def start(self, asset_id: str, theme: str, sub: str | None = None) -> str:
        """Begin polling for `asset_id`; returns an opaque watch id.

        Raises ValueError for an empty theme or asset id; nothing is
        registered in that case.
        """
        selector = ThemeSelector(theme, sub or None)
        asset_id = str(asset_id).strip()
        if not asset_id:
            raise ValueError("Workshop watch needs an item id")
        task = WatchTask(
            watch_id=uuid.uuid4().hex,
            asset_id=asset_id,
            theme=selector.theme,
            sub=selector.sub,
            interval_ms=self._interval_ms,
        )
        timer = QTimer(self)
        timer.setInterval(task.interval_ms)
        timer.timeout.connect(lambda watch_id=task.watch_id: self.tick(watch_id))
        task.timer = timer
        self._tasks[task.watch_id] = task
        timer.start()
        logger.info("watching workshop item %s for %s (%s)", task.asset_id, task.selector, task.watch_id)
        self.watch_started.emit(task.watch_id)
        return task.watch_id

    def cancel(self, watch_id: str) -> bool:
        """Stop a watch. Returns False if the id is unknown or already done."""
        task = self._tasks.pop(watch_id, None)
        if task is None:
            return False
        task.state = WatchState.CANCELLED
        self._stop_timer(task)
        logger.info("cancelled watch %s after %d ticks", watch_id, task.ticks)
        self.watch_finished.emit(watch_id, task.state.value)
        return True

    def cancel_all(self) -> int:
        return sum(1 for watch_id in list(self._tasks) if self.cancel(watch_id))

    def task(self, watch_id: str) -> WatchTask | None:
        return self._tasks.get(watch_id)

    def active_watch_ids(self) -> list[str]:
        return list(self._tasks)

    def tick(self, watch_id: str) -> ApplyAttempt | None:
        """Poll once. Returns the follow-up attempt when the item appears."""
        task = self._tasks.get(watch_id)
        if task is None or task.state is not WatchState.POLLING:
            return None
        task.ticks += 1
        path = self._locator.locate(task.asset_id)
        if path is None:
            return None

        task.state = WatchState.FOUND
        self._stop_timer(task)
        del self._tasks[watch_id]
        logger.info("workshop item %s appeared at %s after %d ticks", task.asset_id, path, task.ticks)
        self._sink.asset_found(task.asset_id, task.theme, task.sub, path)
        self.watch_finished.emit(watch_id, task.state.value)
        attempt = self._orchestrator.apply(task.selector)
        self.reapply_started.emit(watch_id, attempt)
        return attempt

    @staticmethod
    def _stop_timer(task: WatchTask) -> None:
        if task.timer is not None:
            task.timer.stop()
            task.timer.deleteLater()
            task.timer = None
