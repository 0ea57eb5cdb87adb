"""QApplication bootstrap."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

from PySide6.QtWidgets import QApplication

from themeselector.config.settings import AppSettings
from themeselector.core.asset_locator import AssetLocator
from themeselector.core.catalog import ThemeCatalog
from themeselector.core.orchestrator import ApplyOrchestrator
from themeselector.errors import ThemeSelectorError, classify_exception, format_error_for_user
from themeselector.runtime_paths import install_root, is_frozen
from themeselector.ui.events import SignalSink
from themeselector.ui.main_window import MainWindow
from themeselector.workers.workshop_watcher import WorkshopWatcher


def configure_logging(settings: AppSettings, name: str = "themeselector") -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    log_dir: Path | None = None
    failure: ThemeSelectorError | None = None
    try:
        log_dir = settings.app_data_dir / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            log_dir / "themeselector.log",
            maxBytes=512_000,
            backupCount=3,
            encoding="utf-8",
        )
    except OSError as exc:
        failure = classify_exception(exc, path=log_dir)
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    if failure is not None:
        logger.warning("file logging disabled: %s", format_error_for_user(failure))
    return logger


def run_app() -> int:
    """Initialize and run the application."""
    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    app.setApplicationName("Theme Selector")
    app.setOrganizationName("ThemeSelector")
    settings = AppSettings()
    logger = configure_logging(settings)
    logger.info("startup mode frozen=%s install_root=%s", is_frozen(), install_root())

    applier = Path(settings.applier_path)
    if not applier.exists():
        logger.warning("theme applier not found at %s", applier)

    sink = SignalSink()
    locator = AssetLocator(settings)
    orchestrator = ApplyOrchestrator(settings, locator, sink)
    watcher = WorkshopWatcher(locator, orchestrator, sink)
    catalog = ThemeCatalog(Path(settings.themes_root))

    window = MainWindow(settings, catalog, orchestrator, watcher, sink, locator)
    errors = catalog.load_errors()
    if errors:
        logger.warning("theme load warnings: %s", " | ".join(errors[:6]))
    window.show()

    exit_code = app.exec()
    return exit_code
