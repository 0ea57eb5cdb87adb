"""Locate Wallpaper Engine workshop items on disk."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from themeselector.config.settings import AppSettings, SettingsRecord

logger = logging.getLogger(__name__)

WALLPAPER_ENGINE_APP_ID = "431960"
ASSET_ROOT_MARKER = Path("steamapps") / "workshop" / "content" / WALLPAPER_ENGINE_APP_ID
APPLIER_EXE_MARKER = Path("steamapps") / "common" / "wallpaper_engine" / "wallpaper64.exe"

# Checked in order; the first root holding both markers wins.
DEFAULT_CANDIDATE_ROOTS: tuple[Path, ...] = (
    Path("C:/Program Files (x86)/Steam"),
    Path("C:/Program Files/Steam"),
    Path("D:/Steam"),
    Path("D:/SteamLibrary"),
    Path("E:/Steam"),
    Path("E:/SteamLibrary"),
    Path("F:/SteamLibrary"),
)


@dataclass(frozen=True, slots=True)
class DetectedInstall:
    """A Steam root that carries both the workshop folder and Wallpaper Engine."""

    root: Path
    asset_root: Path
    wallpaper_engine_path: Path


class AssetLocator:
    """Resolves workshop item ids to folders under the configured asset root.

    When the settings hold no usable asset root, the candidate roots are
    searched once and the first complete install found is written back.
    """

    def __init__(
        self,
        settings: AppSettings,
        candidate_roots: Iterable[Path] | None = None,
    ) -> None:
        self._settings = settings
        roots = DEFAULT_CANDIDATE_ROOTS if candidate_roots is None else candidate_roots
        self._candidate_roots = tuple(Path(root) for root in roots)

    @property
    def candidate_roots(self) -> tuple[Path, ...]:
        return self._candidate_roots

    def asset_root(self) -> Path | None:
        """Return the configured asset root, auto-detecting it if needed."""
        record = self._settings.load_record()
        if record.has_asset_root():
            return Path(record.asset_root)
        detected = self.auto_detect()
        if detected is None:
            return None
        return detected.asset_root

    def locate(self, asset_id: str, root: Path | None = None) -> Path | None:
        """Return `<asset root>/<asset_id>` if it exists, else None.

        Pass `root` when it was already resolved to skip reading settings.
        """
        asset_id = (asset_id or "").strip()
        if not asset_id:
            return None
        if root is None:
            root = self.asset_root()
        if root is None:
            return None
        candidate = root / asset_id
        if candidate.exists():
            return candidate
        return None

    def auto_detect(self) -> DetectedInstall | None:
        """Search candidate roots and persist the first complete install."""
        for root in self._candidate_roots:
            asset_root = root / ASSET_ROOT_MARKER
            exe_path = root / APPLIER_EXE_MARKER
            try:
                found = asset_root.is_dir() and exe_path.is_file()
            except OSError:
                continue
            if not found:
                continue
            detected = DetectedInstall(root=root, asset_root=asset_root, wallpaper_engine_path=exe_path)
            self._persist(detected)
            logger.info("auto-detected workshop root %s", asset_root)
            return detected
        logger.info("no workshop root among %d candidates", len(self._candidate_roots))
        return None

    def _persist(self, detected: DetectedInstall) -> None:
        record = self._settings.load_record()
        self._settings.save_record(
            SettingsRecord(
                applier_path=record.applier_path,
                asset_root=str(detected.asset_root),
                wallpaper_engine_path=str(detected.wallpaper_engine_path),
            )
        )
