"""Runtime path helpers for source and frozen executable modes."""

from __future__ import annotations

from pathlib import Path
import sys


def is_frozen() -> bool:
    """Return True when running from a PyInstaller bundle."""
    return bool(getattr(sys, "frozen", False))


def bundle_root() -> Path:
    """Return the runtime extraction root for frozen mode, else package parent."""
    if is_frozen():
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            return Path(meipass)
    return Path(__file__).resolve().parent.parent


def install_root() -> Path:
    """Return the folder that holds theme.ps1 and yasb-themes/.

    Frozen builds live next to those files, so the executable's folder is
    used instead of the extraction directory.
    """
    if is_frozen():
        return Path(sys.executable).resolve().parent
    return bundle_root()


def default_applier_path() -> Path:
    return install_root() / "theme.ps1"


def default_themes_root() -> Path:
    return install_root() / "yasb-themes"
