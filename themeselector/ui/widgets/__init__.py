"""Reusable widgets for the theme selector window."""

from themeselector.ui.widgets.path_picker import PathPicker
from themeselector.ui.widgets.status_strip import StatusStrip

__all__ = [
    "PathPicker",
    "StatusStrip",
]
