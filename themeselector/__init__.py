"""Theme Selector: browse and apply YASB / Wallpaper Engine themes."""

__version__ = "0.4.0"
