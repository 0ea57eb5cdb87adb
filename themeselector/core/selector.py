"""Theme selector strings: `theme`, `theme/sub` or `theme:sub`."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ThemeSelector:
    """A theme name, optionally narrowed to one of its sub-themes."""

    theme: str
    sub: str | None = None

    def __post_init__(self) -> None:
        if not self.theme or not self.theme.strip():
            raise ValueError("Theme selector needs a theme name")

    @classmethod
    def parse(cls, text: str) -> ThemeSelector:
        """Parse `theme`, `theme/sub` or `theme:sub`. `/` wins over `:`."""
        raw = (text or "").strip()
        if "/" in raw:
            parts = raw.split("/")
        elif ":" in raw:
            parts = raw.split(":")
        else:
            parts = [raw]
        theme = parts[0].strip()
        sub = parts[1].strip() if len(parts) > 1 else ""
        return cls(theme=theme, sub=sub or None)

    @classmethod
    def coerce(cls, value: ThemeSelector | str) -> ThemeSelector:
        if isinstance(value, ThemeSelector):
            return value
        return cls.parse(value)

    def __str__(self) -> str:
        if self.sub:
            return f"{self.theme}/{self.sub}"
        return self.theme
