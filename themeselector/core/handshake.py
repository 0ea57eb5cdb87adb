"""Detect handshake messages embedded in the applier's output.

The applier prints free-form log lines and, at most once, a JSON object
asking for more input:

    {"needs_sub": true, "theme": "<name>"}
    {"needs_workshop": true, "workshop_id": "<id>", "theme": "<name>", "sub": "<name>"}

Output arrives in chunks, so the object may be split across several of
them. `HandshakeParser` is fed the accumulated text after every chunk and
classifies the first complete control object it finds. It resolves at most
once; later feeds are no-ops.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

WORKSHOP_URL_TEMPLATE = "https://steamcommunity.com/sharedfiles/filedetails/?id={asset_id}"

KIND_NEEDS_SUB = "needs_sub"
KIND_NEEDS_WORKSHOP = "needs_workshop"
KIND_TERMINAL = "terminal"


@dataclass(frozen=True, slots=True)
class NeedsSub:
    """The theme has sub-themes and one must be picked before applying."""

    theme: str
    kind: str = field(default=KIND_NEEDS_SUB, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"needs_sub": True, "theme": self.theme}


@dataclass(frozen=True, slots=True)
class NeedsWorkshop:
    """The sub-theme's wallpaper is a workshop item that is not installed."""

    theme: str
    sub: str | None
    asset_id: str
    link: str | None = None
    kind: str = field(default=KIND_NEEDS_WORKSHOP, init=False)

    @property
    def workshop_url(self) -> str:
        return self.link or WORKSHOP_URL_TEMPLATE.format(asset_id=self.asset_id)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "needs_workshop": True,
            "workshop_id": self.asset_id,
            "theme": self.theme,
            "sub": self.sub,
        }
        if self.link:
            data["link"] = self.link
        return data


@dataclass(frozen=True, slots=True)
class Terminal:
    """The applier finished without asking for anything."""

    success: bool
    output: str
    kind: str = field(default=KIND_TERMINAL, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.success, "output": self.output}


HandshakeMessage = Union[NeedsSub, NeedsWorkshop, Terminal]


def split_lines(chunk: str) -> list[str]:
    """Split an output chunk into trimmed, non-empty lines."""
    return [line.strip() for line in chunk.splitlines() if line.strip()]


def classify_payload(payload: Any) -> NeedsSub | NeedsWorkshop | None:
    """Map a decoded JSON value to a control message, or None."""
    if not isinstance(payload, dict):
        return None
    theme = _text(payload.get("theme"))
    if payload.get("needs_sub"):
        return NeedsSub(theme=theme)
    if payload.get("needs_workshop"):
        asset_id = _text(payload.get("workshop_id"))
        if not asset_id:
            return None
        return NeedsWorkshop(
            theme=theme,
            sub=_text(payload.get("sub")) or None,
            asset_id=asset_id,
            link=_text(payload.get("link")) or None,
        )
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class HandshakeParser:
    """Incremental, resolve-once classifier for one apply attempt."""

    def __init__(self) -> None:
        self._decoder = json.JSONDecoder()
        self._message: HandshakeMessage | None = None

    @property
    def resolved(self) -> bool:
        return self._message is not None

    @property
    def message(self) -> HandshakeMessage | None:
        return self._message

    def feed(self, accumulated: str) -> NeedsSub | NeedsWorkshop | None:
        """Classify the accumulated output so far.

        Returns the control message the first time one is complete, and
        None otherwise: when there is no `{` yet, when the object is still
        being written, when the JSON carries no control flag, or when the
        parser has already resolved.
        """
        if self._message is not None:
            return None
        start = accumulated.find("{")
        while start != -1:
            try:
                payload, end = self._decoder.raw_decode(accumulated, start)
            except json.JSONDecodeError:
                # Incomplete or not JSON at all; a later brace may still be.
                start = accumulated.find("{", start + 1)
                continue
            message = classify_payload(payload)
            if message is not None:
                self._message = message
                return message
            start = accumulated.find("{", end)
        return None

    def finish(self, exit_code: int, stdout: str, stderr: str = "") -> Terminal | None:
        """Resolve with the process result, unless already resolved."""
        if self._message is not None:
            return None
        if exit_code == 0:
            terminal = Terminal(success=True, output=stdout)
        else:
            terminal = Terminal(
                success=False,
                output=stderr.strip() or f"process exited {exit_code}",
            )
        self._message = terminal
        return terminal
