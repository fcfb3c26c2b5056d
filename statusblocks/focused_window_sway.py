"""Tracks the focused window from sway/i3 IPC window and workspace events."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from statusblocks.focused_window import WindowInfo


class SwayTracker:
    """Keeps the focused window's title and marks up to date."""

    def __init__(self) -> None:
        self.info = WindowInfo()

    def _clear(self) -> None:
        self.info.title = ""
        self.info.marks = []

    def handle(self, event_type: str, payload: Mapping[str, Any]) -> Optional[WindowInfo]:
        """Apply one IPC event; return the new info, or None if it changed nothing."""
        change = payload.get("change")
        if event_type == "window":
            container = payload.get("container") or {}
            if change == "mark":
                self.info.marks = list(container.get("marks") or [])
            elif change == "focus":
                self.info.title = container.get("name") or ""
                self.info.marks = list(container.get("marks") or [])
            elif change == "title":
                if not container.get("focused"):
                    return None
                self.info.title = container.get("name") or ""
            elif change == "close":
                self._clear()
            else:
                return None
        elif event_type == "workspace" and change == "init":
            self._clear()
        else:
            return None
        return WindowInfo(self.info.title, list(self.info.marks))