"""Tracks the active toplevel from foreign-toplevel-management events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Union

from statusblocks.core import BlockError


@dataclass
class _Toplevel:
    title: Optional[str] = None
    is_active: bool = False


class ToplevelTracker:
    """Follows toplevel handles and reports the active one's title on change."""

    def __init__(self) -> None:
        self._toplevels: Dict[Hashable, _Toplevel] = {}
        self._active: Optional[Hashable] = None
        self._new_title: Optional[str] = None

    def _get(self, handle: Hashable) -> _Toplevel:
        try:
            return self._toplevels[handle]
        except KeyError:
            raise BlockError(f"unknown toplevel {handle!r}") from None

    def add(self, handle: Hashable) -> None:
        """A new toplevel was announced."""
        self._toplevels[handle] = _Toplevel()

    def set_title(self, handle: Hashable, title: Union[str, bytes]) -> None:
        """Pending title of a toplevel; invalid UTF-8 is replaced."""
        if isinstance(title, (bytes, bytearray)):
            title = bytes(title).decode("utf-8", errors="replace")
        self._get(handle).title = title

    def set_activated(self, handle: Hashable, activated: bool) -> None:
        """Pending activation state of a toplevel."""
        self._get(handle).is_active = activated

    def closed(self, handle: Hashable) -> None:
        """A toplevel went away."""
        self._get(handle)
        if self._active == handle:
            self._active = None
            self._new_title = ""
        del self._toplevels[handle]

    def done(self, handle: Hashable) -> None:
        """Pending state of a toplevel is complete."""
        toplevel = self._get(handle)
        if toplevel.is_active:
            self._active = handle
            self._new_title = toplevel.title or ""
        elif self._active == handle:
            self._active = None
            self._new_title = ""

    def take_title(self) -> Optional[str]:
        """The new focused title since the last call, if it changed."""
        title, self._new_title = self._new_title, None
        return title