"""Title and marks of the currently focused window."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

DEFAULT_FORMAT = " $title.str(max_w:21) |"


@dataclass
class WindowInfo:
    """What the window manager reports about the focused window."""

    title: str = ""
    marks: List[str] = field(default_factory=list)

    def values(self) -> Dict[str, str]:
        """Placeholder values; empty when there is no title."""
        if not self.title:
            return {}
        return {
            "title": self.title,
            "marks": "".join(f"[{mark}]" for mark in self.marks),
            "visible_marks": "".join(
                f"[{mark}]" for mark in self.marks if not mark.startswith("_")
            ),
        }