"""Pending package updates on Fedora systems, queried through dnf."""

from __future__ import annotations

import os
import subprocess
from typing import Iterator

from statusblocks.core import BlockError

DEFAULT_FORMAT = " $icon $count.eng(w:1) "


def _lines(text: str) -> Iterator[str]:
    if text.endswith("\n"):
        text = text[:-1]
    if not text:
        return
    for line in text.split("\n"):
        yield line[:-1] if line.endswith("\r") else line


def count_updates(updates: str) -> int:
    """Number of non-trivial lines in ``dnf check-update`` output."""
    return sum(1 for line in _lines(updates) if len(line.encode("utf-8")) > 1)


def get_updates_list() -> str:
    """Output of ``dnf check-update``; its exit status is not an error."""
    env = dict(os.environ)
    env["LC_LANG"] = "C"
    try:
        result = subprocess.run(
            ["sh", "-c", "dnf check-update -q --skip-broken"],
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise BlockError("Failed to run dnf check-update") from exc
    try:
        return result.stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BlockError("dnf produced non-UTF8 output") from exc