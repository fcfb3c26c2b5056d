"""Pending package updates on Debian-based systems, queried through apt."""

from __future__ import annotations

import os
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterator, Optional, Pattern, Union

from statusblocks.core import BlockError, State

DEFAULT_FORMAT = " $icon $count.eng(w:1) "

_PACKAGE_NAME = re.compile(r"(.*)/.*")
_PHASED = re.compile(r".*\(phased (\d+)%\).*")

RegexLike = Union[str, Pattern[str]]


def _lines(text: str) -> Iterator[str]:
    if text.endswith("\n"):
        text = text[:-1]
    if not text:
        return
    for line in text.split("\n"):
        yield line[:-1] if line.endswith("\r") else line


def _compile(pattern: Optional[RegexLike], what: str) -> Optional[Pattern[str]]:
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise BlockError(f"invalid {what} updates regex") from exc


def apt_config_text(cache_dir: Union[str, os.PathLike]) -> str:
    """Configuration that keeps apt's state and cache inside ``cache_dir``."""
    directory = os.fspath(cache_dir)
    return "\n".join(
        [
            f'Dir::State "{directory}";',
            'Dir::State::lists "lists";',
            f'Dir::Cache "{directory}";',
            'Dir::Cache::srcpkgcache "srcpkgcache.bin";',
            'Dir::Cache::pkgcache "pkgcache.bin";',
        ]
    )


def count_updates(
    updates: str, is_phased: Optional[Callable[[str], bool]] = None
) -> int:
    """Count upgradable packages, leaving out phased ones when ``is_phased`` is given."""
    return sum(
        1
        for line in _lines(updates)
        if "[upgradable" in line and (is_phased is None or not is_phased(line))
    )


def has_matching_update(updates: str, pattern: RegexLike) -> bool:
    """Whether any line of the update list matches ``pattern``."""
    regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
    return any(regex.search(line) for line in _lines(updates))


def package_name(line: str) -> str:
    """The package name at the start of an ``apt list`` line."""
    match = _PACKAGE_NAME.search(line)
    if match is None:
        raise BlockError("Couldn't find package name")
    return match.group(1)


def is_phased_policy(output: str) -> bool:
    """Whether ``apt-cache policy`` output shows a phased update below 100%."""
    match = _PHASED.search(output)
    return match is not None and match.group(1) != "100"


def updates_state(
    count: int,
    updates: str,
    warning_regex: Optional[RegexLike] = None,
    critical_regex: Optional[RegexLike] = None,
) -> State:
    """Block state for ``count`` pending updates listed in ``updates``."""
    warning_pattern = _compile(warning_regex, "warning")
    critical_pattern = _compile(critical_regex, "critical")
    if count == 0:
        return State.IDLE
    if critical_pattern is not None and has_matching_update(updates, critical_pattern):
        return State.CRITICAL
    if warning_pattern is not None and has_matching_update(updates, warning_pattern):
        return State.WARNING
    return State.INFO


def select_update_format(count: int) -> str:
    """Name of the configuration field holding the format for ``count`` updates."""
    if count == 0:
        return "format_up_to_date"
    if count == 1:
        return "format_singular"
    return "format"


def _decode(data: bytes, message: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BlockError(message) from exc


class AptChecker:
    """Runs apt against a private package database so no root is needed."""

    def __init__(
        self,
        cache_dir: Optional[Union[str, os.PathLike]] = None,
        ignore_phased_updates: bool = False,
    ) -> None:
        if cache_dir is None:
            self.cache_dir = Path(tempfile.gettempdir()) / "statusblocks-apt"
        else:
            self.cache_dir = Path(cache_dir)
        self.ignore_phased_updates = ignore_phased_updates
        self.config_file = self.cache_dir / "apt.conf"

    def prepare(self) -> Path:
        """Create the cache directory and write apt's configuration file."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BlockError("Failed to create temp dir") from exc
        try:
            self.config_file.write_text(apt_config_text(self.cache_dir))
        except OSError as exc:
            raise BlockError("Failed to write to config file") from exc
        return self.config_file

    def _env(self) -> dict:
        env = dict(os.environ)
        env["APT_CONFIG"] = str(self.config_file)
        return env

    def updates_list(self) -> str:
        """Refresh the package lists and return ``apt list --upgradable`` output."""
        try:
            subprocess.run(
                ["apt", "update"],
                env=self._env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise BlockError("Failed to run `apt update`") from exc
        try:
            result = subprocess.run(
                ["apt", "list", "--upgradable"],
                env=self._env(),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise BlockError("Problem running apt command") from exc
        return _decode(result.stdout, "apt produced non-UTF8 output")

    def _is_phased(self, line: str) -> bool:
        name = package_name(line)
        try:
            result = subprocess.run(
                ["apt-cache", "-c", str(self.config_file), "policy", name],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise BlockError("Problem running apt-cache command") from exc
        output = _decode(result.stdout, "Problem capturing apt-cache command output")
        return is_phased_policy(output)

    def update_count(self, updates: str) -> int:
        """Number of pending updates, honouring ``ignore_phased_updates``."""
        return count_updates(
            updates, self._is_phased if self.ignore_phased_updates else None
        )