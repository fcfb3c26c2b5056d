"""A block showing the output of a shell command."""

from __future__ import annotations

import json
import os
import subprocess
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from statusblocks.core import BlockError, State

DEFAULT_FORMAT = "{ $icon|} $text.pango-str() "
DEFAULT_SHORT_FORMAT = "{ $icon|} $short_text.pango-str() |"


@dataclass(frozen=True)
class CustomInput:
    """Block contents supplied by a command as JSON."""

    icon: str = ""
    state: State = State.IDLE
    text: str = ""
    short_text: Optional[str] = None


def _parse_state(value: object) -> State:
    if not isinstance(value, str):
        raise ValueError("state must be a string")
    return State(value.lower())


def _string(data: Mapping, key: str) -> str:
    value = data.get(key, "")
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def parse_input(text: str) -> CustomInput:
    """Parse a command's JSON output; missing fields take their defaults."""
    try:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        short_text = data.get("short_text")
        if short_text is not None and not isinstance(short_text, str):
            raise ValueError("short_text must be a string")
        return CustomInput(
            icon=_string(data, "icon"),
            state=_parse_state(data["state"]) if "state" in data else State.IDLE,
            text=_string(data, "text"),
            short_text=short_text,
        )
    except ValueError as exc:
        raise BlockError("Invalid JSON") from exc


def choose_shell(
    shell: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> str:
    """The configured shell, else ``$SHELL``, else ``sh``."""
    if shell is not None:
        return shell
    env = os.environ if environ is None else environ
    value = env.get("SHELL")
    return value if value is not None else "sh"


def run_command(shell: str, command: str) -> str:
    """Run ``command`` with ``shell -c`` and return its trimmed standard output."""
    try:
        result = subprocess.run([shell, "-c", command], stdout=subprocess.PIPE)
    except OSError as exc:
        raise BlockError("failed to run command") from exc
    try:
        return result.stdout.decode("utf-8").strip()
    except UnicodeDecodeError as exc:
        raise BlockError("the output of command is invalid UTF-8") from exc


class CommandCycle:
    """Commands run in turn, moving on each time the block is clicked."""

    def __init__(self, commands: Sequence[str]) -> None:
        if not commands:
            raise BlockError("either 'command' or 'cycle' must be specified")
        self._commands: List[str] = list(commands)
        self._index = 0

    @classmethod
    def from_config(
        cls, command: Optional[str] = None, cycle: Optional[Sequence[str]] = None
    ) -> "CommandCycle":
        """Prefer ``cycle``; fall back to the single ``command``."""
        if cycle is not None:
            return cls(cycle)
        if command is not None:
            return cls([command])
        raise BlockError("either 'command' or 'cycle' must be specified")

    def current(self) -> str:
        """The command to run now."""
        return self._commands[self._index]

    def advance(self) -> str:
        """Move to the next command, wrapping around, and return it."""
        self._index = (self._index + 1) % len(self._commands)
        return self.current()


def custom_values(stdout: str, json_mode: bool = False) -> Tuple[Dict[str, str], Optional[State]]:
    """Placeholder values for the output, and the new state (None keeps the old one)."""
    if not json_mode:
        return {"text": stdout}, None
    parsed = parse_input(stdout)
    values = {"text": parsed.text}
    if parsed.icon:
        values["icon"] = parsed.icon
    if parsed.short_text is not None:
        values["short_text"] = parsed.short_text
    return values, parsed.state


def stream_lines(shell: str, command: Optional[str]) -> Iterator[str]:
    """Yield each output line of a long-running command.

    Raises BlockError when the command ends, since it is expected to run forever.
    """
    if command is None:
        raise BlockError("'command' must be specified when 'persistent' is set")
    try:
        process = subprocess.Popen([shell, "-c", command], stdout=subprocess.PIPE)
    except OSError as exc:
        raise BlockError("failed to run command") from exc
    try:
        assert process.stdout is not None
        for raw in process.stdout:
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise BlockError("error reading line from child process") from exc
            if line.endswith("\n"):
                line = line[:-1]
                if line.endswith("\r"):
                    line = line[:-1]
            yield line
        raise BlockError("child process exited unexpectedly")
    finally:
        if process.poll() is None:
            process.kill()
        process.wait()
        if process.stdout is not None:
            process.stdout.close()