import pytest

from statusblocks.core import BlockError, State
from statusblocks.custom import (
    CommandCycle,
    CustomInput,
    choose_shell,
    custom_values,
    parse_input,
    run_command,
    stream_lines,
)

SAMPLE = '{"icon":"weather_thunder","state":"Critical", "text": "Danger!"}'


def test_parse_input_sample():
    parsed = parse_input(SAMPLE)
    assert parsed == CustomInput(
        icon="weather_thunder", state=State.CRITICAL, text="Danger!", short_text=None
    )


def test_parse_input_defaults():
    assert parse_input("{}") == CustomInput()


def test_parse_input_invalid():
    with pytest.raises(BlockError, match="Invalid JSON"):
        parse_input("not json")
    with pytest.raises(BlockError, match="Invalid JSON"):
        parse_input('{"state": "purple"}')
    with pytest.raises(BlockError, match="Invalid JSON"):
        parse_input("[1, 2]")


def test_choose_shell_priority():
    assert choose_shell("zsh", {"SHELL": "/bin/bash"}) == "zsh"
    assert choose_shell(None, {"SHELL": "/bin/bash"}) == "/bin/bash"
    assert choose_shell(None, {}) == "sh"


def test_run_command_trims_output():
    assert run_command("sh", "echo '  hello  '") == "hello"


def test_run_command_invalid_utf8():
    with pytest.raises(BlockError, match="invalid UTF-8"):
        run_command("sh", "printf '\\377'")


def test_run_command_missing_shell():
    with pytest.raises(BlockError, match="failed to run command"):
        run_command("/nonexistent/shell", "true")


def test_command_cycle_wraps():
    cycle = CommandCycle(["echo ON", "echo OFF"])
    assert cycle.current() == "echo ON"
    assert cycle.advance() == "echo OFF"
    assert cycle.advance() == "echo ON"


def test_command_cycle_from_config():
    assert CommandCycle.from_config(command="uname -r").current() == "uname -r"
    assert CommandCycle.from_config("a", ["b", "c"]).current() == "b"
    with pytest.raises(BlockError, match="either 'command' or 'cycle'"):
        CommandCycle.from_config()


def test_custom_values_plain():
    assert custom_values("output", False) == ({"text": "output"}, None)


def test_custom_values_json():
    values, state = custom_values(SAMPLE, True)
    assert values == {"text": "Danger!", "icon": "weather_thunder"}
    assert state is State.CRITICAL


def test_custom_values_json_without_icon():
    values, state = custom_values('{"text": "t", "short_text": "s"}', True)
    assert values == {"text": "t", "short_text": "s"}
    assert state is State.IDLE


def test_stream_lines_yields_then_fails():
    lines = stream_lines("sh", "printf 'a\\nb\\n'")
    assert next(lines) == "a"
    assert next(lines) == "b"
    with pytest.raises(BlockError, match="exited unexpectedly"):
        next(lines)


def test_stream_lines_requires_command():
    with pytest.raises(BlockError, match="'command' must be specified"):
        next(stream_lines("sh", None))