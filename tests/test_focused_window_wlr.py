import pytest

from statusblocks.core import BlockError
from statusblocks.focused_window_wlr import ToplevelTracker


def test_active_toplevel_title_reported_once():
    tracker = ToplevelTracker()
    tracker.add(1)
    tracker.set_title(1, "Terminal")
    tracker.set_activated(1, True)
    assert tracker.take_title() is None
    tracker.done(1)
    assert tracker.take_title() == "Terminal"
    assert tracker.take_title() is None


def test_inactive_done_does_not_report():
    tracker = ToplevelTracker()
    tracker.add(1)
    tracker.set_title(1, "Terminal")
    tracker.done(1)
    assert tracker.take_title() is None


def test_deactivation_clears_title():
    tracker = ToplevelTracker()
    tracker.add(1)
    tracker.set_title(1, "Terminal")
    tracker.set_activated(1, True)
    tracker.done(1)
    tracker.take_title()
    tracker.set_activated(1, False)
    tracker.done(1)
    assert tracker.take_title() == ""


def test_closing_active_clears_title():
    tracker = ToplevelTracker()
    tracker.add("a")
    tracker.set_activated("a", True)
    tracker.done("a")
    assert tracker.take_title() == ""
    tracker.set_title("a", "x")
    tracker.done("a")
    tracker.take_title()
    tracker.closed("a")
    assert tracker.take_title() == ""
    with pytest.raises(BlockError):
        tracker.done("a")


def test_closing_inactive_reports_nothing():
    tracker = ToplevelTracker()
    tracker.add(1)
    tracker.add(2)
    tracker.set_title(1, "One")
    tracker.set_activated(1, True)
    tracker.done(1)
    tracker.take_title()
    tracker.closed(2)
    assert tracker.take_title() is None


def test_bytes_title_decoded_lossily():
    tracker = ToplevelTracker()
    tracker.add(1)
    tracker.set_title(1, b"ab\xffcd")
    tracker.set_activated(1, True)
    tracker.done(1)
    title = tracker.take_title()
    assert title.startswith("ab") and title.endswith("cd")
    assert "\ufffd" in title


def test_unknown_handle_raises():
    tracker = ToplevelTracker()
    with pytest.raises(BlockError):
        tracker.set_title(7, "x")
    with pytest.raises(BlockError):
        tracker.closed(7)