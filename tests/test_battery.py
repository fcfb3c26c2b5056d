import pytest

from statusblocks.battery import (
    BatteryConfig,
    BatteryInfo,
    BatteryStatus,
    DeviceName,
    apply_thresholds,
    format_time,
    icon_and_state,
    parse_battery_status,
    select_format,
)
from statusblocks.core import BlockError, State


@pytest.mark.parametrize(
    "text, status",
    [
        ("Charging", BatteryStatus.CHARGING),
        ("Discharging", BatteryStatus.DISCHARGING),
        ("Empty", BatteryStatus.EMPTY),
        ("Full", BatteryStatus.FULL),
        ("Not charging", BatteryStatus.NOT_CHARGING),
        ("garbage", BatteryStatus.UNKNOWN),
    ],
)
def test_parse_battery_status(text, status):
    assert parse_battery_status(text) is status


def test_device_name_any():
    name = DeviceName()
    assert name.matches("BAT0")
    assert name.matches("")
    assert name.exact() is None


def test_device_name_regex():
    name = DeviceName("BAT\\d")
    assert name.matches("BAT1")
    assert not name.matches("AC")
    assert name.exact() == "BAT\\d"


def test_device_name_invalid_regex():
    with pytest.raises(BlockError):
        DeviceName("(")


def test_config_defaults_and_bad_driver():
    config = BatteryConfig()
    assert config.full_threshold == 95.0
    assert config.empty_threshold == 7.5
    assert config.driver == "sysfs"
    with pytest.raises(ValueError):
        BatteryConfig(driver="bogus")


def test_apply_thresholds():
    config = BatteryConfig()
    full = apply_thresholds(BatteryInfo(BatteryStatus.CHARGING, 95.0), config)
    assert full.status is BatteryStatus.FULL
    empty = apply_thresholds(BatteryInfo(BatteryStatus.DISCHARGING, 7.5), config)
    assert empty.status is BatteryStatus.EMPTY
    original = BatteryInfo(BatteryStatus.DISCHARGING, 50.0, power=3.0)
    assert apply_thresholds(original, config) == original


def test_format_time():
    assert format_time(5400.0) == "1:30"
    assert format_time(0.0) == "0:00"


def test_format_time_minutes_are_two_digits():
    rendered = format_time(3600.0 * 7)
    hours, minutes = rendered.split(":")
    assert hours == "7"
    assert minutes == "00"


def test_icon_and_state_fixed_statuses():
    config = BatteryConfig()
    assert icon_and_state(BatteryInfo(BatteryStatus.EMPTY, 3.0), config) == (
        "bat",
        0.0,
        State.CRITICAL,
    )
    for status in (BatteryStatus.FULL, BatteryStatus.NOT_CHARGING):
        assert icon_and_state(BatteryInfo(status, 80.0), config) == ("bat", 1.0, State.IDLE)


def test_icon_and_state_charging():
    icon, value, state = icon_and_state(
        BatteryInfo(BatteryStatus.CHARGING, 10.0), BatteryConfig()
    )
    assert icon == "bat_charging"
    assert state is State.GOOD
    assert 0.0 <= value <= 1.0


@pytest.mark.parametrize(
    "capacity, state",
    [
        (15.0, State.CRITICAL),
        (30.0, State.WARNING),
        (60.0, State.INFO),
        (61.0, State.GOOD),
    ],
)
def test_icon_and_state_discharging(capacity, state):
    icon, value, got = icon_and_state(
        BatteryInfo(BatteryStatus.DISCHARGING, capacity), BatteryConfig()
    )
    assert icon == "bat"
    assert got is state
    assert 0.0 <= value <= 1.0


def test_icon_and_state_idle_between_info_and_good():
    config = BatteryConfig(info=60.0, good=70.0)
    _, _, state = icon_and_state(BatteryInfo(BatteryStatus.DISCHARGING, 65.0), config)
    assert state is State.IDLE


def test_select_format():
    config = BatteryConfig()
    assert getattr(config, select_format(BatteryStatus.FULL)) == " $icon "
    assert getattr(config, select_format(BatteryStatus.DISCHARGING)) == " $icon $percentage "
    assert select_format(BatteryStatus.EMPTY) == "empty_format"
    assert select_format(BatteryStatus.NOT_CHARGING) == "not_charging_format"
    assert select_format(BatteryStatus.UNKNOWN) == "format"