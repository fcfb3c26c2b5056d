"""Battery information shared by all battery drivers, and its presentation."""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from statusblocks.core import BlockError, State

_DRIVERS = ("sysfs", "apc_ups", "upower")


class BatteryStatus(enum.Enum):
    CHARGING = "Charging"
    DISCHARGING = "Discharging"
    EMPTY = "Empty"
    FULL = "Full"
    NOT_CHARGING = "Not charging"
    UNKNOWN = "Unknown"


def parse_battery_status(text: str) -> BatteryStatus:
    """Parse a status string as reported by the kernel; unknown text is UNKNOWN."""
    try:
        return BatteryStatus(text)
    except ValueError:
        return BatteryStatus.UNKNOWN


@dataclass(frozen=True)
class BatteryInfo:
    """A snapshot of a battery's state."""

    status: BatteryStatus
    capacity: float
    power: Optional[float] = None
    time_remaining: Optional[float] = None


class DeviceName:
    """Matches device names: any device, or those matching a regular expression."""

    def __init__(self, pattern: Optional[str] = None) -> None:
        self._pattern = pattern
        if pattern is None:
            self._regex = None
        else:
            try:
                self._regex = re.compile(pattern)
            except re.error as exc:
                raise BlockError("failed to parse regex") from exc

    def matches(self, name: str) -> bool:
        return self._regex is None or self._regex.search(name) is not None

    def exact(self) -> Optional[str]:
        return self._pattern

    def __repr__(self) -> str:
        return f"DeviceName({self._pattern!r})"


@dataclass
class BatteryConfig:
    device: Optional[str] = None
    driver: str = "sysfs"
    model: Optional[str] = None
    interval: float = 10
    format: str = " $icon $percentage "
    full_format: str = " $icon "
    empty_format: str = " $icon "
    not_charging_format: str = " $icon "
    missing_format: str = " $icon "
    info: float = 60.0
    good: float = 60.0
    warning: float = 30.0
    critical: float = 15.0
    full_threshold: float = 95.0
    empty_threshold: float = 7.5

    def __post_init__(self) -> None:
        if self.driver not in _DRIVERS:
            raise ValueError(f"unknown battery driver: {self.driver!r}")


def apply_thresholds(info: BatteryInfo, config: BatteryConfig) -> BatteryInfo:
    """Force FULL or EMPTY status when capacity crosses the configured thresholds."""
    if info.capacity >= config.full_threshold:
        return replace(info, status=BatteryStatus.FULL)
    if info.capacity <= config.empty_threshold:
        return replace(info, status=BatteryStatus.EMPTY)
    return info


def format_time(seconds: float) -> str:
    """Render a duration in seconds as H:MM."""
    hours = int(seconds / 3600.0)
    minutes = int(math.fmod(seconds, 3600.0) / 60.0)
    return f"{hours}:{minutes:02}"


def icon_and_state(info: BatteryInfo, config: BatteryConfig) -> Tuple[str, float, State]:
    """Return the icon name, its progression value and the block state."""
    status, capacity = info.status, info.capacity
    if status is BatteryStatus.EMPTY:
        return "bat", 0.0, State.CRITICAL
    if status in (BatteryStatus.FULL, BatteryStatus.NOT_CHARGING):
        return "bat", 1.0, State.IDLE

    charging = status is BatteryStatus.CHARGING
    icon = "bat_charging" if charging else "bat"
    if charging:
        state = State.GOOD
    elif capacity <= config.critical:
        state = State.CRITICAL
    elif capacity <= config.warning:
        state = State.WARNING
    elif capacity <= config.info:
        state = State.INFO
    elif capacity > config.good:
        state = State.GOOD
    else:
        state = State.IDLE
    return icon, capacity / 100.0, state


def select_format(status: BatteryStatus) -> str:
    """Name of the configuration field holding the format for ``status``."""
    return {
        BatteryStatus.EMPTY: "empty_format",
        BatteryStatus.FULL: "full_format",
        BatteryStatus.NOT_CHARGING: "not_charging_format",
    }.get(status, "format")