"""Battery driver reading the kernel's power supply class in sysfs."""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from statusblocks.battery import (
    BatteryInfo,
    BatteryStatus,
    DeviceName,
    parse_battery_status,
)
from statusblocks.core import BlockError

log = logging.getLogger(__name__)

POWER_SUPPLY_DEVICES_PATH = Path("/sys/class/power_supply")


class CapacityLevel(enum.Enum):
    FULL = "Full"
    HIGH = "High"
    NORMAL = "Normal"
    LOW = "Low"
    CRITICAL = "Critical"
    UNKNOWN = "Unknown"

    def percentage(self) -> Optional[float]:
        """Approximate charge in percent, or None when the level is unknown."""
        return _LEVEL_PERCENTAGES.get(self)


_LEVEL_PERCENTAGES = {
    CapacityLevel.FULL: 100.0,
    CapacityLevel.HIGH: 75.0,
    CapacityLevel.NORMAL: 50.0,
    CapacityLevel.LOW: 25.0,
    CapacityLevel.CRITICAL: 5.0,
}


def parse_capacity_level(text: str) -> CapacityLevel:
    """Parse a ``capacity_level`` value; unrecognised text is UNKNOWN."""
    try:
        return CapacityLevel(text)
    except ValueError:
        return CapacityLevel.UNKNOWN


@dataclass(frozen=True)
class SysfsReadings:
    """Raw values read from a power supply directory.

    Charges are in uAh, energies in uWh, power in uW, current in uA,
    voltage in uV and times in seconds, exactly as sysfs reports them.
    """

    status: Optional[BatteryStatus] = None
    capacity_level: Optional[CapacityLevel] = None
    capacity: Optional[float] = None
    charge_now: Optional[float] = None
    charge_full: Optional[float] = None
    energy_now: Optional[float] = None
    energy_full: Optional[float] = None
    power_now: Optional[float] = None
    current_now: Optional[float] = None
    voltage_now: Optional[float] = None
    time_to_empty: Optional[float] = None
    time_to_full: Optional[float] = None


def _micro(value: Optional[float]) -> Optional[float]:
    return None if value is None else value * 1e-6


def _div(num: float, den: float) -> float:
    if den == 0:
        if num == 0 or math.isnan(num):
            return math.nan
        return math.copysign(math.inf, num) * math.copysign(1.0, den)
    return num / den


def compute_info(readings: SysfsReadings) -> BatteryInfo:
    """Derive capacity, power and remaining time from raw sysfs readings."""
    charge_now = _micro(readings.charge_now)
    charge_full = _micro(readings.charge_full)
    energy_now = _micro(readings.energy_now)
    energy_full = _micro(readings.energy_full)
    power_now = _micro(readings.power_now)
    current_now = _micro(readings.current_now)
    voltage_now = _micro(readings.voltage_now)

    status = readings.status or BatteryStatus.UNKNOWN

    capacity = readings.capacity
    if capacity is None and charge_now is not None and charge_full is not None:
        capacity = _div(charge_now, charge_full) * 100.0
    if capacity is None and energy_now is not None and energy_full is not None:
        capacity = _div(energy_now, energy_full) * 100.0
    if capacity is None and readings.capacity_level is not None:
        capacity = readings.capacity_level.percentage()
    if capacity is None:
        raise BlockError("Failed to get capacity")

    power = power_now
    if power is None and current_now is not None and voltage_now is not None:
        power = current_now * voltage_now

    time_remaining: Optional[float] = None
    if status is BatteryStatus.CHARGING:
        time_remaining = readings.time_to_full
        if time_remaining is None and power is not None:
            if energy_now is not None and energy_full is not None:
                time_remaining = _div(energy_full - energy_now, power) * 3600.0
            elif None not in (charge_now, charge_full, voltage_now):
                time_remaining = _div((charge_full - charge_now) * voltage_now, power) * 3600.0
    elif status is BatteryStatus.DISCHARGING:
        time_remaining = readings.time_to_empty
        if time_remaining is None and power is not None:
            if energy_now is not None:
                time_remaining = _div(energy_now, power) * 3600.0
            elif charge_now is not None and voltage_now is not None:
                time_remaining = _div(charge_now * voltage_now, power) * 3600.0

    return BatteryInfo(
        status=status,
        capacity=capacity,
        power=power,
        time_remaining=time_remaining,
    )


def _read_text(path: Path, prop: str) -> Optional[str]:
    try:
        return (path / prop).read_text().strip()
    except (OSError, UnicodeDecodeError):
        return None


def _read_float(path: Path, prop: str) -> Optional[float]:
    text = _read_text(path, prop)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _read_u8(path: Path, prop: str) -> Optional[int]:
    text = _read_text(path, prop)
    if text is None:
        return None
    try:
        value = int(text)
    except ValueError:
        return None
    return value if 0 <= value <= 255 else None


class SysfsBattery:
    """A battery found under the power supply class directory."""

    def __init__(
        self,
        dev_name: Optional[DeviceName] = None,
        model: Optional[str] = None,
        root: Union[str, Path] = POWER_SUPPLY_DEVICES_PATH,
    ) -> None:
        self.dev_name = dev_name if dev_name is not None else DeviceName()
        self.model = model
        self.root = Path(root)
        self._path: Optional[Path] = None

    def device_available(self, path: Path) -> bool:
        """Whether the supply at ``path`` is present.

        HID devices (scope ``Device``) are available whenever their directory
        exists; others must report ``present`` as 1.
        """
        return _read_text(path, "scope") == "Device" or _read_u8(path, "present") == 1

    def device_path(self) -> Optional[Path]:
        """The previously found device if still available, else a fresh match.

        System batteries (names starting with BAT or CMB) win over others.
        """
        if self._path is not None and self.device_available(self._path):
            log.debug("battery '%s' is still available", self._path)
            return self._path

        try:
            entries = sorted(self.root.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            raise BlockError(
                f"failed to read {self.root} directory"
            ) from exc

        matching: Optional[Path] = None
        for path in entries:
            name = path.name
            if (
                not self.dev_name.matches(name)
                or _read_text(path, "type") != "Battery"
                or not self.device_available(path)
            ):
                continue

            model_name = _read_text(path, "model_name")
            log.debug("battery '%s', model=%r", path, model_name)
            if self.model is not None and model_name != self.model:
                log.debug("Skipping based on model.")
                continue

            log.debug("Found matching battery: '%s' matches %r", path, self.dev_name)
            if name.startswith(("BAT", "CMB")):
                self._path = path
                return path
            matching = path

        if matching is None:
            log.debug("No batteries found")
            return None
        self._path = matching
        return matching

    def _readings(self, path: Path) -> SysfsReadings:
        status_text = _read_text(path, "status")
        level_text = _read_text(path, "capacity_level")
        return SysfsReadings(
            status=None if status_text is None else parse_battery_status(status_text),
            capacity_level=None if level_text is None else parse_capacity_level(level_text),
            capacity=_read_float(path, "capacity"),
            charge_now=_read_float(path, "charge_now"),
            charge_full=_read_float(path, "charge_full"),
            energy_now=_read_float(path, "energy_now"),
            energy_full=_read_float(path, "energy_full"),
            power_now=_read_float(path, "power_now"),
            current_now=_read_float(path, "current_now"),
            voltage_now=_read_float(path, "voltage_now"),
            time_to_empty=_read_float(path, "time_to_empty"),
            time_to_full=_read_float(path, "time_to_full"),
        )

    def get_info(self) -> Optional[BatteryInfo]:
        """Current battery information, or None when no battery is available."""
        path = self.device_path()
        if path is None:
            return None
        readings = self._readings(path)
        if not self.device_available(path):
            log.debug("battery suddenly unavailable")
            return None
        log.debug("readings = %r", readings)
        return compute_info(readings)