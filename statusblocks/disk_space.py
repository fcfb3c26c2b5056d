"""Disk usage statistics and the block state derived from them."""

from __future__ import annotations

import enum
import math
import os
from dataclasses import dataclass
from typing import Optional, Union

from statusblocks.core import BlockError, State

_UNIT_FACTORS = {
    "TB": 1e-12,
    "GB": 1e-9,
    "MB": 1e-6,
    "KB": 1e-3,
    "B": 1.0,
}


class InfoType(enum.Enum):
    """Which figure decides the block state."""

    AVAILABLE = "available"
    FREE = "free"
    USED = "used"


def _ratio(num: float, den: float) -> float:
    if den == 0:
        if num == 0 or math.isnan(num):
            return math.nan
        return math.copysign(math.inf, num)
    return num / den


@dataclass(frozen=True)
class DiskUsage:
    """Filesystem figures in bytes."""

    total: int
    used: int
    available: int
    free: int

    def value(self, info_type: InfoType) -> int:
        """The figure selected by ``info_type``."""
        return {
            InfoType.AVAILABLE: self.available,
            InfoType.FREE: self.free,
            InfoType.USED: self.used,
        }[info_type]

    def percentage(self, info_type: InfoType) -> float:
        """The selected figure as a percentage of the total."""
        return _ratio(float(self.value(info_type)), float(self.total)) * 100.0


def parse_alert_unit(unit: Optional[str]) -> Optional[float]:
    """Scale factor from bytes to the configured alert unit; None means percent."""
    if unit is None:
        return None
    try:
        return _UNIT_FACTORS[unit]
    except KeyError:
        raise BlockError(f"Unknown unit: '{unit}'") from None


def disk_usage(path: Union[str, os.PathLike] = "/") -> DiskUsage:
    """Query the filesystem holding ``path`` (``~`` is expanded)."""
    expanded = os.path.expanduser(os.fspath(path))
    try:
        st = os.statvfs(expanded)
    except OSError as exc:
        raise BlockError("failed to retrieve statvfs") from exc
    return DiskUsage(
        total=st.f_blocks * st.f_frsize,
        used=(st.f_blocks - st.f_bfree) * st.f_frsize,
        available=st.f_bavail * st.f_bsize,
        free=st.f_bfree * st.f_bsize,
    )


def alert_value(usage: DiskUsage, info_type: InfoType, unit: Optional[float]) -> float:
    """The value compared against the thresholds, in the configured unit or percent."""
    if unit is None:
        return usage.percentage(info_type)
    return float(usage.value(info_type)) * unit


def disk_state(value: float, info_type: InfoType, alert: float = 10.0, warning: float = 20.0) -> State:
    """Block state: high values alarm for USED, low values for FREE and AVAILABLE."""
    if info_type is InfoType.USED:
        if value >= alert:
            return State.CRITICAL
        if value >= warning:
            return State.WARNING
        return State.IDLE
    if value <= alert:
        return State.CRITICAL
    if value <= warning:
        return State.WARNING
    return State.IDLE