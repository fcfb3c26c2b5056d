"""Utilisation and VRAM statistics of an AMD GPU read from sysfs."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from statusblocks.core import BlockError, State, threshold_state

DRM_PATH = Path("/sys/class/drm")


@dataclass(frozen=True)
class GpuInfo:
    utilization_percents: float
    vram_total_bytes: float
    vram_used_bytes: float

    @property
    def vram_used_percents(self) -> float:
        """Used VRAM as a percentage of the total."""
        if self.vram_total_bytes == 0:
            return math.inf if self.vram_used_bytes else math.nan
        return self.vram_used_bytes / self.vram_total_bytes * 100.0


def _read_prop(device: str, prop: str, root: Path) -> Optional[float]:
    try:
        text = (root / device / "device" / prop).read_text().strip()
        return float(text)
    except (OSError, UnicodeDecodeError, ValueError):
        return None


def read_gpu_info(device: str = "card0", root: Union[str, Path] = DRM_PATH) -> GpuInfo:
    """Read utilisation and VRAM figures for ``device``."""
    root = Path(root)
    values = {}
    for prop in ("gpu_busy_percent", "mem_info_vram_total", "mem_info_vram_used"):
        value = _read_prop(device, prop, root)
        if value is None:
            raise BlockError(f"Failed to read {prop}")
        values[prop] = value
    return GpuInfo(
        utilization_percents=values["gpu_busy_percent"],
        vram_total_bytes=values["mem_info_vram_total"],
        vram_used_bytes=values["mem_info_vram_used"],
    )


def gpu_state(utilization: float) -> State:
    """Block state for a utilisation given in percent."""
    return threshold_state(utilization, 90.0, 60.0, 30.0)