"""CPU utilisation, frequency and turbo boost statistics."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from statusblocks.core import BlockError

PROC_STAT_PATH = Path("/proc/stat")
CPUINFO_PATH = Path("/proc/cpuinfo")
CPU_BOOST_PATH = Path("/sys/devices/system/cpu/cpufreq/boost")
CPU_NO_TURBO_PATH = Path("/sys/devices/system/cpu/intel_pstate/no_turbo")

BOXCHARS = "▁▂▃▄▅▆▇█"

_U64 = re.compile(r"\+?[0-9]+")
_LEADING_WORD = re.compile(r"^[^ \t\n\r\f\v]*")


@dataclass(frozen=True)
class CpuTime:
    """Accumulated idle and non-idle jiffies of a CPU."""

    idle: int
    non_idle: int

    def utilization(self, old: "CpuTime") -> float:
        """Fraction of time spent busy since ``old``, clamped to [0, 1]."""
        elapsed = max(0, (self.idle + self.non_idle) - (old.idle + old.non_idle))
        if elapsed == 0:
            return 0.0
        busy = (self.non_idle - old.non_idle) / elapsed
        return min(max(busy, 0.0), 1.0)


def _parse_u64(token: str) -> Optional[int]:
    if not _U64.fullmatch(token):
        return None
    value = int(token)
    return value if value < 1 << 64 else None


def parse_cpu_time(text: str) -> Optional[CpuTime]:
    """Parse the numeric fields of a ``cpu`` line of /proc/stat.

    Returns None if fewer than seven valid counters are present.
    """
    tokens = text.split()
    if len(tokens) < 7:
        return None
    fields = [_parse_u64(token) for token in tokens[:7]]
    if any(field is None for field in fields):
        return None
    user, nice, system, idle, iowait, irq, softirq = fields
    return CpuTime(idle=idle + iowait, non_idle=user + nice + system + irq + softirq)


def parse_proc_stat(text: str) -> Tuple[CpuTime, List[CpuTime]]:
    """Return the total CPU time and the per-core times from /proc/stat content."""
    total: Optional[CpuTime] = None
    cores: List[CpuTime] = []
    for line in text.splitlines():
        if not line.startswith("cpu"):
            continue
        parsed = parse_cpu_time(_LEADING_WORD.sub("", line, count=1))
        if parsed is None:
            raise BlockError("failed to parse /proc/stat")
        if line.startswith("cpu "):
            total = parsed
        else:
            cores.append(parsed)
    if total is None:
        raise BlockError("failed to parse /proc/stat")
    return total, cores


def parse_cpu_frequencies(text: str) -> List[float]:
    """Per-core frequencies in Hz from /proc/cpuinfo content (reported in MHz)."""
    freqs: List[float] = []
    for line in text.splitlines():
        if not line.startswith("cpu MHz"):
            continue
        stripped = line.rstrip()
        start = 0
        while start < len(stripped) and not ("0" <= stripped[start] <= "9"):
            start += 1
        value = stripped[start:]
        try:
            if "_" in value:
                raise ValueError(value)
            freqs.append(float(value) * 1e6)
        except ValueError as exc:
            raise BlockError("failed to parse /proc/cpuinfo") from exc
    return freqs


def barchart(utilizations: Sequence[float]) -> str:
    """One bar character per core, its height showing the core's utilisation."""
    return "".join(BOXCHARS[int(7.5 * u)] for u in utilizations)


def _read_file(path: Union[str, Path]) -> Optional[str]:
    try:
        return Path(path).read_text().rstrip()
    except (OSError, UnicodeDecodeError):
        return None


def boost_status(
    boost_path: Union[str, Path] = CPU_BOOST_PATH,
    no_turbo_path: Union[str, Path] = CPU_NO_TURBO_PATH,
) -> Optional[bool]:
    """Turbo boost state from the cpufreq or intel_pstate interface, if available."""
    boost = _read_file(boost_path)
    if boost is not None:
        return boost.startswith("1")
    no_turbo = _read_file(no_turbo_path)
    if no_turbo is not None:
        return no_turbo.startswith("0")
    return None


def read_proc_stat(path: Union[str, Path] = PROC_STAT_PATH) -> Tuple[CpuTime, List[CpuTime]]:
    """Read and parse /proc/stat."""
    try:
        text = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as exc:
        raise BlockError("failed to read /proc/stat") from exc
    return parse_proc_stat(text)


def read_frequencies(path: Union[str, Path] = CPUINFO_PATH) -> List[float]:
    """Read per-core frequencies in Hz from /proc/cpuinfo."""
    try:
        text = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as exc:
        raise BlockError("failed to read /proc/cpuinfo") from exc
    return parse_cpu_frequencies(text)


def cpu_values(
    utilization_avg: float,
    utilizations: Sequence[float],
    freqs: Sequence[float],
) -> Dict[str, object]:
    """Placeholder values for the block (utilisations in percent, frequencies in Hz)."""
    values: Dict[str, object] = {
        "barchart": barchart(utilizations),
        "utilization": utilization_avg * 100.0,
    }
    if freqs:
        values["frequency"] = sum(freqs) / len(freqs)
        values["max_frequency"] = max(freqs)
    for index, freq in enumerate(freqs, start=1):
        values[f"frequency{index}"] = freq
    for index, utilization in enumerate(utilizations, start=1):
        values[f"utilization{index}"] = utilization * 100.0
    return values