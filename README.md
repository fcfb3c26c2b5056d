# statusblocks

Building blocks for a status bar on Linux. Each module reads one kind of
system information and turns it into placeholder values and a `State`
(idle, info, good, warning, critical) that a bar can display.

## Modules

| Module | What it provides |
|--------|------------------|
| `statusblocks.core` | `State`, `BlockError`, the `Action` and `UpdateRequest` events, `EventChannel`, `threshold_state` |
| `statusblocks.battery` | `BatteryStatus`, `BatteryInfo`, `BatteryConfig`, `DeviceName`; `apply_thresholds`, `icon_and_state`, `select_format`, `format_time` |
| `statusblocks.battery_sysfs` | `SysfsBattery`, reading `/sys/class/power_supply`; `compute_info` derives capacity, power and time remaining from raw readings |
| `statusblocks.battery_apc` | `ApcUpsDevice`, asking an apcupsd server (default `localhost:3551`) for its status |
| `statusblocks.cpu` | `/proc/stat` and `/proc/cpuinfo` parsing, per-core utilization, `barchart`, `boost_status`, `cpu_values` |
| `statusblocks.amd_gpu` | `read_gpu_info` for an AMD card under `/sys/class/drm`, `gpu_state` |
| `statusblocks.disk_space` | `disk_usage` (via `statvfs`), `alert_value`, `disk_state`, `parse_alert_unit` |
| `statusblocks.apt` | `AptChecker`, running `apt` against a private package database; update counting and state helpers |
| `statusblocks.dnf` | `get_updates_list` (runs `dnf check-update`) and `count_updates` |
| `statusblocks.docker` | `fetch_status` over the Docker daemon's Unix socket, `DockerStatus` |
| `statusblocks.github` | `get_stats` for unread notifications, `stats_state`, `should_show` |
| `statusblocks.external_ip` | `fetch_info` from a location service, `IPAddressInfo`, `ip_values` |
| `statusblocks.custom` | `run_command`, `stream_lines`, `CommandCycle`, `parse_input` for JSON output, `choose_shell` |
| `statusblocks.focused_window` | `WindowInfo` and its placeholder values |
| `statusblocks.focused_window_sway` | `SwayTracker`, updating `WindowInfo` from sway/i3 window and workspace events |
| `statusblocks.focused_window_wlr` | `ToplevelTracker`, following foreign-toplevel handles and reporting the active title |

Errors are raised as `BlockError`, so a bar can catch them per block and
show the message instead of the block's usual output.

## Installation

```sh
pip install .
```

The package needs nothing beyond the Python standard library. The apt,
dnf and custom modules start the `apt`, `apt-cache`, `sh` or configured
shell programs.

## Examples

CPU utilization between two samples of `/proc/stat`:

```python
import time
from statusblocks.cpu import read_proc_stat, barchart

total_before, cores_before = read_proc_stat("/proc/stat")
time.sleep(1)
total_after, cores_after = read_proc_stat("/proc/stat")

average = total_after.utilization(total_before)
per_core = [new.utilization(old) for new, old in zip(cores_after, cores_before)]
print(f"{average:.0%}", barchart(per_core))
```

Battery status from sysfs:

```python
from statusblocks.battery import BatteryConfig, apply_thresholds, format_time, icon_and_state
from statusblocks.battery_sysfs import SysfsBattery

info = SysfsBattery().get_info()
if info is None:
    print("no battery")
else:
    info = apply_thresholds(info, BatteryConfig())
    icon, progress, state = icon_and_state(info, BatteryConfig())
    print(info.status, info.capacity, state)
    if info.time_remaining is not None:
        print(format_time(info.time_remaining))
```

Disk usage and its state:

```python
from statusblocks.disk_space import InfoType, disk_usage, alert_value, disk_state

usage = disk_usage("/")
value = alert_value(usage, InfoType.AVAILABLE, None)
print(disk_state(value, InfoType.AVAILABLE, 10.0, 20.0))
```

Waiting between updates with an `EventChannel`:

```python
import asyncio
from statusblocks.core import EventChannel, UpdateRequest

async def main():
    channel = EventChannel()
    channel.send(UpdateRequest())
    await channel.wait_for_update_request()

asyncio.run(main())
```

`EventChannel.recoverable(func, on_error)` retries an async function until
it succeeds, passing each `BlockError` to `on_error` and waiting
`error_interval` seconds or for an update request between attempts.

## What the package does not do

- There is no command that runs a bar. The package gathers values and
  states; it does not render `$placeholder` format strings, read a
  configuration file, or write any bar protocol.
- It does not read or set backlight brightness.
- Batteries are read from sysfs or apcupsd only; there is no UPower or
  other D-Bus access, and no Bluetooth, notification or other D-Bus blocks.
- The focused-window trackers only interpret events handed to them; they
  do not connect to sway/i3 IPC or to a Wayland compositor themselves.

## Running the tests

```sh
pip install .[test]
pytest
```