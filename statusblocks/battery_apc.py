"""Battery driver talking to an apcupsd network information server."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Iterable, Optional, Tuple

from statusblocks.battery import BatteryInfo, BatteryStatus, DeviceName
from statusblocks.core import BlockError

log = logging.getLogger(__name__)

DEFAULT_ADDRESS = "localhost:3551"


class PropertyMap(dict):
    """Key/value pairs reported by apcupsd."""

    def get_property(self, name: str, unit: str) -> float:
        """Return the numeric part of ``name``, checking that its unit is ``unit``."""
        stat = self.get(name)
        if stat is None:
            raise BlockError(f"{name} not in apc ups data")
        value, sep, actual_unit = stat.partition(" ")
        if not sep:
            raise BlockError(f"could not split {name}")
        if actual_unit != unit:
            raise BlockError(
                f"Expected unit for {name} are {unit}, but got {actual_unit}"
            )
        try:
            return float(value)
        except ValueError as exc:
            raise BlockError("Could not parse data") from exc


def parse_status(lines: Iterable[str]) -> PropertyMap:
    """Build a property map from ``KEY : value`` lines; other lines are ignored."""
    props = PropertyMap()
    for line in lines:
        key, sep, value = line.partition(":")
        if sep:
            props[key.strip()] = value.strip()
    return props


def encode_message(msg: bytes) -> bytes:
    """Frame a message with its big-endian 16-bit length."""
    if len(msg) >= 1 << 16:
        raise BlockError("msg is too long, it must be less than 2^16 characters long")
    return len(msg).to_bytes(2, "big") + msg


def info_from_properties(props: PropertyMap) -> Optional[BatteryInfo]:
    """Interpret apcupsd status data; None when the UPS is not reachable."""
    status_str = props.get("STATUS", "COMMLOST")
    if status_str == "COMMLOST":
        return None
    try:
        capacity = props.get_property("BCHARGE", "Percent")
    except BlockError:
        return None

    if status_str == "ONBATT":
        status = BatteryStatus.EMPTY if capacity == 0.0 else BatteryStatus.DISCHARGING
    elif status_str == "ONLINE":
        status = BatteryStatus.FULL if capacity == 100.0 else BatteryStatus.CHARGING
    else:
        status = BatteryStatus.UNKNOWN

    power: Optional[float] = None
    with contextlib.suppress(BlockError):
        nominal = props.get_property("NOMPOWER", "Watts")
        load = props.get_property("LOADPCT", "Percent")
        power = nominal * load / 100.0

    time_remaining: Optional[float] = None
    with contextlib.suppress(BlockError):
        time_remaining = props.get_property("TIMELEFT", "Minutes") * 60.0

    return BatteryInfo(
        status=status,
        capacity=capacity,
        power=power,
        time_remaining=time_remaining,
    )


def _split_address(addr: str) -> Tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep or not host:
        raise BlockError("Failed to connect to socket")
    try:
        return host, int(port)
    except ValueError as exc:
        raise BlockError("Failed to connect to socket") from exc


async def _read_line(reader: asyncio.StreamReader) -> Optional[str]:
    try:
        size = int.from_bytes(await reader.readexactly(2), "big")
    except (asyncio.IncompleteReadError, OSError) as exc:
        raise BlockError("Could not read response length from socket") from exc
    if size == 0:
        return None
    try:
        data = await reader.readexactly(size)
    except (asyncio.IncompleteReadError, OSError) as exc:
        raise BlockError("Could not read from socket") from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BlockError("invalid UTF8") from exc


class ApcUpsDevice:
    """A UPS monitored through apcupsd's network interface."""

    def __init__(self, dev_name: Optional[DeviceName] = None, timeout: float = 5.0) -> None:
        exact = dev_name.exact() if dev_name is not None else None
        self.addr = exact or DEFAULT_ADDRESS
        self.timeout = timeout

    async def get_status(self) -> PropertyMap:
        """Ask apcupsd for its status and return the reported properties."""
        host, port = _split_address(self.addr)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), self.timeout
            )
        except (OSError, asyncio.TimeoutError) as exc:
            raise BlockError("Failed to connect to socket") from exc

        try:
            try:
                writer.write(encode_message(b"status"))
                await writer.drain()
            except OSError as exc:
                raise BlockError("Could not write message to socket") from exc
            lines = []
            while (line := await _read_line(reader)) is not None:
                lines.append(line)
        finally:
            writer.close()
            with contextlib.suppress(OSError):
                await writer.wait_closed()
        return parse_status(lines)

    async def get_info(self) -> Optional[BatteryInfo]:
        """Current UPS battery information, or None if it cannot be obtained."""
        try:
            props = await self.get_status()
        except BlockError as err:
            log.debug("%s", err)
            props = PropertyMap()
        return info_from_properties(props)