"""Shared building blocks: block states, errors and the per-block event channel."""

from __future__ import annotations

import asyncio
import enum
import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar, Union

T = TypeVar("T")


class State(enum.Enum):
    """Visual state (colour) of a block."""

    IDLE = "idle"
    INFO = "info"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class BlockError(Exception):
    """An error raised while a block gathers or displays its data."""

    def __init__(
        self,
        message: str,
        block: Optional[str] = None,
        block_id: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.block = block
        self.block_id = block_id

    def in_block(self, block: str, block_id: int) -> "BlockError":
        """Return a copy of this error tagged with the block it came from."""
        tagged = BlockError(self.message, block, block_id)
        tagged.__cause__ = self.__cause__ or self
        return tagged

    def __str__(self) -> str:
        if self.block is None:
            return self.message
        return f"in block '{self.block}' (id {self.block_id}): {self.message}"


@dataclass(frozen=True)
class Action:
    """A named action triggered by a click."""

    name: str


@dataclass(frozen=True)
class UpdateRequest:
    """A request to refresh the block immediately."""


Event = Union[Action, UpdateRequest]

_CLOSED = object()


class EventChannel:
    """Delivers click actions and update requests to a running block."""

    def __init__(self, error_interval: float = 5.0) -> None:
        self.error_interval = error_interval
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: Event) -> None:
        """Queue an event for the block."""
        if self._closed:
            raise BlockError("Failed to send event")
        self._queue.put_nowait(event)

    def close(self) -> None:
        """Stop accepting events; pending ones are still delivered."""
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    async def event(self) -> Event:
        """Wait for the next event."""
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise BlockError("events stream ended")
        return item

    async def wait_for_update_request(self) -> None:
        """Wait until an update request arrives, discarding other events."""
        while await self.event() != UpdateRequest():
            pass

    async def recoverable(
        self,
        func: Callable[[], Awaitable[T]],
        on_error: Optional[Callable[[BlockError], object]] = None,
    ) -> T:
        """Call ``func`` until it succeeds, reporting each failure.

        After a failure the next attempt happens when ``error_interval``
        elapses or an update request arrives, whichever comes first.
        """
        while True:
            try:
                return await func()
            except BlockError as err:
                if on_error is not None:
                    result = on_error(err)
                    if inspect.isawaitable(result):
                        await result
            await self._pause_after_error()

    async def _pause_after_error(self) -> None:
        sleeper = asyncio.ensure_future(asyncio.sleep(self.error_interval))
        waiter = asyncio.ensure_future(self.wait_for_update_request())
        done, pending = await asyncio.wait(
            {sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        if waiter in done:
            waiter.result()


def threshold_state(value: float, critical: float, warning: float, info: float) -> State:
    """Map a load-like value onto a state using strict upper thresholds."""
    if value > critical:
        return State.CRITICAL
    if value > warning:
        return State.WARNING
    if value > info:
        return State.INFO
    return State.IDLE