"""Container and image counts from the local Docker daemon."""

from __future__ import annotations

import http.client
import json
import os
import socket
from dataclasses import dataclass
from typing import Any, Mapping, Union

from statusblocks.core import BlockError

DEFAULT_SOCKET_PATH = "/var/run/docker.sock"
_TIMEOUT = 10.0

_FIELDS = {
    "total": "Containers",
    "running": "ContainersRunning",
    "stopped": "ContainersStopped",
    "paused": "ContainersPaused",
    "images": "Images",
}


@dataclass(frozen=True)
class DockerStatus:
    total: int
    running: int
    stopped: int
    paused: int
    images: int

    @classmethod
    def from_json(cls, data: Union[bytes, str, Mapping[str, Any]]) -> "DockerStatus":
        """Build the status from the daemon's ``/info`` response."""
        try:
            if isinstance(data, (bytes, bytearray, str)):
                data = json.loads(data)
            if not isinstance(data, Mapping):
                raise ValueError("expected a JSON object")
            values = {}
            for field, key in _FIELDS.items():
                value = data[key]
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"{key} is not an integer")
                values[field] = value
        except (ValueError, KeyError, UnicodeDecodeError) as exc:
            raise BlockError("Failed to deserialize JSON") from exc
        return cls(**values)


class _UnixHTTPConnection(http.client.HTTPConnection):
    def __init__(self, socket_path: str, timeout: float) -> None:
        super().__init__("localhost", timeout=timeout)
        self._socket_path = socket_path

    def connect(self) -> None:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(self.timeout)
            sock.connect(self._socket_path)
        except OSError:
            sock.close()
            raise
        self.sock = sock


def fetch_status(socket_path: Union[str, os.PathLike] = DEFAULT_SOCKET_PATH) -> DockerStatus:
    """Query the daemon listening on ``socket_path`` (``~`` is expanded)."""
    path = os.path.expanduser(os.fspath(socket_path))
    conn = _UnixHTTPConnection(path, _TIMEOUT)
    try:
        try:
            conn.connect()
        except OSError as exc:
            raise BlockError("Failed to connect to socket") from exc
        try:
            conn.request("GET", "/info", headers={"Host": "localhost"})
            response = conn.getresponse()
        except (OSError, http.client.HTTPException) as exc:
            raise BlockError("Failed to get response") from exc
        try:
            body = response.read()
        except (OSError, http.client.HTTPException) as exc:
            raise BlockError("Failed to get response bytes") from exc
    finally:
        conn.close()
    return DockerStatus.from_json(body)