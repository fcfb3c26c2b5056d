import json
import os
import socketserver
import tempfile
import threading
from http.server import BaseHTTPRequestHandler

import pytest

from statusblocks.core import BlockError
from statusblocks.docker import DockerStatus, fetch_status

INFO = {
    "Containers": 7,
    "ContainersRunning": 3,
    "ContainersStopped": 2,
    "ContainersPaused": 2,
    "Images": 11,
    "Name": "host",
}


def test_from_json_mapping():
    status = DockerStatus.from_json(INFO)
    assert status == DockerStatus(total=7, running=3, stopped=2, paused=2, images=11)


def test_from_json_bytes_and_str_agree():
    raw = json.dumps(INFO)
    assert DockerStatus.from_json(raw.encode()) == DockerStatus.from_json(raw)


def test_from_json_missing_key():
    data = dict(INFO)
    del data["Images"]
    with pytest.raises(BlockError, match="Failed to deserialize JSON"):
        DockerStatus.from_json(data)


@pytest.mark.parametrize("bad", [b"not json", b"[1, 2]", json.dumps({**INFO, "Images": "x"})])
def test_from_json_invalid(bad):
    with pytest.raises(BlockError, match="Failed to deserialize JSON"):
        DockerStatus.from_json(bad)


class _Handler(BaseHTTPRequestHandler):
    requests = []
    body = json.dumps(INFO).encode()

    def do_GET(self):
        type(self).requests.append((self.path, self.headers.get("Host")))
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        self.wfile.write(self.body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def docker_socket():
    directory = tempfile.mkdtemp(prefix="sb")
    path = os.path.join(directory, "d.sock")
    _Handler.requests = []
    server = socketserver.UnixStreamServer(path, _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield path
    finally:
        server.shutdown()
        server.server_close()
        os.unlink(path)
        os.rmdir(directory)


def test_fetch_status(docker_socket):
    status = fetch_status(docker_socket)
    assert status == DockerStatus.from_json(INFO)
    assert _Handler.requests == [("/info", "localhost")]


def test_fetch_status_missing_socket(tmp_path):
    with pytest.raises(BlockError, match="Failed to connect to socket"):
        fetch_status(tmp_path / "none.sock")